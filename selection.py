"""Filter selection state for browsing the bookshelf."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class FilterSelection:
    """Active filter axes.

    Topic and tag views are mutually exclusive: choosing a topic clears the
    sub-topic and tag, choosing a tag clears the topic and sub-topic. A
    sub-topic can only be chosen under a selected topic.
    """

    topic: str | None = None
    sub_topic: str | None = None
    tag: str | None = None
    search: str = ""

    def select_topic(self, topic: str | None) -> None:
        self.topic = topic
        self.sub_topic = None
        self.tag = None

    def select_sub_topic(self, sub_topic: str | None) -> None:
        if sub_topic is not None and self.topic is None:
            raise ValueError("Select a topic before selecting a sub-topic")
        self.sub_topic = sub_topic

    def select_tag(self, tag: str | None) -> None:
        if tag is None:
            self.tag = None
            return
        self.tag = tag
        self.topic = None
        self.sub_topic = None

    def set_search(self, text: str | None) -> None:
        self.search = text or ""

    def clear(self) -> None:
        self.topic = None
        self.sub_topic = None
        self.tag = None
        self.search = ""

    def copy(self) -> FilterSelection:
        return FilterSelection(
            topic=self.topic,
            sub_topic=self.sub_topic,
            tag=self.tag,
            search=self.search,
        )
