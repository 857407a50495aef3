"""Filter engine: narrows the collection by the active selection."""

from __future__ import annotations

from collections.abc import Sequence

from models import Paper
from selection import FilterSelection


def matches_search(paper: Paper, query: str) -> bool:
    """Case-insensitive substring match over title, authors, tags, topic and sub-topic.

    An empty query matches everything.
    """
    if not query:
        return True

    needle = query.lower()
    if needle in paper.title.lower():
        return True
    if any(needle in author.lower() for author in paper.authors):
        return True
    if any(needle in tag.lower() for tag in paper.tags):
        return True
    if needle in paper.topic.lower():
        return True
    return bool(paper.sub_topic) and needle in paper.sub_topic.lower()


def matches_selection(paper: Paper, selection: FilterSelection) -> bool:
    """Return True if ``paper`` passes every active axis of ``selection``.

    Topic, sub-topic and tag comparisons are exact (case-sensitive).
    """
    if selection.topic and paper.topic != selection.topic:
        return False
    if selection.sub_topic and paper.sub_topic != selection.sub_topic:
        return False
    if selection.tag and selection.tag not in paper.tags:
        return False
    return matches_search(paper, selection.search)


def apply_filters(papers: Sequence[Paper], selection: FilterSelection) -> list[Paper]:
    """Return matching papers, newest first.

    ``papers`` is expected in insertion order; papers sharing an ``added_at``
    value come out most recently inserted first.
    """
    matching = [
        (index, paper)
        for index, paper in enumerate(papers)
        if matches_selection(paper, selection)
    ]
    matching.sort(key=lambda item: (item[1].added_at, item[0]), reverse=True)
    return [paper for _, paper in matching]
