"""Shared typed models for the bookshelf."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class Paper:
    """Stored paper record. ``id`` and ``added_at`` are fixed at creation."""

    id: str
    url: str
    title: str
    summary: str
    authors: list[str]
    topic: str
    tags: list[str]
    added_at: int  # milliseconds since epoch
    sub_topic: str | None = None
    journal: str | None = None
    publish_date: str | None = None


@dataclass(frozen=True, slots=True)
class PaperMetadata:
    """Validated analysis result, before identity and timestamp are assigned."""

    title: str
    summary: str
    authors: list[str]
    topic: str
    tags: list[str]
    sub_topic: str | None = None
    journal: str | None = None
    publish_date: str | None = None
    found_url: str | None = None
    # Required fields the service left out; non-fatal once a title exists.
    missing_fields: tuple[str, ...] = field(default=(), compare=False)
