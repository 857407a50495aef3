"""Bookshelf session: owns the paper collection and the current selection."""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, replace
from pathlib import Path

import storage
from dedup import ensure_unique_title
from filters import apply_filters
from models import Paper
from selection import FilterSelection
from taxonomy import compute_sub_topic_counts, compute_topic_counts

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class BookshelfView:
    """What the presentation layer renders for the current selection."""

    papers: list[Paper]
    topic_counts: dict[str, int]
    sub_topic_counts: dict[str, int]
    selection: FilterSelection
    total: int


class Bookshelf:
    """Single source of truth for the collection.

    All mutations run under one lock so the duplicate check and the insert
    that follows cannot interleave with another writer. Derived views are
    recomputed from a snapshot on every call.
    """

    def __init__(self, papers: list[Paper] | None = None, store_path: str | Path | None = None) -> None:
        self._papers: list[Paper] = list(papers or [])
        self._store_path = store_path
        self._lock = threading.Lock()
        self._last_timestamp = max((p.added_at for p in self._papers), default=0)
        self.selection = FilterSelection()

    @classmethod
    def open(cls, path: str | Path | None = None) -> Bookshelf:
        """Load the stored collection and persist every later change back to it."""
        path = Path(path or storage.BOOKSHELF_PATH)
        return cls(storage.load_papers(path), store_path=path)

    def __len__(self) -> int:
        return len(self._papers)

    def snapshot(self) -> tuple[Paper, ...]:
        with self._lock:
            return tuple(self._papers)

    def get_paper(self, paper_id: str) -> Paper:
        for paper in self.snapshot():
            if paper.id == paper_id:
                return paper
        raise KeyError(paper_id)

    def next_timestamp(self) -> int:
        """Milliseconds since epoch, strictly increasing within this session."""
        with self._lock:
            now = time.time_ns() // 1_000_000
            self._last_timestamp = max(now, self._last_timestamp + 1)
            return self._last_timestamp

    # -- mutations ---------------------------------------------------------

    def add_paper(self, paper: Paper) -> Paper:
        """Insert ``paper`` unless its title is already shelved.

        Raises IngestionError(DUPLICATE_TITLE) on a collision and OSError when
        the bookshelf cannot be saved; either way the collection is unchanged.
        """
        with self._lock:
            ensure_unique_title(paper.title, self._papers)
            if any(existing.id == paper.id for existing in self._papers):
                raise ValueError(f"Duplicate paper id: {paper.id}")
            self._commit([*self._papers, paper])
        LOGGER.info("Added paper id=%s title=%r topic=%r", paper.id, paper.title, paper.topic)
        return paper

    def delete_paper(self, paper_id: str) -> Paper:
        with self._lock:
            index = self._index_of(paper_id)
            removed = self._papers[index]
            self._commit(self._papers[:index] + self._papers[index + 1:])
        LOGGER.info("Deleted paper id=%s", paper_id)
        return removed

    def update_metadata(
        self,
        paper_id: str,
        topic: str,
        sub_topic: str | None,
        tags: list[str],
    ) -> Paper:
        """Replace the classification of one paper.

        Blank sub-topics are dropped; tags are trimmed and de-duplicated in
        order. ``id`` and ``added_at`` never change.
        """
        topic = (topic or "").strip()
        if not topic:
            raise ValueError("Topic must not be empty")
        sub_topic = (sub_topic or "").strip() or None
        clean_tags: list[str] = []
        for tag in tags:
            tag = tag.strip()
            if tag and tag not in clean_tags:
                clean_tags.append(tag)

        with self._lock:
            index = self._index_of(paper_id)
            updated = replace(self._papers[index], topic=topic, sub_topic=sub_topic, tags=clean_tags)
            papers = list(self._papers)
            papers[index] = updated
            self._commit(papers)
        LOGGER.info("Updated paper id=%s topic=%r sub_topic=%r tags=%s", paper_id, topic, sub_topic, clean_tags)
        return updated

    # -- selection ---------------------------------------------------------

    def select_topic(self, topic: str | None) -> None:
        self.selection.select_topic(topic)

    def select_sub_topic(self, sub_topic: str | None) -> None:
        self.selection.select_sub_topic(sub_topic)

    def select_tag(self, tag: str | None) -> None:
        self.selection.select_tag(tag)

    def set_search(self, text: str | None) -> None:
        self.selection.set_search(text)

    def view(self) -> BookshelfView:
        papers = self.snapshot()
        selection = self.selection.copy()
        return BookshelfView(
            papers=apply_filters(papers, selection),
            topic_counts=compute_topic_counts(papers),
            sub_topic_counts=compute_sub_topic_counts(papers, selection.topic),
            selection=selection,
            total=len(papers),
        )

    # -- internals ---------------------------------------------------------

    def _index_of(self, paper_id: str) -> int:
        for index, paper in enumerate(self._papers):
            if paper.id == paper_id:
                return index
        raise KeyError(paper_id)

    def _commit(self, papers: list[Paper]) -> None:
        """Save ``papers`` and only then make them the collection; a failed save changes nothing."""
        if self._store_path is not None:
            storage.save_papers(papers, self._store_path)
        self._papers = papers
