"""Topic and sub-topic frequency counts derived from the collection.

Counts are recomputed from the full collection on every call; nothing is
cached between calls. Results are ordered by descending count, and ties keep
the order in which each label first appears in ``papers``.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable

from models import Paper


def compute_topic_counts(papers: Iterable[Paper]) -> dict[str, int]:
    """Count papers per main topic. Sub-topics and tags are not counted here."""
    counts = Counter(paper.topic for paper in papers if paper.topic)
    return _sorted_by_count(counts)


def compute_sub_topic_counts(papers: Iterable[Paper], selected_topic: str | None) -> dict[str, int]:
    """Count sub-topics among papers of ``selected_topic``; empty when no topic is selected."""
    if not selected_topic:
        return {}
    counts = Counter(
        paper.sub_topic
        for paper in papers
        if paper.topic == selected_topic and paper.sub_topic
    )
    return _sorted_by_count(counts)


def _sorted_by_count(counts: Counter[str]) -> dict[str, int]:
    # Counter preserves first-insertion order and sorted() is stable.
    return dict(sorted(counts.items(), key=lambda item: item[1], reverse=True))
