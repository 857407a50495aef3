"""Duplicate-title guard applied when a paper is added to the bookshelf."""

from __future__ import annotations

from collections.abc import Iterable

from errors import IngestionError, IngestionErrorKind
from models import Paper

DUPLICATE_MESSAGE = "This paper already exists in your bookshelf"


def normalize_title(title: str) -> str:
    return title.strip().lower()


def title_exists(title: str, papers: Iterable[Paper]) -> bool:
    """Return True if any paper's title matches ignoring case and outer whitespace."""
    key = normalize_title(title)
    return any(normalize_title(paper.title) == key for paper in papers)


def ensure_unique_title(title: str, papers: Iterable[Paper]) -> None:
    """Raise a DUPLICATE_TITLE IngestionError if ``title`` is already shelved.

    Not atomic with the insert that follows; callers must hold the
    collection's write lock across both steps.
    """
    if title_exists(title, papers):
        raise IngestionError(IngestionErrorKind.DUPLICATE_TITLE, DUPLICATE_MESSAGE)
