"""JSON file storage for the bookshelf collection."""

from __future__ import annotations

import json
import logging
import os
import uuid
from pathlib import Path
from typing import Any

from models import Paper

BOOKSHELF_PATH = os.getenv("BOOKSHELF_PATH", "bookshelf.json")
FALLBACK_TOPIC = os.getenv("BOOKSHELF_FALLBACK_TOPIC", "Biology")

LOGGER = logging.getLogger(__name__)

# Persisted field name -> Paper attribute. Optional fields are left out of the
# stored record when unset.
_FIELD_MAP = {
    "id": "id",
    "url": "url",
    "title": "title",
    "summary": "summary",
    "authors": "authors",
    "topic": "topic",
    "subTopic": "sub_topic",
    "tags": "tags",
    "journal": "journal",
    "publishDate": "publish_date",
    "addedAt": "added_at",
}
_OPTIONAL_FIELDS = frozenset({"subTopic", "journal", "publishDate"})


def default_topic(tags: list[str] | None) -> str:
    """Topic used when none is known: the first tag, else FALLBACK_TOPIC."""
    if tags:
        return tags[0]
    return FALLBACK_TOPIC


def upgrade_record(record: dict[str, Any]) -> dict[str, Any]:
    """Bring a stored record from an older schema up to date.

    Records without ``topic`` get the first tag (or FALLBACK_TOPIC); a missing
    ``tags`` becomes an empty list. A record without ``id`` gets one derived
    from its url, title and addedAt, so it stays the same across loads.
    Conforming records are returned unchanged, so applying this twice is the
    same as applying it once.
    """
    upgraded = dict(record)
    if not upgraded.get("id"):
        upgraded["id"] = legacy_id(upgraded)
        LOGGER.warning("Stored paper %r has no id; using %s", upgraded.get("title"), upgraded["id"])
    upgraded["tags"] = upgraded.get("tags") or []
    upgraded["topic"] = upgraded.get("topic") or default_topic(upgraded["tags"])
    return upgraded


def legacy_id(record: dict[str, Any]) -> str:
    seed = f"{record.get('url')}|{record.get('title')}|{record.get('addedAt')}"
    return str(uuid.uuid5(uuid.NAMESPACE_URL, seed))


def paper_to_record(paper: Paper) -> dict[str, Any]:
    record: dict[str, Any] = {}
    for key, attr in _FIELD_MAP.items():
        value = getattr(paper, attr)
        if key in _OPTIONAL_FIELDS and value is None:
            continue
        record[key] = list(value) if isinstance(value, list) else value
    return record


def paper_from_record(record: dict[str, Any]) -> Paper:
    """Build a Paper from a stored record, upgrading legacy records first."""
    upgraded = upgrade_record(record)
    return Paper(
        id=str(upgraded["id"]),
        url=upgraded.get("url") or "",
        title=upgraded.get("title") or "",
        summary=upgraded.get("summary") or "",
        authors=list(upgraded.get("authors") or []),
        topic=upgraded["topic"],
        tags=list(upgraded["tags"]),
        added_at=int(upgraded.get("addedAt") or 0),
        sub_topic=_optional_text(upgraded.get("subTopic")) or None,
        journal=_optional_text(upgraded.get("journal")),
        publish_date=_optional_text(upgraded.get("publishDate")),
    )


def _optional_text(value: Any) -> str | None:
    return value if isinstance(value, str) else None


def load_papers(path: str | Path | None = None) -> list[Paper]:
    """Read the stored collection; a missing file is an empty bookshelf."""
    path = Path(path or BOOKSHELF_PATH)
    if not path.exists():
        LOGGER.info("No bookshelf at %s; starting empty", path)
        return []

    with path.open(encoding="utf-8") as fh:
        payload = json.load(fh)

    if not isinstance(payload, list):
        raise RuntimeError(f"Unexpected bookshelf format in {path}: expected a list")

    papers = [paper_from_record(item) for item in payload if isinstance(item, dict)]
    LOGGER.info("Loaded %s papers from %s", len(papers), path)
    return papers


def save_papers(papers: list[Paper], path: str | Path | None = None) -> None:
    """Write the whole collection as one JSON array, replacing the file atomically."""
    path = Path(path or BOOKSHELF_PATH)
    if path.parent and not path.parent.exists():
        path.parent.mkdir(parents=True, exist_ok=True)

    tmp_path = path.with_name(path.name + ".tmp")
    with tmp_path.open("w", encoding="utf-8") as fh:
        json.dump([paper_to_record(paper) for paper in papers], fh, indent=2, ensure_ascii=False)
    os.replace(tmp_path, path)

    LOGGER.debug("Saved %s papers to %s", len(papers), path)
