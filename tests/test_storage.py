from __future__ import annotations

import json
from pathlib import Path

import pytest

import storage
from models import Paper

SAMPLE_PAPER = Paper(
    id="3f1c2a9e-0000-4000-8000-000000000001",
    url="https://doi.org/10.1038/nn.4061",
    title="Memory engram cells",
    summary="Engram cells store memories.",
    authors=["Susumu Tonegawa"],
    topic="Neuroscience",
    tags=["engram", "memory"],
    added_at=1_700_000_000_000,
    sub_topic="Cognitive Neuroscience",
    journal="Nature Neuroscience",
    publish_date="2015",
)


@pytest.fixture(autouse=True)
def patch_bookshelf_path(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Point BOOKSHELF_PATH at a temp file for every test."""
    monkeypatch.setattr(storage, "BOOKSHELF_PATH", str(tmp_path / "bookshelf.json"))


def test_load_papers_missing_file_is_empty() -> None:
    assert storage.load_papers() == []


def test_save_then_load_preserves_papers() -> None:
    storage.save_papers([SAMPLE_PAPER])
    assert storage.load_papers() == [SAMPLE_PAPER]


def test_saved_file_uses_persisted_field_names() -> None:
    storage.save_papers([SAMPLE_PAPER])

    records = json.loads(Path(storage.BOOKSHELF_PATH).read_text(encoding="utf-8"))

    assert isinstance(records, list)
    assert set(records[0]) == {
        "id", "url", "title", "summary", "authors", "topic",
        "subTopic", "tags", "journal", "publishDate", "addedAt",
    }
    assert records[0]["addedAt"] == 1_700_000_000_000
    assert records[0]["subTopic"] == "Cognitive Neuroscience"


def test_unset_optional_fields_are_omitted() -> None:
    paper = Paper(
        id="p1", url="u", title="t", summary="", authors=[], topic="Biology", tags=[], added_at=1,
    )
    record = storage.paper_to_record(paper)
    assert "subTopic" not in record
    assert "journal" not in record
    assert "publishDate" not in record


def test_legacy_record_topic_defaults_to_first_tag() -> None:
    upgraded = storage.upgrade_record({"id": "p1", "title": "t", "tags": ["fMRI", "memory"]})
    assert upgraded["topic"] == "fMRI"
    assert upgraded["tags"] == ["fMRI", "memory"]


def test_legacy_record_without_tags_uses_fallback_topic() -> None:
    upgraded = storage.upgrade_record({"id": "p1", "title": "t"})
    assert upgraded["topic"] == storage.FALLBACK_TOPIC
    assert upgraded["tags"] == []


def test_fallback_topic_is_configurable(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(storage, "FALLBACK_TOPIC", "Uncategorized")
    assert storage.upgrade_record({"id": "p1"})["topic"] == "Uncategorized"


def test_upgrade_is_idempotent_and_leaves_conforming_records_alone() -> None:
    conforming = storage.paper_to_record(SAMPLE_PAPER)
    assert storage.upgrade_record(conforming) == conforming

    legacy = {"id": "p1", "title": "t", "tags": ["fMRI"]}
    once = storage.upgrade_record(legacy)
    assert storage.upgrade_record(once) == once
    assert "topic" not in legacy


def test_load_upgrades_legacy_records(tmp_path: Path) -> None:
    path = tmp_path / "legacy.json"
    path.write_text(json.dumps([
        {"id": "a", "url": "u", "title": "Old one", "summary": "", "authors": [], "tags": ["fMRI", "memory"], "addedAt": 2},
        {"id": "b", "url": "u", "title": "Older one", "summary": "", "authors": [], "addedAt": 1},
    ]), encoding="utf-8")

    papers = storage.load_papers(path)

    assert [p.topic for p in papers] == ["fMRI", storage.FALLBACK_TOPIC]
    assert papers[1].tags == []


def test_load_rejects_non_list_payload(tmp_path: Path) -> None:
    path = tmp_path / "bad.json"
    path.write_text('{"papers": []}', encoding="utf-8")
    with pytest.raises(RuntimeError, match="expected a list"):
        storage.load_papers(path)


def test_record_without_id_gets_a_stable_id(tmp_path: Path) -> None:
    path = tmp_path / "legacy.json"
    path.write_text(json.dumps([
        {"title": "Old", "tags": ["fMRI"]},
        {"id": "b", "url": "u", "title": "Kept", "addedAt": 1},
    ]), encoding="utf-8")

    first = storage.load_papers(path)
    second = storage.load_papers(path)

    assert [p.title for p in first] == ["Old", "Kept"]
    assert first[0].id
    assert first[0].id == second[0].id
    assert first[0].topic == "fMRI"
    assert first[1].id == "b"


def test_upgrade_assigns_id_once() -> None:
    once = storage.upgrade_record({"title": "Old", "url": "u", "addedAt": 3})
    assert once["id"] == storage.legacy_id({"title": "Old", "url": "u", "addedAt": 3})
    assert storage.upgrade_record(once) == once


def test_non_text_optional_fields_on_disk_are_dropped(tmp_path: Path) -> None:
    path = tmp_path / "bad.json"
    path.write_text(json.dumps([
        {"id": "a", "title": "T", "topic": "Biology", "tags": [], "subTopic": ["Cog"], "journal": 7, "publishDate": {"y": 1}},
    ]), encoding="utf-8")

    [paper] = storage.load_papers(path)

    assert paper.sub_topic is None
    assert paper.journal is None
    assert paper.publish_date is None
