import pytest

from selection import FilterSelection


def test_changing_topic_clears_sub_topic_and_tag() -> None:
    selection = FilterSelection()
    selection.select_topic("Neuroscience")
    selection.select_sub_topic("Cognitive Neuroscience")

    selection.select_topic("Immunology")

    assert selection.topic == "Immunology"
    assert selection.sub_topic is None
    assert selection.tag is None


def test_selecting_tag_clears_topic_and_sub_topic() -> None:
    selection = FilterSelection()
    selection.select_topic("Neuroscience")
    selection.select_sub_topic("Cognitive Neuroscience")

    selection.select_tag("fMRI")

    assert selection.tag == "fMRI"
    assert selection.topic is None
    assert selection.sub_topic is None


def test_selecting_topic_clears_tag() -> None:
    selection = FilterSelection()
    selection.select_tag("fMRI")
    selection.select_topic("Neuroscience")
    assert selection.tag is None


def test_clearing_tag_keeps_search() -> None:
    selection = FilterSelection(search="memory")
    selection.select_tag("fMRI")
    selection.select_tag(None)
    assert selection.tag is None
    assert selection.search == "memory"


def test_sub_topic_requires_topic() -> None:
    selection = FilterSelection()
    with pytest.raises(ValueError):
        selection.select_sub_topic("Cognitive Neuroscience")
    assert selection.sub_topic is None


def test_sub_topic_can_be_cleared_without_topic() -> None:
    selection = FilterSelection()
    selection.select_sub_topic(None)
    assert selection.sub_topic is None


def test_search_survives_topic_changes() -> None:
    selection = FilterSelection()
    selection.set_search("hippocampus")
    selection.select_topic("Neuroscience")
    assert selection.search == "hippocampus"


def test_set_search_none_becomes_empty_string() -> None:
    selection = FilterSelection()
    selection.set_search(None)
    assert selection.search == ""


def test_copy_is_independent() -> None:
    selection = FilterSelection()
    selection.select_topic("Neuroscience")
    snapshot = selection.copy()
    selection.select_topic("Immunology")
    assert snapshot.topic == "Neuroscience"


def test_clear_resets_everything() -> None:
    selection = FilterSelection(search="x")
    selection.select_topic("Neuroscience")
    selection.clear()
    assert selection == FilterSelection()
