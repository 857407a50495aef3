from datetime import date

import pytest

from citations import bibtex_key, format_citation
from models import Paper

_PAPER = Paper(
    id="p1",
    url="https://arxiv.org/abs/1706.03762",
    title="Attention Is All You Need",
    summary="",
    authors=["Ashish Vaswani", "Noam Shazeer"],
    topic="Machine Learning",
    tags=[],
    added_at=1,
)
_ACCESSED = date(2026, 3, 5)


def test_apa() -> None:
    assert format_citation(_PAPER, "APA", accessed=_ACCESSED) == (
        "Ashish Vaswani, Noam Shazeer. (n.d.). Attention Is All You Need. "
        "Retrieved from https://arxiv.org/abs/1706.03762"
    )


def test_mla() -> None:
    assert format_citation(_PAPER, "mla", accessed=_ACCESSED) == (
        'Ashish Vaswani, Noam Shazeer. "Attention Is All You Need." Web. '
        "Accessed March 5, 2026. <https://arxiv.org/abs/1706.03762>."
    )


def test_bibtex() -> None:
    citation = format_citation(_PAPER, "BibTeX", accessed=_ACCESSED)
    assert citation.splitlines() == [
        "@misc{vaswani2026attention,",
        "  title = {Attention Is All You Need},",
        "  author = {Ashish Vaswani and Noam Shazeer},",
        "  howpublished = {\\url{https://arxiv.org/abs/1706.03762}},",
        "  note = {Accessed: March 5, 2026}",
        "}",
    ]


def test_unknown_author_fallback() -> None:
    paper = Paper(id="p", url="u", title="\"Hello\", World", summary="", authors=[], topic="t", tags=[], added_at=1)
    assert format_citation(paper, "APA", accessed=_ACCESSED).startswith("Unknown Author.")
    assert bibtex_key(paper, 2026) == "unknown2026hello"


def test_unknown_style_raises() -> None:
    with pytest.raises(ValueError, match="Unknown citation style"):
        format_citation(_PAPER, "Chicago")
