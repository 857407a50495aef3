"""Citation strings for shelved papers."""

from __future__ import annotations

import re
from datetime import date

from models import Paper

CITATION_STYLES = ("APA", "MLA", "BibTeX")


def format_citation(paper: Paper, style: str, accessed: date | None = None) -> str:
    """Render ``paper`` as an APA, MLA or BibTeX citation.

    ``accessed`` defaults to today and feeds the MLA access date and the
    BibTeX note and key.
    """
    accessed = accessed or date.today()
    accessed_text = f"{accessed.strftime('%B')} {accessed.day}, {accessed.year}"
    author_text = ", ".join(paper.authors) if paper.authors else "Unknown Author"

    key = style.strip().lower()
    if key == "apa":
        return f"{author_text}. (n.d.). {paper.title}. Retrieved from {paper.url}"
    if key == "mla":
        return f'{author_text}. "{paper.title}." Web. Accessed {accessed_text}. <{paper.url}>.'
    if key == "bibtex":
        return (
            f"@misc{{{bibtex_key(paper, accessed.year)},\n"
            f"  title = {{{paper.title}}},\n"
            f"  author = {{{' and '.join(paper.authors)}}},\n"
            f"  howpublished = {{\\url{{{paper.url}}}}},\n"
            f"  note = {{Accessed: {accessed_text}}}\n"
            "}"
        )
    raise ValueError(f"Unknown citation style {style!r}; expected one of: {', '.join(CITATION_STYLES)}")


def bibtex_key(paper: Paper, year: int) -> str:
    """First author's last name + year + first title word, e.g. ``vaswani2026attention``."""
    last_name = "unknown"
    if paper.authors and paper.authors[0].split():
        last_name = paper.authors[0].split()[-1].lower()
    words = paper.title.split()
    title_slug = re.sub(r"[^a-z0-9]", "", words[0].lower()) if words else ""
    return f"{last_name}{year}{title_slug}"
