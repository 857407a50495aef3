"""End-to-end ingestion: source -> analysis text -> metadata -> shelved Paper.

An ingestion attempt either inserts one complete Paper or raises a single
IngestionError; nothing is retried automatically.
"""

from __future__ import annotations

import logging
import re
import threading
import uuid
from collections.abc import Callable
from pathlib import Path
from urllib.parse import quote_plus

import analysis
from bookshelf import Bookshelf
from errors import IngestionError, IngestionErrorKind
from models import Paper, PaperMetadata
from response_parser import parse_metadata
from storage import default_topic

MAX_PDF_BYTES = 10 * 1024 * 1024
GOOGLE_SEARCH_URL = "https://www.google.com/search?q="

_DOI_URL_PREFIX = re.compile(r"^(https?://)?(dx\.)?doi\.org/", re.IGNORECASE)
_DOI_SCHEME_PREFIX = re.compile(r"^doi:", re.IGNORECASE)

LOGGER = logging.getLogger(__name__)


def normalize_doi(value: str) -> str:
    """Turn a bare DOI, ``doi:`` form or doi.org link into a canonical https URL."""
    doi = _DOI_URL_PREFIX.sub("", value.strip())
    doi = _DOI_SCHEME_PREFIX.sub("", doi).strip()
    return f"https://doi.org/{doi}"


def search_url_for_title(title: str) -> str:
    return GOOGLE_SEARCH_URL + quote_plus(title)


def build_paper(metadata: PaperMetadata, url: str, paper_id: str, added_at: int) -> Paper:
    """Assemble a Paper; a missing topic falls back to the first tag."""
    return Paper(
        id=paper_id,
        url=url,
        title=metadata.title,
        summary=metadata.summary,
        authors=list(metadata.authors),
        topic=metadata.topic or default_topic(metadata.tags),
        tags=list(metadata.tags),
        added_at=added_at,
        sub_topic=metadata.sub_topic or None,
        journal=metadata.journal,
        publish_date=metadata.publish_date,
    )


class PaperIngestor:
    """One ingestion entry point bound to a bookshelf.

    Only one submission may be outstanding at a time; a second one raises
    IngestionError(BUSY) until the first resolves or fails.
    """

    def __init__(
        self,
        shelf: Bookshelf,
        analyze_url: Callable[[str], str] | None = None,
        analyze_pdf: Callable[..., str] | None = None,
        strict_metadata: bool = False,
    ) -> None:
        self._shelf = shelf
        self._analyze_url = analyze_url or analysis.analyze_paper_url
        self._analyze_pdf = analyze_pdf or analysis.analyze_paper_pdf
        self._strict_metadata = strict_metadata
        self._state_lock = threading.Lock()
        self._busy = False
        self._cancelled = threading.Event()

    @property
    def busy(self) -> bool:
        return self._busy

    def cancel(self) -> None:
        """Abandon the in-flight attempt; it will finish without inserting anything."""
        with self._state_lock:
            if self._busy:
                LOGGER.info("Cancelling in-flight ingestion")
                self._cancelled.set()

    def add_from_url(self, url: str) -> Paper:
        url = (url or "").strip()
        if not url:
            raise IngestionError(IngestionErrorKind.INVALID_INPUT, "Please enter a URL")
        return self._run(lambda: self._analyze_url(url), source_url=url)

    def add_from_doi(self, doi: str) -> Paper:
        if not (doi or "").strip():
            raise IngestionError(IngestionErrorKind.INVALID_INPUT, "Please enter a DOI")
        url = normalize_doi(doi)
        return self._run(lambda: self._analyze_url(url), source_url=url)

    def add_from_pdf(self, pdf_bytes: bytes, filename: str = "paper.pdf") -> Paper:
        if not pdf_bytes:
            raise IngestionError(IngestionErrorKind.INVALID_INPUT, "Please select a PDF file")
        if len(pdf_bytes) > MAX_PDF_BYTES:
            raise IngestionError(
                IngestionErrorKind.INVALID_INPUT,
                "PDF file is too large. Please try a smaller file (under 10MB).",
            )
        return self._run(lambda: self._analyze_pdf(pdf_bytes, filename=filename), source_url=None)

    def add_from_pdf_path(self, path: str | Path) -> Paper:
        path = Path(path)
        if not path.is_file():
            raise IngestionError(IngestionErrorKind.INVALID_INPUT, f"PDF file not found: {path}")
        return self.add_from_pdf(path.read_bytes(), filename=path.name)

    def _run(self, call: Callable[[], str], source_url: str | None) -> Paper:
        with self._state_lock:
            if self._busy:
                raise IngestionError(
                    IngestionErrorKind.BUSY,
                    "An analysis is already in progress. Please wait for it to finish.",
                )
            self._busy = True
            self._cancelled.clear()

        try:
            raw_text = self._call_service(call)
            metadata = parse_metadata(raw_text, strict=self._strict_metadata)
            url = source_url or metadata.found_url or search_url_for_title(metadata.title)
            paper = build_paper(
                metadata,
                url=url,
                paper_id=str(uuid.uuid4()),
                added_at=self._shelf.next_timestamp(),
            )
            # cancel() takes the same lock, so it lands either before this check or after the insert.
            with self._state_lock:
                if self._cancelled.is_set():
                    raise IngestionError(IngestionErrorKind.CANCELLED, "Ingestion was cancelled")
                return self._insert(paper)
        except IngestionError as exc:
            LOGGER.warning("Ingestion failed (%s): %s", exc.kind, exc.message)
            raise
        finally:
            with self._state_lock:
                self._busy = False

    def _insert(self, paper: Paper) -> Paper:
        try:
            return self._shelf.add_paper(paper)
        except OSError as exc:
            raise IngestionError(
                IngestionErrorKind.STORAGE_FAILURE,
                f"Could not save the bookshelf: {exc}",
            ) from exc

    def _call_service(self, call: Callable[[], str]) -> str:
        try:
            return call()
        except IngestionError:
            raise
        except Exception as exc:  # any other client failure is still a service failure
            raise IngestionError(
                IngestionErrorKind.SERVICE_FAILURE,
                str(exc) or "Failed to analyze paper. Please check the URL or try again.",
            ) from exc
