"""Failure taxonomy for paper ingestion."""

from __future__ import annotations

from enum import StrEnum


class IngestionErrorKind(StrEnum):
    SERVICE_FAILURE = "service_failure"
    EMPTY_RESPONSE = "empty_response"
    SERVICE_BLOCKED = "service_blocked"
    PARSE_ERROR = "parse_error"
    MISSING_TITLE = "missing_title"
    MISSING_FIELDS = "missing_fields"
    DUPLICATE_TITLE = "duplicate_title"
    INVALID_INPUT = "invalid_input"
    BUSY = "busy"
    CANCELLED = "cancelled"
    STORAGE_FAILURE = "storage_failure"


class IngestionError(RuntimeError):
    """Single failure signal for one ingestion attempt.

    ``kind`` is the machine-readable reason; ``message`` is meant for the user.
    Parse failures also carry the raw service text and the extracted payload.
    """

    def __init__(
        self,
        kind: IngestionErrorKind,
        message: str,
        raw_text: str | None = None,
        extracted_text: str | None = None,
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.raw_text = raw_text
        self.extracted_text = extracted_text

    @property
    def is_duplicate(self) -> bool:
        """Duplicates are expected and recoverable, not system faults."""
        return self.kind is IngestionErrorKind.DUPLICATE_TITLE


def blocked_error(reason: str, from_url: bool) -> IngestionError:
    """Build the SERVICE_BLOCKED error for a provider refusal."""
    if from_url:
        message = (
            f"The AI service blocked the response (Reason: {reason}). "
            "The paper might be behind a strict paywall or triggered content filters. "
            "Please try adding the paper via PDF upload instead."
        )
    else:
        message = f"The AI service blocked the response for the PDF (Reason: {reason})."
    return IngestionError(IngestionErrorKind.SERVICE_BLOCKED, message)
