"""Recover and validate paper metadata from free-form analysis responses.

The analysis service is asked for a bare JSON object, but models routinely
wrap it in prose or markdown fences. Extraction is a best-effort heuristic
with ordered fallback tiers; validation is where bad input is rejected.
"""

from __future__ import annotations

import json
import logging
import re
from json import JSONDecodeError
from typing import Any

from errors import IngestionError, IngestionErrorKind
from models import PaperMetadata

LOGGER = logging.getLogger(__name__)

JSON_CODE_BLOCK_PATTERN = re.compile(r"```json\s*(.*?)\s*```", re.DOTALL)

REQUIRED_FIELDS: tuple[str, ...] = ("title", "summary", "authors", "tags", "topic")

_LIST_FIELDS = frozenset({"authors", "tags"})
_OPTIONAL_TEXT_FIELDS = ("subTopic", "journal", "publishDate", "foundUrl")


def extract_json_payload(text: str | None) -> str:
    """Return the substring most likely to hold the JSON object.

    Tiers, first match wins:
    1. the first ```json fenced block;
    2. everything from the first ``{`` to the last ``}``;
    3. the trimmed text itself.

    Braces are not balanced, so an unrelated ``}`` in trailing prose will be
    swept into the payload. Never raises.
    """
    if not text:
        return ""

    match = JSON_CODE_BLOCK_PATTERN.search(text)
    if match:
        return match.group(1)

    first = text.find("{")
    last = text.rfind("}")
    if first != -1 and last != -1 and last > first:
        return text[first : last + 1]

    LOGGER.debug("No JSON boundary found in response; using trimmed text as-is")
    return text.strip()


def parse_metadata(text: str | None, strict: bool = False) -> PaperMetadata:
    """Parse a raw service response into ``PaperMetadata``.

    Raises IngestionError with kind EMPTY_RESPONSE, PARSE_ERROR or
    MISSING_TITLE. Other missing required fields only produce a warning
    unless ``strict`` is set.
    """
    if not text or not text.strip():
        raise IngestionError(
            IngestionErrorKind.EMPTY_RESPONSE,
            "No response received from AI service.",
        )

    payload = extract_json_payload(text)
    try:
        data = json.loads(payload)
    except JSONDecodeError as exc:
        LOGGER.error("JSON parse error: %s", exc)
        LOGGER.error("Raw text received: %s", text)
        LOGGER.error("Attempted JSON string: %s", payload)
        raise IngestionError(
            IngestionErrorKind.PARSE_ERROR,
            f"Failed to parse AI response. The model did not return valid JSON ({exc}).",
            raw_text=text,
            extracted_text=payload,
        ) from exc

    if not isinstance(data, dict):
        LOGGER.error("Expected a JSON object, got %s: %s", type(data).__name__, payload)
        raise IngestionError(
            IngestionErrorKind.PARSE_ERROR,
            "Failed to parse AI response. Expected a JSON object.",
            raw_text=text,
            extracted_text=payload,
        )

    return validate_metadata(data, strict=strict)


def validate_metadata(data: dict[str, Any], strict: bool = False) -> PaperMetadata:
    """Check the minimal shape of a metadata record and canonicalize it.

    Only a missing title is fatal by default. With ``strict=True`` every
    required field must be present.
    """
    missing = missing_required_fields(data)

    if "title" in missing:
        raise IngestionError(
            IngestionErrorKind.MISSING_TITLE,
            "Could not extract paper title from AI response.",
        )

    if missing and strict:
        raise IngestionError(
            IngestionErrorKind.MISSING_FIELDS,
            f"AI response is missing required fields: {', '.join(missing)}",
        )

    if missing:
        LOGGER.warning(
            "Incomplete data structure received for title=%r, missing=%s",
            data.get("title"),
            ", ".join(missing),
        )

    mistyped = [
        name for name in _OPTIONAL_TEXT_FIELDS
        if data.get(name) is not None and not isinstance(data[name], str)
    ]
    if mistyped:
        LOGGER.warning(
            "Ignoring non-text optional fields for title=%r: %s",
            data["title"],
            ", ".join(mistyped),
        )

    return PaperMetadata(
        title=data["title"],
        summary=_as_text(data.get("summary")),
        authors=_as_str_list(data.get("authors")),
        topic=_as_text(data.get("topic")),
        tags=_as_str_list(data.get("tags")),
        sub_topic=_optional_text(data.get("subTopic")),
        journal=_optional_text(data.get("journal")),
        publish_date=_optional_text(data.get("publishDate")),
        found_url=_optional_text(data.get("foundUrl")),
        missing_fields=tuple(missing),
    )


def missing_required_fields(data: dict[str, Any]) -> list[str]:
    """Names of required fields that are absent or of the wrong shape."""
    missing = []
    for name in REQUIRED_FIELDS:
        value = data.get(name)
        if name in _LIST_FIELDS:
            ok = isinstance(value, list)
        else:
            ok = isinstance(value, str) and bool(value.strip())
        if not ok:
            missing.append(name)
    return missing


def _as_text(value: Any) -> str:
    return value if isinstance(value, str) else ""


def _optional_text(value: Any) -> str | None:
    return value if isinstance(value, str) else None


def _as_str_list(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [item if isinstance(item, str) else str(item) for item in value]
