"""Thin wrapper around the Anthropic Messages API for paper analysis."""

from __future__ import annotations

import base64
import logging
import os
from typing import Any

import anthropic

from errors import IngestionError, IngestionErrorKind, blocked_error
from prompts import PDF_PROMPT, SYSTEM_PROMPT, url_prompt

CLAUDE_MAX_TOKENS = int(os.getenv("CLAUDE_MAX_TOKENS", "2048"))

LOGGER = logging.getLogger(__name__)


def claude_chat(content: str | list[dict[str, Any]], max_tokens: int = CLAUDE_MAX_TOKENS) -> Any:
    """Send one user turn with the cataloguing system prompt; return the raw response.

    Args:
        content: A prompt string or a list of Anthropic content blocks.
        max_tokens: Hard cap on output tokens.
    """
    api_key = os.getenv("ANTHROPIC_API_KEY")
    if not api_key:
        raise IngestionError(
            IngestionErrorKind.SERVICE_FAILURE,
            "ANTHROPIC_API_KEY environment variable is required",
        )

    claude_model = os.getenv("CLAUDE_MODEL", "claude-opus-4-6")
    client = anthropic.Anthropic(api_key=api_key)

    LOGGER.debug("Calling Claude model=%s max_tokens=%s", claude_model, max_tokens)
    try:
        return client.messages.create(
            model=claude_model,
            max_tokens=max_tokens,
            system=SYSTEM_PROMPT,
            messages=[{"role": "user", "content": content}],
        )
    except anthropic.APIStatusError as exc:
        LOGGER.warning("Claude returned HTTP %s: %s", exc.status_code, exc)
        if exc.status_code == 413:
            raise IngestionError(
                IngestionErrorKind.SERVICE_FAILURE,
                "PDF file is too large. Please try a smaller file (under 10MB).",
            ) from exc
        raise IngestionError(
            IngestionErrorKind.SERVICE_FAILURE,
            f"Failed to analyze paper. Claude request failed: {exc}",
        ) from exc
    except anthropic.AnthropicError as exc:
        LOGGER.warning("Claude request failed: %s", exc)
        raise IngestionError(
            IngestionErrorKind.SERVICE_FAILURE,
            f"Failed to analyze paper. Claude request failed: {exc}",
        ) from exc


def analyze_paper_url(url: str) -> str:
    LOGGER.info("Analyzing paper URL with Claude: %s", url)
    return _response_text(claude_chat(url_prompt(url)), from_url=True)


def analyze_paper_pdf(pdf_bytes: bytes, filename: str = "paper.pdf") -> str:
    LOGGER.info("Analyzing PDF with Claude: %s (%s bytes)", filename, len(pdf_bytes))
    content = [
        {
            "type": "document",
            "source": {
                "type": "base64",
                "media_type": "application/pdf",
                "data": base64.b64encode(pdf_bytes).decode("ascii"),
            },
        },
        {"type": "text", "text": PDF_PROMPT},
    ]
    return _response_text(claude_chat(content), from_url=False)


def _response_text(response: Any, from_url: bool) -> str:
    text = "".join(
        block.text for block in response.content if getattr(block, "type", None) == "text"
    )
    if text.strip():
        return text

    LOGGER.warning("Claude returned empty text (stop_reason=%s)", response.stop_reason)
    if response.stop_reason == "refusal":
        raise blocked_error(response.stop_reason, from_url=from_url)
    raise IngestionError(IngestionErrorKind.EMPTY_RESPONSE, "The AI service returned an empty response.")
