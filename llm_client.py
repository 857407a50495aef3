"""OpenAI GPT-based client for paper analysis from a URL or a PDF."""

from __future__ import annotations

import base64
import logging
import os
from typing import Any

import openai
from openai import OpenAI

from errors import IngestionError, IngestionErrorKind, blocked_error
from prompts import PDF_PROMPT, SYSTEM_PROMPT, url_prompt

OPENAI_MODEL = os.getenv("OPENAI_MODEL", "gpt-5.2")
OPENAI_TEMPERATURE = float(os.getenv("OPENAI_TEMPERATURE", "0.1"))

LOGGER = logging.getLogger(__name__)


def analyze_paper_url(url: str) -> str:
    """Describe the paper at ``url`` with OpenAI and return the raw text."""
    LOGGER.info("Analyzing paper URL with OpenAI: %s", url)
    return _complete(url_prompt(url), from_url=True)


def analyze_paper_pdf(pdf_bytes: bytes, filename: str = "paper.pdf") -> str:
    """Describe an uploaded PDF with OpenAI and return the raw text."""
    LOGGER.info("Analyzing PDF with OpenAI: %s (%s bytes)", filename, len(pdf_bytes))
    encoded = base64.b64encode(pdf_bytes).decode("ascii")
    content: list[dict[str, Any]] = [
        {
            "type": "file",
            "file": {
                "filename": filename,
                "file_data": f"data:application/pdf;base64,{encoded}",
            },
        },
        {"type": "text", "text": PDF_PROMPT},
    ]
    return _complete(content, from_url=False)


def _complete(user_content: str | list[dict[str, Any]], from_url: bool) -> str:
    api_key = os.getenv("OPENAI_API_KEY")
    if not api_key:
        raise IngestionError(
            IngestionErrorKind.SERVICE_FAILURE,
            "OPENAI_API_KEY environment variable is required",
        )

    client = OpenAI(api_key=api_key)
    try:
        response = client.chat.completions.create(
            model=OPENAI_MODEL,
            temperature=OPENAI_TEMPERATURE,
            messages=[
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": user_content},
            ],
        )
    except openai.APIStatusError as exc:
        LOGGER.warning("OpenAI returned HTTP %s: %s", exc.status_code, exc)
        if exc.status_code == 413:
            raise IngestionError(
                IngestionErrorKind.SERVICE_FAILURE,
                "PDF file is too large. Please try a smaller file (under 10MB).",
            ) from exc
        raise IngestionError(
            IngestionErrorKind.SERVICE_FAILURE,
            f"Failed to analyze paper. OpenAI request failed: {exc}",
        ) from exc
    except openai.OpenAIError as exc:
        LOGGER.warning("OpenAI request failed: %s", exc)
        raise IngestionError(
            IngestionErrorKind.SERVICE_FAILURE,
            f"Failed to analyze paper. OpenAI request failed: {exc}",
        ) from exc

    choice = response.choices[0]
    content = choice.message.content
    if content:
        return content

    refusal = getattr(choice.message, "refusal", None)
    LOGGER.warning(
        "OpenAI returned empty text (finish_reason=%s, refusal=%s)",
        choice.finish_reason,
        refusal,
    )
    if refusal:
        raise blocked_error(f"refusal: {refusal}", from_url=from_url)
    if choice.finish_reason == "content_filter":
        raise blocked_error(choice.finish_reason, from_url=from_url)
    raise IngestionError(IngestionErrorKind.EMPTY_RESPONSE, "The AI service returned an empty response.")
