"""Perplexity API client for URL-based paper analysis.

Perplexity's online models search the web themselves, which makes them the
default for resolving a paper from its URL or DOI.
"""

from __future__ import annotations

import logging
import os
from typing import Any

import requests

from errors import IngestionError, IngestionErrorKind, blocked_error
from prompts import SYSTEM_PROMPT, url_prompt

PERPLEXITY_API_URL = "https://api.perplexity.ai/chat/completions"
PERPLEXITY_MODEL = os.getenv("PERPLEXITY_MODEL", "sonar-pro")
PERPLEXITY_TEMPERATURE = float(os.getenv("PERPLEXITY_TEMPERATURE", "0.1"))
REQUEST_TIMEOUT_SECONDS = 60

LOGGER = logging.getLogger(__name__)


def analyze_paper_url(url: str) -> str:
    """Ask Perplexity to describe the paper at ``url`` and return its raw text."""
    api_key = os.getenv("PERPLEXITY_API_KEY")
    if not api_key:
        raise IngestionError(
            IngestionErrorKind.SERVICE_FAILURE,
            "PERPLEXITY_API_KEY environment variable is required",
        )

    LOGGER.info("Analyzing paper URL with Perplexity: %s", url)
    try:
        body = _call_perplexity(api_key=api_key, prompt=url_prompt(url))
    except requests.RequestException as exc:
        LOGGER.warning("Perplexity request failed for url=%s: %s", url, exc)
        raise IngestionError(
            IngestionErrorKind.SERVICE_FAILURE,
            f"Failed to analyze paper. Perplexity request failed: {exc}",
        ) from exc

    return _completion_text(body)


def _call_perplexity(api_key: str, prompt: str) -> dict[str, Any]:
    payload = {
        "model": PERPLEXITY_MODEL,
        "temperature": PERPLEXITY_TEMPERATURE,
        "messages": [
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": prompt},
        ],
    }
    headers = {
        "Authorization": f"Bearer {api_key}",
        "Content-Type": "application/json",
    }

    response = requests.post(
        PERPLEXITY_API_URL,
        headers=headers,
        json=payload,
        timeout=REQUEST_TIMEOUT_SECONDS,
    )
    response.raise_for_status()
    return response.json()


def _completion_text(body: Any) -> str:
    """Pull the assistant text out of a chat completion body."""
    try:
        choice = body["choices"][0]
        content = choice["message"].get("content")
    except (KeyError, IndexError, TypeError, AttributeError) as exc:
        raise IngestionError(
            IngestionErrorKind.SERVICE_FAILURE,
            f"Unexpected Perplexity response shape: {body}",
        ) from exc

    if content:
        return content

    finish_reason = choice.get("finish_reason")
    LOGGER.warning("Perplexity returned empty text (finish_reason=%s)", finish_reason)
    if finish_reason == "content_filter":
        raise blocked_error(finish_reason, from_url=True)
    raise IngestionError(
        IngestionErrorKind.EMPTY_RESPONSE,
        "The AI service returned an empty response. "
        "Please check if the URL is accessible and points to a valid paper.",
    )
