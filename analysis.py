"""Dispatch paper analysis to the configured LLM provider.

Each provider returns the model's raw text; turning it into metadata is the
job of ``response_parser``. Providers are chosen per call from the
URL_ANALYSIS_PROVIDER / PDF_ANALYSIS_PROVIDER environment variables.
"""

from __future__ import annotations

import logging
import os
from types import ModuleType

import anthropic_client
import llm_client
import perplexity_client

DEFAULT_URL_PROVIDER = "perplexity"
DEFAULT_PDF_PROVIDER = "anthropic"

_URL_PROVIDERS: dict[str, ModuleType] = {
    "perplexity": perplexity_client,
    "openai": llm_client,
    "anthropic": anthropic_client,
}

# Perplexity's chat API takes no file input.
_PDF_PROVIDERS: dict[str, ModuleType] = {
    "openai": llm_client,
    "anthropic": anthropic_client,
}

LOGGER = logging.getLogger(__name__)


def analyze_paper_url(url: str) -> str:
    provider = _resolve(_URL_PROVIDERS, "URL_ANALYSIS_PROVIDER", DEFAULT_URL_PROVIDER)
    return provider.analyze_paper_url(url)


def analyze_paper_pdf(pdf_bytes: bytes, filename: str = "paper.pdf") -> str:
    provider = _resolve(_PDF_PROVIDERS, "PDF_ANALYSIS_PROVIDER", DEFAULT_PDF_PROVIDER)
    return provider.analyze_paper_pdf(pdf_bytes, filename=filename)


def _resolve(providers: dict[str, ModuleType], env_var: str, default: str) -> ModuleType:
    name = os.getenv(env_var, default).strip().lower()
    if name not in providers:
        raise ValueError(
            f"Unknown {env_var}={name!r}; expected one of: {', '.join(sorted(providers))}"
        )
    LOGGER.debug("Using analysis provider %s (%s)", name, env_var)
    return providers[name]
