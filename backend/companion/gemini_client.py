"""Thin wrapper over the google-genai SDK used by the learning plan generators."""

from __future__ import annotations

import logging
import re
from typing import Any, Optional

import httpx
from google import genai
from google.genai import errors, types

logger = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"```(?:json)?\s*", re.IGNORECASE)


class GenerativeModelError(RuntimeError):
    """Raised when the language model call fails or returns no text."""


def strip_code_fences(text: str) -> str:
    """Drop markdown code fences the model wraps around JSON answers."""
    return _FENCE_RE.sub("", text or "").strip()


class GeminiClient:
    """Single-prompt text generation against one Gemini model.

    ``client`` accepts anything shaped like ``genai.Client``; tests pass a
    stand-in exposing ``models.generate_content``.
    """

    def __init__(
        self,
        api_key: Optional[str],
        *,
        model: str,
        client: Optional[Any] = None,
        timeout_seconds: float = 30.0,
    ) -> None:
        if not api_key:
            raise GenerativeModelError("Gemini API key is not configured.")
        self.model = model
        self._owns_client = client is None
        if client is None:
            # HttpOptions.timeout is in milliseconds.
            client = genai.Client(
                api_key=api_key,
                http_options=types.HttpOptions(timeout=int(timeout_seconds * 1000)),
            )
        self._client = client

    def close(self) -> None:
        if not self._owns_client:
            return
        close = getattr(self._client, "close", None)
        if callable(close):
            close()

    def __enter__(self) -> "GeminiClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def generate_text(self, prompt: str) -> str:
        try:
            response = self._client.models.generate_content(model=self.model, contents=prompt)
        except (errors.APIError, httpx.HTTPError) as exc:
            raise GenerativeModelError(f"Gemini request failed: {exc}") from exc

        text = getattr(response, "text", None) or ""
        if not text.strip():
            raise GenerativeModelError("Gemini response did not contain any text.")
        logger.debug("Gemini %s returned %d characters", self.model, len(text))
        return text


__all__ = ["GeminiClient", "GenerativeModelError", "strip_code_fences"]
