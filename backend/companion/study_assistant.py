"""Question answering for the in-app study assistant."""

from __future__ import annotations

import logging

from .gemini_client import GeminiClient, GenerativeModelError

logger = logging.getLogger(__name__)

ASSISTANT_PREAMBLE = (
    "You are an AI study assistant helping students learn.\n"
    "Please provide clear, concise, and helpful answers.\n\n"
)


class AssistantError(RuntimeError):
    """User-facing failure of the study assistant."""


def build_assistant_prompt(question: str) -> str:
    return f"{ASSISTANT_PREAMBLE}Student Question: {question.strip()}"


def ask_study_assistant(client: GeminiClient, question: str) -> str:
    if not question or not question.strip():
        raise AssistantError("Please enter a question.")
    try:
        return client.generate_text(build_assistant_prompt(question)).strip()
    except GenerativeModelError as exc:
        logger.warning("Study assistant call failed: %s", exc)
        raise AssistantError("Failed to get AI response. Please try again.") from exc


__all__ = ["ASSISTANT_PREAMBLE", "AssistantError", "ask_study_assistant", "build_assistant_prompt"]
