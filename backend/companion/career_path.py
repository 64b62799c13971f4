"""Career path milestones generated from a learner profile."""

from __future__ import annotations

import json
import logging
from typing import Any, List, Literal, Optional

from pydantic import BaseModel, Field

from .gemini_client import GeminiClient, GenerativeModelError, strip_code_fences

logger = logging.getLogger(__name__)


class CareerPathError(RuntimeError):
    """Raised when the model response cannot be turned into milestones."""


class LearnerProfile(BaseModel):
    class_level: str = Field(..., min_length=1)
    learning_goal: str = Field(..., min_length=1)
    full_name: Optional[str] = None


class Milestone(BaseModel):
    title: str
    description: str
    timeline: str = "3 months"
    skills_required: List[str] = Field(default_factory=list)
    resources: List[str] = Field(default_factory=list)
    status: Literal["not_started", "in_progress", "completed"] = "not_started"
    order_index: int = 0


def build_career_path_prompt(profile: LearnerProfile) -> str:
    return (
        "As an expert career advisor, create a personalized learning path for a "
        f"{profile.class_level} student interested in {profile.learning_goal}.\n\n"
        "Create a detailed career development path with 4-5 milestones that will help achieve this goal.\n"
        "Each milestone should:\n"
        "1. Build progressively on previous knowledge\n"
        "2. Include specific skills to learn\n"
        "3. Have realistic timelines\n"
        "4. Include relevant learning resources\n\n"
        "Return ONLY a JSON array with this exact structure:\n"
        '[{"title": "Clear milestone title", "description": "Detailed description of what to learn", '
        '"timeline": "Duration in months (e.g., \'3 months\')", "skills_required": ["Array of specific skills"], '
        '"resources": ["Array of learning resources"], "order_index": 0}]'
    )


def _string_list(value: Any, placeholder: str) -> List[str]:
    if isinstance(value, list):
        return [str(entry) for entry in value]
    return [placeholder]


def parse_career_path(text: str) -> List[Milestone]:
    try:
        entries = json.loads(strip_code_fences(text))
    except json.JSONDecodeError as exc:
        raise CareerPathError("Failed to generate career path structure") from exc
    if not isinstance(entries, list):
        raise CareerPathError("Failed to generate career path structure")

    milestones: List[Milestone] = []
    for index, entry in enumerate(entries):
        if not isinstance(entry, dict):
            entry = {}
        milestones.append(
            Milestone(
                title=str(entry.get("title") or f"Phase {index + 1}"),
                description=str(entry.get("description") or "No description provided"),
                timeline=str(entry.get("timeline") or "3 months"),
                skills_required=_string_list(entry.get("skills_required"), "Skill to be determined"),
                resources=_string_list(entry.get("resources"), "Resources to be determined"),
                order_index=index,
            )
        )
    return milestones


def generate_career_path(client: GeminiClient, profile: LearnerProfile) -> List[Milestone]:
    try:
        text = client.generate_text(build_career_path_prompt(profile))
    except GenerativeModelError:
        logger.exception("Career path generation failed for goal %r", profile.learning_goal)
        raise
    return parse_career_path(text)


__all__ = [
    "CareerPathError",
    "LearnerProfile",
    "Milestone",
    "build_career_path_prompt",
    "generate_career_path",
    "parse_career_path",
]
