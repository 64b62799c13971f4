"""Daily learning topics: generation, fallback plans and day-by-day scheduling."""

from __future__ import annotations

import json
import logging
import math
import re
from datetime import date, datetime, timedelta
from typing import Any, Iterable, List, Mapping, Optional, Sequence
from uuid import uuid4

from pydantic import BaseModel, Field

from .career_path import Milestone
from .gemini_client import GeminiClient, GenerativeModelError, strip_code_fences

logger = logging.getLogger(__name__)

MIN_TOPIC_MINUTES = 45
MAX_TOPIC_MINUTES = 120
DEFAULT_TIMELINE_MONTHS = 3
HOURS_PER_MONTH = 30

_LEADING_INT_RE = re.compile(r"^\s*([+-]?\d+)")

_PROGRESSION_LEVELS = (
    "Introduction to {skill}. Learn the fundamental concepts and basic principles.",
    "Build upon your {skill} knowledge with intermediate concepts and practical exercises.",
    "Advanced {skill} topics and real-world applications.",
    "Master {skill} through complex scenarios and project work.",
)


class TopicDraft(BaseModel):
    """Topic proposed for a milestone before it is placed on the calendar."""

    title: str
    description: str = ""
    estimated_minutes: int = Field(..., ge=0)
    skills_covered: List[str] = Field(default_factory=list)
    prerequisites: List[str] = Field(default_factory=list)
    resources: List[str] = Field(default_factory=list)
    practice_tasks: List[str] = Field(default_factory=list)
    order_index: int = 0


class DailyTopic(TopicDraft):
    id: str = Field(default_factory=lambda: uuid4().hex)
    user_id: str
    milestone_id: str
    scheduled_for: date
    completed: bool = False
    completed_at: Optional[datetime] = None
    feedback: Optional[str] = None
    difficulty_rating: Optional[int] = Field(default=None, ge=1, le=5)
    next_topic_id: Optional[str] = None


def total_hours_for_timeline(timeline: str) -> int:
    """Learning hours for a milestone timeline such as ``"3 months"``."""
    match = _LEADING_INT_RE.match(timeline or "")
    months = int(match.group(1)) if match else 0
    return (months or DEFAULT_TIMELINE_MONTHS) * HOURS_PER_MONTH


def clamp_topic_minutes(estimated: Any, total_hours: int, total_days: int) -> int:
    per_day = (total_hours * 60) / total_days
    try:
        provided = float(estimated)
    except (TypeError, ValueError):
        provided = 0.0
    if not provided or math.isnan(provided):
        provided = per_day
    return int(max(MIN_TOPIC_MINUTES, min(MAX_TOPIC_MINUTES, provided)))


def format_topic_description(entry: Mapping[str, Any]) -> str:
    parts = [str(entry.get("description") or "")]
    practice_tasks = entry.get("practice_tasks") or []
    if practice_tasks:
        parts.append("\n\nPractice Tasks:")
        parts.extend(f"• {task}" for task in practice_tasks)
    prerequisites = entry.get("prerequisites") or []
    if prerequisites:
        parts.append("\n\nPrerequisites:")
        parts.extend(f"• {prerequisite}" for prerequisite in prerequisites)
    return "\n".join(parts)


def build_daily_topics_prompt(milestone: Milestone, total_days: int) -> str:
    total_hours = total_hours_for_timeline(milestone.timeline)
    return (
        "You are an expert curriculum designer. Create a detailed learning path for:\n"
        f'Milestone: "{milestone.title}"\n'
        f'Description: "{milestone.description}"\n'
        f"Required Skills: {', '.join(milestone.skills_required)}\n"
        f"Total Learning Hours Required: {total_hours} hours\n\n"
        f"Create a series of {total_days} daily learning sessions that:\n"
        f"1. Total approximately {total_hours} hours of learning time\n"
        "2. Build progressively from basics to advanced concepts\n"
        "3. Include hands-on practice and exercises\n"
        "4. Cover all required skills systematically\n\n"
        "Return ONLY a valid JSON array with no line breaks in strings. Format:\n"
        '[{"title": "Topic Title", "description": "Description", "estimated_minutes": 60, '
        '"skills_covered": ["skill1"], "prerequisites": ["prereq1"], "resources": ["resource1"], '
        '"practice_tasks": ["task1"]}]'
    )


def fallback_topics(milestone: Milestone, total_days: int) -> List[TopicDraft]:
    """Deterministic plan that spreads the milestone's skills over ``total_days``."""
    total_hours = total_hours_for_timeline(milestone.timeline)
    minutes_per_day = math.ceil((total_hours * 60) / total_days)
    skills = milestone.skills_required
    if not skills:
        return []
    days_per_skill = math.ceil(total_days / len(skills))

    topics: List[TopicDraft] = []
    for skill in skills:
        for day in range(days_per_skill):
            level = _PROGRESSION_LEVELS[min(day, len(_PROGRESSION_LEVELS) - 1)]
            topics.append(
                TopicDraft(
                    title=f"{skill} - Day {day + 1}",
                    description=level.format(skill=skill),
                    estimated_minutes=minutes_per_day,
                    skills_covered=[skill],
                    prerequisites=[f"{skill} - Day {day}"] if day > 0 else [],
                    resources=list(milestone.resources),
                    practice_tasks=[f"Practice {skill} concepts learned today"],
                    order_index=len(topics),
                )
            )
    return topics[:total_days]


def _string_list(value: Any, default: Sequence[str]) -> List[str]:
    if isinstance(value, list):
        return [str(entry) for entry in value]
    return list(default)


def _decode_topic_entries(text: str, milestone: Milestone) -> Optional[List[Any]]:
    try:
        entries = json.loads(strip_code_fences(text))
        if not isinstance(entries, list):
            raise ValueError("Response is not an array")
    except ValueError as exc:
        logger.warning("Daily topic response for %r was unusable: %s", milestone.title, exc)
        return None
    return entries


def _drafts_from_entries(entries: List[Any], milestone: Milestone, total_days: int) -> List[TopicDraft]:
    total_hours = total_hours_for_timeline(milestone.timeline)
    drafts: List[TopicDraft] = []
    for index, entry in enumerate(entries):
        if not isinstance(entry, dict):
            entry = {}
        drafts.append(
            TopicDraft(
                title=str(entry.get("title") or f"Day {index + 1}: {milestone.title} Session"),
                description=format_topic_description(entry),
                estimated_minutes=clamp_topic_minutes(entry.get("estimated_minutes"), total_hours, total_days),
                skills_covered=_string_list(entry.get("skills_covered"), milestone.skills_required),
                prerequisites=_string_list(entry.get("prerequisites"), []),
                resources=_string_list(entry.get("resources"), milestone.resources),
                practice_tasks=_string_list(entry.get("practice_tasks"), []),
                order_index=index,
            )
        )
    return drafts


def parse_daily_topics(text: str, milestone: Milestone, total_days: int) -> List[TopicDraft]:
    """Convert a model answer into topic drafts, falling back on unusable output."""
    entries = _decode_topic_entries(text, milestone)
    if entries is None:
        return fallback_topics(milestone, total_days)
    return _drafts_from_entries(entries, milestone, total_days)


def generate_daily_topics(
    client: Optional[GeminiClient],
    milestone: Milestone,
    total_days: int,
) -> tuple[List[TopicDraft], bool]:
    """Return topic drafts and whether the deterministic fallback was used."""
    if total_days < 1:
        raise ValueError("total_days must be at least 1.")
    if client is None:
        return fallback_topics(milestone, total_days), True
    try:
        text = client.generate_text(build_daily_topics_prompt(milestone, total_days))
    except GenerativeModelError as exc:
        logger.warning("Daily topic generation failed for %r: %s", milestone.title, exc)
        return fallback_topics(milestone, total_days), True
    entries = _decode_topic_entries(text, milestone)
    if entries is None:
        return fallback_topics(milestone, total_days), True
    return _drafts_from_entries(entries, milestone, total_days), False


def schedule_daily_topics(
    drafts: Sequence[TopicDraft],
    *,
    user_id: str,
    milestone_id: str,
    anchor_date: date,
) -> List[DailyTopic]:
    """Place one topic per day from ``anchor_date`` and chain ``next_topic_id``."""
    topics = [
        DailyTopic(
            **draft.model_dump(),
            user_id=user_id,
            milestone_id=milestone_id,
            scheduled_for=anchor_date + timedelta(days=offset),
        )
        for offset, draft in enumerate(drafts)
    ]
    for current, following in zip(topics, topics[1:]):
        current.next_topic_id = following.id
    return topics


def next_topic(topics: Iterable[DailyTopic], current_topic_id: str) -> Optional[DailyTopic]:
    """Earliest incomplete topic of the same milestone scheduled after the current one."""
    pool = list(topics)
    current = next((topic for topic in pool if topic.id == current_topic_id), None)
    if current is None:
        return None
    candidates = [
        topic
        for topic in pool
        if topic.milestone_id == current.milestone_id
        and not topic.completed
        and topic.scheduled_for > current.scheduled_for
    ]
    if not candidates:
        return None
    return min(candidates, key=lambda topic: (topic.scheduled_for, topic.order_index))


def topic_for_day(topics: Iterable[DailyTopic], day: date) -> Optional[DailyTopic]:
    for topic in sorted(topics, key=lambda item: item.order_index):
        if topic.scheduled_for == day and not topic.completed:
            return topic
    return None


def complete_topic(
    topic: DailyTopic,
    *,
    completed_at: datetime,
    feedback: Optional[str] = None,
    difficulty_rating: Optional[int] = None,
) -> DailyTopic:
    if difficulty_rating is not None and not 1 <= difficulty_rating <= 5:
        raise ValueError("difficulty_rating must be between 1 and 5.")
    return topic.model_copy(
        update={
            "completed": True,
            "completed_at": completed_at,
            "feedback": feedback,
            "difficulty_rating": difficulty_rating,
        }
    )


__all__ = [
    "DailyTopic",
    "TopicDraft",
    "build_daily_topics_prompt",
    "clamp_topic_minutes",
    "complete_topic",
    "fallback_topics",
    "format_topic_description",
    "generate_daily_topics",
    "next_topic",
    "parse_daily_topics",
    "schedule_daily_topics",
    "topic_for_day",
    "total_hours_for_timeline",
]
