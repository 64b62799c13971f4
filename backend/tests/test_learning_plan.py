from __future__ import annotations

import json
from datetime import date, datetime, timezone
from types import SimpleNamespace
from typing import Any, Dict, List, Optional, Tuple

import httpx
import pytest
from google.genai import errors

from companion.career_path import CareerPathError, LearnerProfile, Milestone, generate_career_path, parse_career_path
from companion.gemini_client import GeminiClient, GenerativeModelError, strip_code_fences
from companion.study_assistant import AssistantError, ask_study_assistant
from companion.topic_planner import (
    clamp_topic_minutes,
    complete_topic,
    fallback_topics,
    generate_daily_topics,
    next_topic,
    parse_daily_topics,
    schedule_daily_topics,
    topic_for_day,
    total_hours_for_timeline,
)


def _milestone(**overrides) -> Milestone:
    values = {
        "title": "Python Foundations",
        "description": "Learn the core language.",
        "timeline": "2 months",
        "skills_required": ["Syntax", "Testing"],
        "resources": ["docs.python.org"],
    }
    values.update(overrides)
    return Milestone(**values)


class _FakeModels:
    def __init__(self, text: Optional[str], error: Optional[Exception]) -> None:
        self.text = text
        self.error = error
        self.calls: List[Dict[str, Any]] = []

    def generate_content(self, *, model: str, contents: str) -> SimpleNamespace:
        self.calls.append({"model": model, "contents": contents})
        if self.error is not None:
            raise self.error
        return SimpleNamespace(text=self.text)


class _FakeGenAI:
    """Stands in for ``genai.Client``; only ``models.generate_content`` is used."""

    def __init__(self, text: Optional[str] = None, error: Optional[Exception] = None) -> None:
        self.models = _FakeModels(text, error)


def _server_error() -> errors.APIError:
    return errors.ServerError(500, {"error": {"code": 500, "message": "boom", "status": "INTERNAL"}})


def _gemini(text: Optional[str] = None, error: Optional[Exception] = None) -> Tuple[GeminiClient, _FakeGenAI]:
    fake = _FakeGenAI(text, error)
    return GeminiClient("gemini-key", model="gemini-test", client=fake), fake


def test_gemini_client_sends_prompt_to_configured_model() -> None:
    client, fake = _gemini("Hello")

    assert client.generate_text("Say hello") == "Hello"
    assert fake.models.calls == [{"model": "gemini-test", "contents": "Say hello"}]


@pytest.mark.parametrize(
    "error",
    [_server_error(), httpx.ConnectError("offline")],
)
def test_gemini_client_wraps_sdk_and_transport_errors(error: Exception) -> None:
    client, _ = _gemini(error=error)
    with pytest.raises(GenerativeModelError, match="Gemini request failed"):
        client.generate_text("prompt")


@pytest.mark.parametrize("text", [None, "", "   "])
def test_gemini_client_raises_on_empty_text(text: Optional[str]) -> None:
    client, _ = _gemini(text)
    with pytest.raises(GenerativeModelError, match="did not contain any text"):
        client.generate_text("prompt")


def test_gemini_client_requires_api_key() -> None:
    with pytest.raises(GenerativeModelError):
        GeminiClient("", model="gemini-test", client=_FakeGenAI("unused"))


def test_gemini_client_only_closes_clients_it_created() -> None:
    fake = _FakeGenAI("unused")
    fake.close = lambda: pytest.fail("borrowed client must stay open")  # type: ignore[attr-defined]

    with GeminiClient("gemini-key", model="gemini-test", client=fake):
        pass


def test_strip_code_fences() -> None:
    assert strip_code_fences('```json\n[{"a": 1}]\n```') == '[{"a": 1}]'
    assert strip_code_fences("  plain ") == "plain"


def test_parse_career_path_applies_defaults() -> None:
    text = '```json\n[{"title": "Basics", "skills_required": ["Python", 3]}, {"resources": "not a list"}]\n```'

    milestones = parse_career_path(text)

    assert milestones[0].title == "Basics"
    assert milestones[0].skills_required == ["Python", "3"]
    assert milestones[0].timeline == "3 months"
    assert milestones[1].title == "Phase 2"
    assert milestones[1].description == "No description provided"
    assert milestones[1].resources == ["Resources to be determined"]
    assert [m.order_index for m in milestones] == [0, 1]


@pytest.mark.parametrize("text", ["not json", '{"title": "object"}'])
def test_parse_career_path_rejects_unusable_output(text: str) -> None:
    with pytest.raises(CareerPathError):
        parse_career_path(text)


def test_generate_career_path_uses_profile_in_prompt() -> None:
    client, fake = _gemini('[{"title": "Data basics"}]')

    milestones = generate_career_path(client, LearnerProfile(class_level="12th grade", learning_goal="data science"))

    assert milestones[0].title == "Data basics"
    prompt = fake.models.calls[0]["contents"]
    assert "12th grade student interested in data science" in prompt


@pytest.mark.parametrize(
    ("timeline", "hours"),
    [("3 months", 90), ("6", 180), ("six months", 90), ("0 months", 90), ("", 90)],
)
def test_total_hours_for_timeline(timeline: str, hours: int) -> None:
    assert total_hours_for_timeline(timeline) == hours


def test_clamp_topic_minutes() -> None:
    assert clamp_topic_minutes(60, 90, 30) == 60
    assert clamp_topic_minutes(10, 90, 30) == 45
    assert clamp_topic_minutes(500, 90, 30) == 120
    assert clamp_topic_minutes(None, 90, 60) == 90
    assert clamp_topic_minutes("abc", 90, 30) == 120


def test_fallback_topics_progress_through_skills() -> None:
    topics = fallback_topics(_milestone(), 5)

    assert len(topics) == 5
    assert [topic.title for topic in topics] == [
        "Syntax - Day 1",
        "Syntax - Day 2",
        "Syntax - Day 3",
        "Testing - Day 1",
        "Testing - Day 2",
    ]
    assert topics[1].prerequisites == ["Syntax - Day 1"]
    assert topics[0].description.startswith("Introduction to Syntax")
    assert topics[0].estimated_minutes == 720
    assert [topic.order_index for topic in topics] == list(range(5))


def test_parse_daily_topics_formats_description_and_defaults() -> None:
    text = json.dumps(
        [
            {
                "title": "Variables",
                "description": "Names and values.",
                "estimated_minutes": 30,
                "practice_tasks": ["Swap two variables"],
                "prerequisites": ["Install Python"],
            },
            {"estimated_minutes": 200},
        ]
    )

    drafts = parse_daily_topics(text, _milestone(), 10)

    first, second = drafts
    assert first.estimated_minutes == 45
    assert "Practice Tasks:" in first.description
    assert "• Swap two variables" in first.description
    assert "• Install Python" in first.description
    assert first.skills_covered == ["Syntax", "Testing"]
    assert second.title == "Day 2: Python Foundations Session"
    assert second.estimated_minutes == 120
    assert second.resources == ["docs.python.org"]


def test_parse_daily_topics_falls_back_on_invalid_json() -> None:
    drafts = parse_daily_topics("Sorry, I cannot help.", _milestone(), 4)
    assert drafts == fallback_topics(_milestone(), 4)


def test_generate_daily_topics_reports_fallback() -> None:
    drafts, used_fallback = generate_daily_topics(_gemini(error=_server_error())[0], _milestone(), 3)
    assert used_fallback is True
    assert len(drafts) == 3

    drafts, used_fallback = generate_daily_topics(_gemini('[{"title": "Loops"}]')[0], _milestone(), 3)
    assert used_fallback is False
    assert drafts[0].title == "Loops"

    _, used_fallback = generate_daily_topics(None, _milestone(), 3)
    assert used_fallback is True


def test_schedule_daily_topics_assigns_consecutive_days_and_links() -> None:
    topics = schedule_daily_topics(
        fallback_topics(_milestone(), 3),
        user_id="user-1",
        milestone_id="m-1",
        anchor_date=date(2024, 1, 31),
    )

    assert [topic.scheduled_for for topic in topics] == [date(2024, 1, 31), date(2024, 2, 1), date(2024, 2, 2)]
    assert topics[0].next_topic_id == topics[1].id
    assert topics[1].next_topic_id == topics[2].id
    assert topics[2].next_topic_id is None
    assert len({topic.id for topic in topics}) == 3


def test_next_topic_and_topic_for_day() -> None:
    topics = schedule_daily_topics(
        fallback_topics(_milestone(), 4),
        user_id="user-1",
        milestone_id="m-1",
        anchor_date=date(2024, 3, 1),
    )
    topics[1] = complete_topic(topics[1], completed_at=datetime(2024, 3, 2, tzinfo=timezone.utc))

    assert next_topic(topics, topics[0].id) == topics[2]
    assert next_topic(topics, topics[3].id) is None
    assert next_topic(topics, "missing") is None
    assert topic_for_day(topics, date(2024, 3, 1)) == topics[0]
    assert topic_for_day(topics, date(2024, 3, 2)) is None


def test_complete_topic_returns_updated_copy() -> None:
    topic = schedule_daily_topics(
        fallback_topics(_milestone(), 1), user_id="u", milestone_id="m", anchor_date=date(2024, 1, 1)
    )[0]
    finished_at = datetime(2024, 1, 1, 20, tzinfo=timezone.utc)

    done = complete_topic(topic, completed_at=finished_at, feedback="Clear", difficulty_rating=3)

    assert done.completed is True
    assert done.completed_at == finished_at
    assert done.difficulty_rating == 3
    assert topic.completed is False
    with pytest.raises(ValueError):
        complete_topic(topic, completed_at=finished_at, difficulty_rating=9)


def test_study_assistant_wraps_question() -> None:
    client, fake = _gemini("  A list is mutable.  ")
    answer = ask_study_assistant(client, "What is a list?")

    assert answer == "A list is mutable."
    prompt = fake.models.calls[0]["contents"]
    assert prompt.startswith("You are an AI study assistant")
    assert prompt.endswith("Student Question: What is a list?")


def test_study_assistant_hides_model_errors() -> None:
    with pytest.raises(AssistantError, match="Failed to get AI response"):
        ask_study_assistant(_gemini(error=_server_error())[0], "Why?")
