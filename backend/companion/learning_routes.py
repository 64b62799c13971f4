"""Career path, daily topic and study assistant endpoints."""

from __future__ import annotations

import logging
from datetime import date
from typing import Iterator, Optional

from fastapi import APIRouter, Depends, HTTPException, status

from .api_models import (
    AssistantPayload,
    AssistantRequest,
    CareerPathPayload,
    CareerPathRequest,
    DailyTopicsPayload,
    DailyTopicsRequest,
)
from .calendar_grid import day_statuses_from_topics
from .career_path import CareerPathError, generate_career_path
from .config import Settings, get_settings
from .gemini_client import GeminiClient, GenerativeModelError
from .study_assistant import AssistantError, ask_study_assistant
from .telemetry import DAILY_TOPICS_PLANNED, emit_event
from .topic_planner import generate_daily_topics, schedule_daily_topics

router = APIRouter(prefix="/api/learning", tags=["learning"])
logger = logging.getLogger(__name__)


def get_gemini_client(settings: Settings = Depends(get_settings)) -> Iterator[Optional[GeminiClient]]:
    """Yield a Gemini client, or ``None`` when no API key is configured."""
    if not settings.gemini_api_key:
        yield None
        return
    client = GeminiClient(
        settings.gemini_api_key,
        model=settings.gemini_model,
        timeout_seconds=settings.http_timeout_seconds,
    )
    try:
        yield client
    finally:
        client.close()


def _require_client(client: Optional[GeminiClient]) -> GeminiClient:
    if client is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Gemini API key is not configured.",
        )
    return client


@router.post("/career-path", response_model=CareerPathPayload, status_code=status.HTTP_200_OK)
def create_career_path(
    request: CareerPathRequest,
    client: Optional[GeminiClient] = Depends(get_gemini_client),
) -> CareerPathPayload:
    try:
        milestones = generate_career_path(_require_client(client), request.profile)
    except (GenerativeModelError, CareerPathError) as exc:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)) from exc
    return CareerPathPayload(milestones=milestones)


@router.post("/daily-topics", response_model=DailyTopicsPayload, status_code=status.HTTP_200_OK)
def plan_daily_topics(
    request: DailyTopicsRequest,
    settings: Settings = Depends(get_settings),
    client: Optional[GeminiClient] = Depends(get_gemini_client),
) -> DailyTopicsPayload:
    total_days = request.total_days or settings.default_topic_days
    anchor = request.anchor_date or date.today()
    drafts, used_fallback = generate_daily_topics(client, request.milestone, total_days)
    topics = schedule_daily_topics(
        drafts,
        user_id=request.user_id,
        milestone_id=request.milestone_id,
        anchor_date=anchor,
    )
    emit_event(
        DAILY_TOPICS_PLANNED,
        user_id=request.user_id,
        milestone_id=request.milestone_id,
        topics=len(topics),
        used_fallback=used_fallback,
        anchor_date=anchor,
    )
    return DailyTopicsPayload(
        used_fallback=used_fallback,
        topics=topics,
        day_statuses=list(day_statuses_from_topics(topics).values()),
    )


@router.post("/assistant", response_model=AssistantPayload, status_code=status.HTTP_200_OK)
def ask_assistant(
    request: AssistantRequest,
    client: Optional[GeminiClient] = Depends(get_gemini_client),
) -> AssistantPayload:
    if not request.question.strip():
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="Please enter a question.",
        )
    try:
        answer = ask_study_assistant(_require_client(client), request.question)
    except AssistantError as exc:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)) from exc
    return AssistantPayload(answer=answer)
