"""Pydantic request/response models for the mobile client endpoints."""

from __future__ import annotations

from datetime import date
from typing import List, Optional

from pydantic import BaseModel, Field

from .calendar_grid import CalendarCell, CalendarDayStatus
from .career_path import LearnerProfile, Milestone
from .topic_planner import DailyTopic
from .youtube_client import PlaylistVideo


class PlaylistAnalyzeRequest(BaseModel):
    url: str = Field(..., min_length=1)


class PlaylistVideoPayload(BaseModel):
    id: str
    title: str
    duration: str
    duration_seconds: int
    duration_label: str


class PlaylistDetailsPayload(BaseModel):
    playlist_id: str
    title: str
    total_videos: int
    total_duration_seconds: int
    total_duration_label: str
    videos: List[PlaylistVideoPayload] = Field(default_factory=list)


class WatchScheduleRequest(BaseModel):
    videos: List[PlaylistVideo] = Field(default_factory=list)
    daily_minutes: float
    anchor_date: Optional[date] = None
    completed_count: int = Field(default=0, ge=0)


class ScheduledDayPayload(BaseModel):
    date: str
    videos: List[PlaylistVideoPayload] = Field(default_factory=list)
    total_seconds: int
    total_label: str


class WatchSchedulePayload(BaseModel):
    anchor_date: date
    daily_minutes: float
    estimated_days: int
    total_seconds: int
    total_label: str
    days: List[ScheduledDayPayload] = Field(default_factory=list)
    day_statuses: List[CalendarDayStatus] = Field(default_factory=list)


class PlaylistProgressRequest(BaseModel):
    total_videos: int = Field(..., ge=0)
    total_duration_seconds: int = Field(..., ge=0)
    completed_count: int = Field(default=0, ge=0)


class PlaylistProgressPayload(BaseModel):
    completed_videos: int
    remaining_videos: int
    remaining_seconds: int
    remaining_label: str
    percent_complete: int


class MonthPayload(BaseModel):
    year: int
    month_index: int
    label: str


class CalendarGridRequest(BaseModel):
    year: int
    month_index: int
    today: Optional[date] = None
    day_statuses: List[CalendarDayStatus] = Field(default_factory=list)
    topics: List[DailyTopic] = Field(
        default_factory=list,
        description="Daily topics summarised into day statuses; explicit day_statuses win on conflicts.",
    )


class CalendarGridPayload(BaseModel):
    month: MonthPayload
    previous_month: Optional[MonthPayload] = Field(None, description="Null when the grid shows January of year 1.")
    next_month: Optional[MonthPayload] = Field(None, description="Null when the grid shows December of year 9999.")
    week_start: str
    cells: List[CalendarCell] = Field(default_factory=list)


class CareerPathRequest(BaseModel):
    profile: LearnerProfile


class CareerPathPayload(BaseModel):
    milestones: List[Milestone] = Field(default_factory=list)


class DailyTopicsRequest(BaseModel):
    user_id: str = Field(..., min_length=1)
    milestone_id: str = Field(..., min_length=1)
    milestone: Milestone
    total_days: Optional[int] = Field(default=None, ge=1, le=365)
    anchor_date: Optional[date] = None


class DailyTopicsPayload(BaseModel):
    used_fallback: bool
    topics: List[DailyTopic] = Field(default_factory=list)
    day_statuses: List[CalendarDayStatus] = Field(default_factory=list)


class AssistantRequest(BaseModel):
    question: str = Field(..., min_length=1, max_length=4000)


class AssistantPayload(BaseModel):
    answer: str
