"""Playlist tracking and watch-schedule endpoints."""

from __future__ import annotations

import logging
from datetime import date
from time import perf_counter
from typing import Iterator, List

from fastapi import APIRouter, Depends, HTTPException, status

from .api_models import (
    PlaylistAnalyzeRequest,
    PlaylistDetailsPayload,
    PlaylistProgressPayload,
    PlaylistProgressRequest,
    PlaylistVideoPayload,
    ScheduledDayPayload,
    WatchSchedulePayload,
    WatchScheduleRequest,
)
from .calendar_grid import day_statuses_from_schedule
from .config import Settings, get_settings
from .duration_codec import format_duration
from .playlist_tracking import playlist_progress
from .telemetry import PLAYLIST_ANALYZED, WATCH_SCHEDULE_GENERATED, emit_event
from .watch_scheduler import InvalidBudgetError, TimedItem, compute_schedule, summarize_schedule
from .youtube_client import (
    PlaylistDetails,
    PlaylistVideo,
    YouTubeAPIError,
    YouTubeClient,
    extract_playlist_id,
)

router = APIRouter(prefix="/api/watch", tags=["watch"])
logger = logging.getLogger(__name__)


def get_youtube_client(settings: Settings = Depends(get_settings)) -> Iterator[YouTubeClient]:
    try:
        client = YouTubeClient(
            settings.youtube_api_key,
            base_url=settings.youtube_base_url,
            timeout_seconds=settings.http_timeout_seconds,
        )
    except YouTubeAPIError as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc
    try:
        yield client
    finally:
        client.close()


def _video_payload(video: PlaylistVideo) -> PlaylistVideoPayload:
    seconds = video.duration_seconds
    return PlaylistVideoPayload(
        id=video.id,
        title=video.title,
        duration=video.duration,
        duration_seconds=seconds,
        duration_label=format_duration(seconds),
    )


def _details_payload(details: PlaylistDetails) -> PlaylistDetailsPayload:
    return PlaylistDetailsPayload(
        playlist_id=details.playlist_id,
        title=details.title,
        total_videos=details.total_videos,
        total_duration_seconds=details.total_duration_seconds,
        total_duration_label=format_duration(details.total_duration_seconds),
        videos=[_video_payload(video) for video in details.videos],
    )


@router.post("/playlist", response_model=PlaylistDetailsPayload, status_code=status.HTTP_200_OK)
def analyze_playlist(
    request: PlaylistAnalyzeRequest,
    client: YouTubeClient = Depends(get_youtube_client),
) -> PlaylistDetailsPayload:
    playlist_id = extract_playlist_id(request.url)
    if playlist_id is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid YouTube playlist URL",
        )
    started_at = perf_counter()
    try:
        details = client.fetch_playlist(playlist_id)
    except YouTubeAPIError as exc:
        logger.warning("Playlist %s could not be analyzed: %s", playlist_id, exc)
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)) from exc
    emit_event(
        PLAYLIST_ANALYZED,
        playlist_id=playlist_id,
        total_videos=details.total_videos,
        total_duration_seconds=details.total_duration_seconds,
        duration_ms=int((perf_counter() - started_at) * 1000),
    )
    return _details_payload(details)


@router.post("/schedule", response_model=WatchSchedulePayload, status_code=status.HTTP_200_OK)
def generate_watch_schedule(request: WatchScheduleRequest) -> WatchSchedulePayload:
    if request.completed_count > len(request.videos):
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="completed_count cannot exceed the number of videos.",
        )
    anchor = request.anchor_date or date.today()
    remaining: List[PlaylistVideo] = request.videos[request.completed_count :]
    videos_by_id = {video.id: video for video in remaining}
    items: List[TimedItem] = [video.to_timed_item() for video in remaining]
    try:
        schedule = compute_schedule(items, request.daily_minutes, anchor)
    except InvalidBudgetError as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)) from exc

    summary = summarize_schedule(schedule)
    days: List[ScheduledDayPayload] = []
    for day, bucket in schedule.items():
        day_seconds = sum(item.duration_seconds for item in bucket)
        days.append(
            ScheduledDayPayload(
                date=day,
                videos=[_video_payload(videos_by_id[item.id]) for item in bucket],
                total_seconds=day_seconds,
                total_label=format_duration(day_seconds),
            )
        )
    emit_event(
        WATCH_SCHEDULE_GENERATED,
        anchor_date=anchor,
        daily_minutes=request.daily_minutes,
        videos=summary.item_count,
        estimated_days=summary.estimated_days,
    )
    return WatchSchedulePayload(
        anchor_date=anchor,
        daily_minutes=request.daily_minutes,
        estimated_days=summary.estimated_days,
        total_seconds=summary.total_seconds,
        total_label=format_duration(summary.total_seconds),
        days=days,
        day_statuses=list(day_statuses_from_schedule(schedule).values()),
    )


@router.post("/progress", response_model=PlaylistProgressPayload, status_code=status.HTTP_200_OK)
def get_playlist_progress(request: PlaylistProgressRequest) -> PlaylistProgressPayload:
    details = PlaylistDetails(
        playlist_id="",
        title="",
        total_videos=request.total_videos,
        total_duration_seconds=request.total_duration_seconds,
    )
    try:
        progress = playlist_progress(details, request.completed_count)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)) from exc
    return PlaylistProgressPayload(
        completed_videos=progress.completed_videos,
        remaining_videos=progress.remaining_videos,
        remaining_seconds=progress.remaining_seconds,
        remaining_label=format_duration(progress.remaining_seconds),
        percent_complete=progress.percent_complete,
    )
