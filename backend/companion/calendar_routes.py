"""Calendar grid endpoint backing the learning calendar widget."""

from __future__ import annotations

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import ValidationError

from .api_models import CalendarGridPayload, CalendarGridRequest, MonthPayload
from .calendar_grid import (
    MonthRef,
    build_month_grid,
    day_statuses_from_topics,
    index_day_statuses,
    month_label,
    shift_month,
)
from .config import Settings, get_settings

router = APIRouter(prefix="/api/calendar", tags=["calendar"])


def _month_payload(month: MonthRef) -> MonthPayload:
    return MonthPayload(year=month.year, month_index=month.month_index, label=month_label(month))


def _neighbour_payload(month: MonthRef, delta: int) -> Optional[MonthPayload]:
    try:
        return _month_payload(shift_month(month, delta))
    except ValidationError:
        # Outside the supported year range.
        return None


@router.post("/grid", response_model=CalendarGridPayload, status_code=status.HTTP_200_OK)
def get_calendar_grid(
    request: CalendarGridRequest,
    settings: Settings = Depends(get_settings),
) -> CalendarGridPayload:
    try:
        month = MonthRef(year=request.year, month_index=request.month_index)
    except ValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"Invalid calendar month {request.year}-{request.month_index}.",
        ) from exc

    statuses = dict(day_statuses_from_topics(request.topics))
    statuses.update(index_day_statuses(request.day_statuses))
    cells = build_month_grid(
        month,
        statuses,
        today=request.today or date.today(),
        week_start=settings.calendar_week_start,
    )
    return CalendarGridPayload(
        month=_month_payload(month),
        previous_month=_neighbour_payload(month, -1),
        next_month=_neighbour_payload(month, 1),
        week_start=settings.calendar_week_start,
        cells=cells,
    )
