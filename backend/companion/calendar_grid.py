"""Month grid projection and per-day summaries for the learning calendar."""

from __future__ import annotations

import calendar
import math
from collections import OrderedDict
from datetime import date
from typing import Dict, Iterable, List, Literal, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .topic_planner import DailyTopic
from .watch_scheduler import ScheduleMap, schedule_day_minutes


WeekStart = Literal["sunday", "monday"]

MONTH_NAMES = [
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
]


class MonthRef(BaseModel):
    """Calendar month addressed by a zero-based month index."""

    model_config = ConfigDict(frozen=True)

    year: int = Field(..., ge=1, le=9999)
    month_index: int

    @field_validator("month_index")
    @classmethod
    def _check_month_index(cls, value: int) -> int:
        if not 0 <= value <= 11:
            raise ValueError(f"month_index must be between 0 and 11, got {value}.")
        return value

    @classmethod
    def from_date(cls, value: date) -> "MonthRef":
        return cls(year=value.year, month_index=value.month - 1)


class CalendarDayStatus(BaseModel):
    model_config = ConfigDict(frozen=True)

    date: str
    completed: bool = False
    minutes_learned: int = Field(default=0, ge=0)
    label: Optional[str] = None


class CalendarCell(BaseModel):
    """One grid slot. Leading placeholders carry no date."""

    model_config = ConfigDict(frozen=True)

    date: Optional[str] = None
    day: Optional[int] = None
    is_today: bool = False
    status: Optional[CalendarDayStatus] = None

    @property
    def is_placeholder(self) -> bool:
        return self.date is None


def shift_month(month: MonthRef, delta: int) -> MonthRef:
    """Move ``delta`` months, rolling the year. Raises ``ValidationError`` past years 1..9999."""
    year, index = divmod(month.year * 12 + month.month_index + delta, 12)
    return MonthRef(year=year, month_index=index)


def month_label(month: MonthRef) -> str:
    return f"{MONTH_NAMES[month.month_index]} {month.year}"


def leading_placeholders(month: MonthRef, week_start: WeekStart = "sunday") -> int:
    # date.weekday() is Monday-based.
    weekday = date(month.year, month.month_index + 1, 1).weekday()
    if week_start == "monday":
        return weekday
    return (weekday + 1) % 7


def build_month_grid(
    month: MonthRef,
    day_statuses: Mapping[str, CalendarDayStatus],
    *,
    today: Optional[date] = None,
    week_start: WeekStart = "sunday",
) -> List[CalendarCell]:
    """Lay out ``month`` as placeholders followed by one cell per day.

    ``today`` is supplied by the caller; without it no cell is flagged.
    """
    cells: List[CalendarCell] = [CalendarCell() for _ in range(leading_placeholders(month, week_start))]
    _, days_in_month = calendar.monthrange(month.year, month.month_index + 1)
    for day in range(1, days_in_month + 1):
        current = date(month.year, month.month_index + 1, day)
        key = current.isoformat()
        cells.append(
            CalendarCell(
                date=key,
                day=day,
                is_today=today is not None and current == today,
                status=day_statuses.get(key),
            )
        )
    return cells


def index_day_statuses(statuses: Iterable[CalendarDayStatus]) -> Dict[str, CalendarDayStatus]:
    indexed: Dict[str, CalendarDayStatus] = {}
    for status in statuses:
        indexed[status.date] = status
    return indexed


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def day_statuses_from_schedule(schedule: ScheduleMap) -> "OrderedDict[str, CalendarDayStatus]":
    """Summaries for a watch schedule: planned minutes and video count per day."""
    statuses: "OrderedDict[str, CalendarDayStatus]" = OrderedDict()
    for day, items in schedule.items():
        statuses[day] = CalendarDayStatus(
            date=day,
            completed=False,
            minutes_learned=_round_half_up(schedule_day_minutes(items)),
            label=f"{len(items)} videos",
        )
    return statuses


def day_statuses_from_topics(topics: Iterable[DailyTopic]) -> "OrderedDict[str, CalendarDayStatus]":
    """Summaries for daily topics grouped by their scheduled date.

    A day counts as completed once every topic scheduled on it is completed;
    minutes learned only include completed topics.
    """
    grouped: Dict[str, List[DailyTopic]] = {}
    for topic in topics:
        grouped.setdefault(topic.scheduled_for.isoformat(), []).append(topic)

    statuses: "OrderedDict[str, CalendarDayStatus]" = OrderedDict()
    for day in sorted(grouped):
        entries = grouped[day]
        statuses[day] = CalendarDayStatus(
            date=day,
            completed=all(topic.completed for topic in entries),
            minutes_learned=sum(topic.estimated_minutes for topic in entries if topic.completed),
            label=entries[0].title,
        )
    return statuses


__all__ = [
    "CalendarCell",
    "CalendarDayStatus",
    "MONTH_NAMES",
    "MonthRef",
    "WeekStart",
    "build_month_grid",
    "day_statuses_from_schedule",
    "day_statuses_from_topics",
    "index_day_statuses",
    "leading_placeholders",
    "month_label",
    "shift_month",
]
