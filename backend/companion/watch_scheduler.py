"""Greedy packing of timed items (playlist videos) into daily watch budgets."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Dict, Iterable, List, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)


class InvalidBudgetError(ValueError):
    """Raised when a daily budget is not a positive, finite number of minutes."""


class TimedItem(BaseModel):
    """Unit of work to schedule. Owned by the caller and never copied."""

    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    duration_seconds: int = Field(..., ge=0)

    @property
    def minutes(self) -> float:
        return self.duration_seconds / 60


ScheduleMap = Dict[str, List[TimedItem]]


@dataclass(frozen=True)
class ScheduleSummary:
    estimated_days: int
    item_count: int
    total_seconds: int
    first_date: Optional[str]
    last_date: Optional[str]


def validate_daily_budget(value: float) -> float:
    try:
        budget = float(value)
    except (TypeError, ValueError) as exc:
        raise InvalidBudgetError(f"Daily budget must be a number of minutes, got {value!r}.") from exc
    if not math.isfinite(budget) or budget <= 0:
        raise InvalidBudgetError(f"Daily budget must be a positive number of minutes, got {value!r}.")
    return budget


def compute_schedule(
    items: Iterable[TimedItem],
    daily_budget_minutes: float,
    anchor_date: date,
) -> ScheduleMap:
    """Partition ``items`` into consecutive days starting at ``anchor_date``.

    Items keep their order. A day accepts items while its running total stays
    within the budget; an item that would overflow a non-empty day opens the
    next day. An item larger than the budget that arrives on an empty day is
    placed there alone and the day is closed immediately. Days that receive no
    items are absent from the result.

    A day holding only zero-minute items is not empty: an oversized item after
    them opens the next day instead of sharing theirs, so every multi-item day
    stays within the budget.
    """
    budget = validate_daily_budget(daily_budget_minutes)
    schedule: ScheduleMap = {}
    cursor = anchor_date
    accumulated = 0.0
    bucket: List[TimedItem] = []

    for item in items:
        minutes = item.minutes
        if accumulated + minutes > budget:
            if not bucket:
                bucket.append(item)
                schedule[cursor.isoformat()] = bucket
                cursor += timedelta(days=1)
                bucket = []
                accumulated = 0.0
                continue
            cursor += timedelta(days=1)
            bucket = [item]
            schedule[cursor.isoformat()] = bucket
            accumulated = minutes
            continue
        bucket.append(item)
        schedule[cursor.isoformat()] = bucket
        accumulated += minutes

    logger.debug(
        "Packed %d items into %d days (budget=%.2f min, anchor=%s)",
        sum(len(day) for day in schedule.values()),
        len(schedule),
        budget,
        anchor_date.isoformat(),
    )
    return schedule


def schedule_day_minutes(items: Sequence[TimedItem]) -> float:
    return sum(item.minutes for item in items)


def summarize_schedule(schedule: ScheduleMap) -> ScheduleSummary:
    dates = list(schedule.keys())
    return ScheduleSummary(
        estimated_days=len(dates),
        item_count=sum(len(day) for day in schedule.values()),
        total_seconds=sum(item.duration_seconds for day in schedule.values() for item in day),
        first_date=dates[0] if dates else None,
        last_date=dates[-1] if dates else None,
    )


__all__ = [
    "InvalidBudgetError",
    "ScheduleMap",
    "ScheduleSummary",
    "TimedItem",
    "compute_schedule",
    "schedule_day_minutes",
    "summarize_schedule",
    "validate_daily_budget",
]
