"""Learning companion backend: watch scheduling, calendar grids and learning plans."""

from .calendar_grid import CalendarCell, CalendarDayStatus, MonthRef, build_month_grid, shift_month
from .duration_codec import duration_token, format_duration, parse_duration
from .watch_scheduler import InvalidBudgetError, TimedItem, compute_schedule

__all__ = [
    "CalendarCell",
    "CalendarDayStatus",
    "InvalidBudgetError",
    "MonthRef",
    "TimedItem",
    "build_month_grid",
    "compute_schedule",
    "duration_token",
    "format_duration",
    "parse_duration",
    "shift_month",
]
