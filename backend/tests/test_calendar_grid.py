from __future__ import annotations

from datetime import date

import pytest
from pydantic import ValidationError

from companion.calendar_grid import (
    CalendarDayStatus,
    MonthRef,
    build_month_grid,
    day_statuses_from_schedule,
    day_statuses_from_topics,
    index_day_statuses,
    leading_placeholders,
    month_label,
    shift_month,
)
from companion.topic_planner import DailyTopic
from companion.watch_scheduler import TimedItem, compute_schedule

JANUARY_2024 = MonthRef(year=2024, month_index=0)


def test_january_2024_grid_starts_after_one_placeholder() -> None:
    cells = build_month_grid(JANUARY_2024, {})

    placeholders = [cell for cell in cells if cell.is_placeholder]
    days = [cell for cell in cells if not cell.is_placeholder]
    assert len(placeholders) == 1
    assert cells[0].is_placeholder
    assert len(days) == 31
    assert days[0].date == "2024-01-01"
    assert days[-1].date == "2024-01-31"
    assert [cell.day for cell in days] == list(range(1, 32))


def test_monday_week_start_has_no_placeholder_for_january_2024() -> None:
    cells = build_month_grid(JANUARY_2024, {}, week_start="monday")
    assert not cells[0].is_placeholder
    assert len(cells) == 31


def test_today_flag_only_set_when_passed() -> None:
    without_today = build_month_grid(JANUARY_2024, {})
    assert not any(cell.is_today for cell in without_today)

    cells = build_month_grid(JANUARY_2024, {}, today=date(2024, 1, 15))
    flagged = [cell.date for cell in cells if cell.is_today]
    assert flagged == ["2024-01-15"]


def test_today_outside_month_flags_nothing() -> None:
    cells = build_month_grid(JANUARY_2024, {}, today=date(2024, 2, 15))
    assert not any(cell.is_today for cell in cells)


def test_statuses_attach_to_matching_days() -> None:
    status = CalendarDayStatus(date="2024-01-10", completed=True, minutes_learned=45, label="Loops")

    cells = build_month_grid(JANUARY_2024, {"2024-01-10": status, "2024-02-01": status})

    by_date = {cell.date: cell for cell in cells if cell.date}
    assert by_date["2024-01-10"].status == status
    assert by_date["2024-01-11"].status is None
    assert "2024-02-01" not in by_date


def test_leap_year_february_has_29_days() -> None:
    february = MonthRef(year=2024, month_index=1)
    cells = build_month_grid(february, {})
    assert len([cell for cell in cells if cell.date]) == 29
    # 2024-02-01 is a Thursday.
    assert leading_placeholders(february) == 4


def test_grid_is_deterministic() -> None:
    assert build_month_grid(JANUARY_2024, {}) == build_month_grid(JANUARY_2024, {})


def test_shift_month_rolls_years() -> None:
    assert shift_month(JANUARY_2024, -1) == MonthRef(year=2023, month_index=11)
    assert shift_month(MonthRef(year=2023, month_index=11), 1) == JANUARY_2024
    assert shift_month(JANUARY_2024, 14) == MonthRef(year=2025, month_index=2)


def test_shift_month_rejects_years_outside_range() -> None:
    with pytest.raises(ValidationError):
        shift_month(MonthRef(year=9999, month_index=11), 1)
    with pytest.raises(ValidationError):
        shift_month(MonthRef(year=1, month_index=0), -1)


@pytest.mark.parametrize("month_index", [-1, 12])
def test_month_ref_rejects_out_of_range_index(month_index: int) -> None:
    with pytest.raises(ValidationError):
        MonthRef(year=2024, month_index=month_index)


def test_month_label_and_from_date() -> None:
    assert month_label(JANUARY_2024) == "January 2024"
    assert MonthRef.from_date(date(2024, 12, 3)) == MonthRef(year=2024, month_index=11)


def test_day_statuses_from_schedule_summarise_each_day() -> None:
    items = [
        TimedItem(id="a", title="A", duration_seconds=630),
        TimedItem(id="b", title="B", duration_seconds=270),
        TimedItem(id="c", title="C", duration_seconds=1500),
    ]
    schedule = compute_schedule(items, 20, date(2024, 1, 30))

    statuses = day_statuses_from_schedule(schedule)

    assert list(statuses.keys()) == ["2024-01-30", "2024-01-31"]
    first = statuses["2024-01-30"]
    assert first.minutes_learned == 15
    assert first.label == "2 videos"
    assert first.completed is False
    assert statuses["2024-01-31"].minutes_learned == 25


def test_day_statuses_from_topics_track_completion() -> None:
    def topic(title: str, day: date, minutes: int, completed: bool) -> DailyTopic:
        return DailyTopic(
            title=title,
            estimated_minutes=minutes,
            user_id="user-1",
            milestone_id="m-1",
            scheduled_for=day,
            completed=completed,
        )

    topics = [
        topic("Later", date(2024, 1, 3), 60, False),
        topic("Arrays", date(2024, 1, 2), 45, True),
        topic("Lists", date(2024, 1, 2), 30, False),
        topic("Intro", date(2024, 1, 1), 50, True),
    ]

    statuses = day_statuses_from_topics(topics)

    assert list(statuses.keys()) == ["2024-01-01", "2024-01-02", "2024-01-03"]
    assert statuses["2024-01-01"].completed is True
    assert statuses["2024-01-01"].minutes_learned == 50
    assert statuses["2024-01-02"].completed is False
    assert statuses["2024-01-02"].minutes_learned == 45
    assert statuses["2024-01-02"].label == "Arrays"
    assert statuses["2024-01-03"].minutes_learned == 0


def test_index_day_statuses_keeps_last_entry() -> None:
    first = CalendarDayStatus(date="2024-01-01", minutes_learned=10)
    second = CalendarDayStatus(date="2024-01-01", minutes_learned=20)
    assert index_day_statuses([first, second]) == {"2024-01-01": second}
