from datetime import datetime, timedelta, timezone
from types import SimpleNamespace
from zoneinfo import ZoneInfo

import pytest

from models.reminder import ReminderStatus
from services.reminder_status import (
    AFTERNOON,
    DUE_NOW,
    DUE_SOON,
    EVENING,
    GIVEN,
    MISSED,
    MORNING,
    OVERDUE,
    SCHEDULED,
    derive_status,
    group_by_time_of_day,
    summarize,
    time_of_day_period,
)
from tests.helpers import NOW


def _at(minutes: float) -> datetime:
    return NOW + timedelta(minutes=minutes)


def test_ten_minutes_late_is_overdue():
    info = derive_status(_at(-10), ReminderStatus.pending, NOW)
    assert info.derived_status == OVERDUE
    assert info.minutes_late == 10
    assert info.minutes_until is None


def test_ninety_minutes_ahead_is_due_soon():
    info = derive_status(_at(90), ReminderStatus.pending, NOW)
    assert info.derived_status == DUE_SOON
    assert info.minutes_until == 90


def test_ten_minutes_ahead_is_due_now():
    info = derive_status(_at(10), ReminderStatus.pending, NOW)
    assert info.derived_status == DUE_NOW
    assert info.in_due_window is True


@pytest.mark.parametrize(
    "minutes, expected",
    [
        (0, DUE_NOW),
        (30, DUE_NOW),
        (31, DUE_SOON),
        (120, DUE_SOON),
        (121, SCHEDULED),
        (60 * 24, SCHEDULED),
    ],
)
def test_band_boundaries(minutes, expected):
    assert derive_status(_at(minutes), "pending", NOW).derived_status == expected


def test_overdue_wins_over_due_now_window():
    # 10 minutes late satisfies both the overdue check and the |delta| <= 30 window.
    info = derive_status(_at(-10), ReminderStatus.pending, NOW)
    assert info.derived_status == OVERDUE
    assert info.in_due_window is True

    far_late = derive_status(_at(-45), ReminderStatus.pending, NOW)
    assert far_late.derived_status == OVERDUE
    assert far_late.in_due_window is False


def test_any_past_pending_reminder_is_overdue():
    for minutes in (-0.5, -1, -29, -31, -119, -121, -60 * 24 * 3):
        assert derive_status(_at(minutes), ReminderStatus.pending, NOW).derived_status == OVERDUE


@pytest.mark.parametrize("persisted, expected", [(ReminderStatus.given, GIVEN), (ReminderStatus.missed, MISSED)])
@pytest.mark.parametrize("minutes", [-600, -10, 0, 10, 90, 600])
def test_terminal_status_ignores_schedule(persisted, expected, minutes):
    info = derive_status(_at(minutes), persisted, NOW)
    assert info.derived_status == expected
    assert info.minutes_late is None
    assert info.minutes_until is None


def test_naive_datetimes_are_read_as_utc():
    naive = (NOW - timedelta(minutes=5)).replace(tzinfo=None)
    info = derive_status(naive, "pending", NOW)
    assert info.derived_status == OVERDUE
    assert info.minutes_late == 5


def test_now_defaults_to_wall_clock():
    far_future = datetime.now(timezone.utc) + timedelta(days=2)
    assert derive_status(far_future, ReminderStatus.pending).derived_status == SCHEDULED


def test_time_of_day_period_uses_local_hour():
    tz = ZoneInfo("America/New_York")
    # New York is UTC-5 on this date.
    assert time_of_day_period(datetime(2026, 3, 1, 15, 30, tzinfo=timezone.utc), tz) == MORNING
    assert time_of_day_period(datetime(2026, 3, 1, 17, 0, tzinfo=timezone.utc), tz) == AFTERNOON
    assert time_of_day_period(datetime(2026, 3, 1, 22, 59, tzinfo=timezone.utc), tz) == AFTERNOON
    assert time_of_day_period(datetime(2026, 3, 1, 23, 0, tzinfo=timezone.utc), tz) == EVENING


def test_group_by_time_of_day_keeps_order_within_groups():
    utc = ZoneInfo("UTC")
    reminders = [
        SimpleNamespace(id=1, scheduled_time=datetime(2026, 3, 10, 7, 0, tzinfo=timezone.utc)),
        SimpleNamespace(id=2, scheduled_time=datetime(2026, 3, 10, 19, 0, tzinfo=timezone.utc)),
        SimpleNamespace(id=3, scheduled_time=datetime(2026, 3, 10, 11, 59, tzinfo=timezone.utc)),
        SimpleNamespace(id=4, scheduled_time=datetime(2026, 3, 10, 12, 0, tzinfo=timezone.utc)),
        SimpleNamespace(id=5, scheduled_time=datetime(2026, 3, 10, 18, 0, tzinfo=timezone.utc)),
        SimpleNamespace(id=6, scheduled_time=datetime(2026, 3, 10, 0, 30, tzinfo=timezone.utc)),
    ]
    groups = group_by_time_of_day(reminders, utc)
    assert list(groups) == [MORNING, AFTERNOON, EVENING]
    assert [r.id for r in groups[MORNING]] == [1, 3, 6]
    assert [r.id for r in groups[AFTERNOON]] == [4]
    assert [r.id for r in groups[EVENING]] == [2, 5]


def test_group_by_time_of_day_returns_empty_groups():
    groups = group_by_time_of_day([], ZoneInfo("UTC"))
    assert groups == {MORNING: [], AFTERNOON: [], EVENING: []}


def test_summarize_counts_derived_statuses():
    reminders = [
        SimpleNamespace(scheduled_time=_at(-20), status=ReminderStatus.pending),
        SimpleNamespace(scheduled_time=_at(15), status=ReminderStatus.pending),
        SimpleNamespace(scheduled_time=_at(100), status=ReminderStatus.pending),
        SimpleNamespace(scheduled_time=_at(300), status=ReminderStatus.pending),
        SimpleNamespace(scheduled_time=_at(-200), status=ReminderStatus.given),
        SimpleNamespace(scheduled_time=_at(-400), status=ReminderStatus.missed),
    ]
    summary = summarize(reminders, NOW)
    assert summary[OVERDUE] == 1
    assert summary[DUE_NOW] == 1
    assert summary[DUE_SOON] == 1
    assert summary[SCHEDULED] == 1
    assert summary[GIVEN] == 1
    assert summary[MISSED] == 1
    assert summary["upcoming"] == 2
    assert summary["total"] == 6
