"""
Read-time classification of reminders.

Nothing here touches the database. Every function takes `now` so callers and
tests can pin the clock; it defaults to the current UTC time.

Bands for a pending reminder, with delta = scheduled_time - now:

    delta < 0                 -> overdue   (minutes_late = |delta|)
    |delta| <= DUE_NOW        -> due-now
    0 < delta <= DUE_SOON     -> due-soon
    otherwise                 -> scheduled

Checked in that order. A reminder a few minutes late also sits inside the
due-now window; it is still reported as overdue, with in_due_window=True.
"""

from collections import Counter
from dataclasses import dataclass
from datetime import datetime, timezone, tzinfo
from typing import Iterable

from config import DUE_NOW_MINUTES, DUE_SOON_MINUTES
from models.reminder import ReminderStatus

SCHEDULED = "scheduled"
DUE_SOON = "due-soon"
DUE_NOW = "due-now"
OVERDUE = "overdue"
GIVEN = "given"
MISSED = "missed"

DERIVED_STATUSES = (OVERDUE, DUE_NOW, DUE_SOON, SCHEDULED, GIVEN, MISSED)

MORNING = "morning"
AFTERNOON = "afternoon"
EVENING = "evening"
PERIODS = (MORNING, AFTERNOON, EVENING)


@dataclass(frozen=True)
class StatusInfo:
    derived_status: str
    minutes_late: int | None = None
    minutes_until: int | None = None
    in_due_window: bool = False

    def to_dict(self) -> dict:
        return {
            "derived_status": self.derived_status,
            "minutes_late": self.minutes_late,
            "minutes_until": self.minutes_until,
            "in_due_window": self.in_due_window,
        }


def ensure_aware(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _status_value(status) -> str:
    return status.value if hasattr(status, "value") else str(status)


def derive_status(
    scheduled_time: datetime,
    persisted_status: ReminderStatus | str,
    now: datetime | None = None,
) -> StatusInfo:
    status = _status_value(persisted_status)
    if status == ReminderStatus.given.value:
        return StatusInfo(GIVEN)
    if status == ReminderStatus.missed.value:
        return StatusInfo(MISSED)

    now = ensure_aware(now or utcnow())
    delta_minutes = (ensure_aware(scheduled_time) - now).total_seconds() / 60
    in_window = abs(delta_minutes) <= DUE_NOW_MINUTES

    if delta_minutes < 0:
        return StatusInfo(OVERDUE, minutes_late=round(-delta_minutes), in_due_window=in_window)

    minutes_until = round(delta_minutes)
    if in_window:
        return StatusInfo(DUE_NOW, minutes_until=minutes_until, in_due_window=True)
    if delta_minutes <= DUE_SOON_MINUTES:
        return StatusInfo(DUE_SOON, minutes_until=minutes_until)
    return StatusInfo(SCHEDULED, minutes_until=minutes_until)


def time_of_day_period(scheduled_time: datetime, tz: tzinfo) -> str:
    hour = ensure_aware(scheduled_time).astimezone(tz).hour
    if hour < 12:
        return MORNING
    if hour < 18:
        return AFTERNOON
    return EVENING


def group_by_time_of_day(reminders: Iterable, tz: tzinfo) -> dict[str, list]:
    """Bucket reminders into morning/afternoon/evening, keeping input order."""
    groups: dict[str, list] = {period: [] for period in PERIODS}
    for reminder in reminders:
        groups[time_of_day_period(reminder.scheduled_time, tz)].append(reminder)
    return groups


def summarize(reminders: Iterable, now: datetime | None = None) -> dict[str, int]:
    now = ensure_aware(now or utcnow())
    counts = Counter(derive_status(r.scheduled_time, r.status, now).derived_status for r in reminders)
    summary = {status: counts.get(status, 0) for status in DERIVED_STATUSES}
    summary["total"] = sum(counts.values())
    # "Due soon" on the dashboard covers every pending reminder in the next 2 hours.
    summary["upcoming"] = summary[DUE_NOW] + summary[DUE_SOON]
    return summary
