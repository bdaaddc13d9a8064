"""
Reminder lifecycle: creation, completion, missed sweep, and the read paths.

State machine per reminder:

    pending --mark_as_given-->         given   (terminal)
    pending --mark_missed_reminders--> missed  (terminal)

Transitions use a conditional UPDATE ... WHERE status = 'pending' and look at
the affected row count, so two concurrent completions of the same reminder
yield exactly one winner.

Completion and history logging are two commits. If the history insert fails
the reminder stays "given" and the caller still gets success; the failure is
only logged.
"""

import logging
from datetime import datetime, time, timedelta, timezone, tzinfo

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from config import MISSED_GRACE_MINUTES
from models.history import HistoryEntry
from models.medication import Medication
from models.reminder import Reminder, ReminderStatus
from services.errors import (
    AlreadyCompleted,
    NotFound,
    Result,
    ValidationError,
    store_error,
)
from services.reminder_status import ensure_aware, utcnow

logger = logging.getLogger("petmeds.reminders")


def to_utc(value: datetime) -> datetime:
    return ensure_aware(value).astimezone(timezone.utc)


def parse_timing(timing: str) -> time:
    try:
        hour_s, minute_s = (timing or "").strip().split(":")
        return time(int(hour_s), int(minute_s))
    except ValueError as exc:
        raise ValidationError("Timing must be in HH:MM format") from exc


def next_occurrence(timing: str, tz: tzinfo, now: datetime | None = None) -> datetime:
    """First local HH:MM at or after `now`, returned in UTC."""
    at = parse_timing(timing)
    local_now = ensure_aware(now or utcnow()).astimezone(tz)
    candidate = datetime.combine(local_now.date(), at, tzinfo=tz)
    if candidate < local_now:
        candidate = datetime.combine(local_now.date() + timedelta(days=1), at, tzinfo=tz)
    return candidate.astimezone(timezone.utc)


def local_day_bounds(tz: tzinfo, now: datetime | None = None) -> tuple[datetime, datetime]:
    """[start of local day, start of next local day) in UTC."""
    local_now = ensure_aware(now or utcnow()).astimezone(tz)
    start = datetime.combine(local_now.date(), time(0, 0), tzinfo=tz)
    end = datetime.combine(local_now.date() + timedelta(days=1), time(0, 0), tzinfo=tz)
    return start.astimezone(timezone.utc), end.astimezone(timezone.utc)


def create_reminder(
    db: Session,
    user_id: int,
    pet_id: int,
    medication_id: int,
    scheduled_time: datetime,
) -> Reminder:
    """Add one pending reminder to the session. The caller commits."""
    reminder = Reminder(
        user_id=user_id,
        pet_id=pet_id,
        medication_id=medication_id,
        scheduled_time=to_utc(scheduled_time),
        status=ReminderStatus.pending,
    )
    db.add(reminder)
    return reminder


def schedule_reminder(
    db: Session,
    user_id: int,
    pet_id: int,
    medication_id: int,
    scheduled_time: datetime,
) -> Result[Reminder]:
    try:
        medication = (
            db.query(Medication)
            .filter(
                Medication.id == medication_id,
                Medication.pet_id == pet_id,
                Medication.user_id == user_id,
            )
            .first()
        )
        if not medication:
            return Result.failure(NotFound("Medication not found"))
        reminder = create_reminder(db, user_id, pet_id, medication_id, scheduled_time)
        db.commit()
        db.refresh(reminder)
    except SQLAlchemyError as exc:
        return Result.failure(store_error(db, exc))
    return Result.success(reminder)


def _write_history(
    db: Session,
    reminder: Reminder,
    medication: Medication | None,
    status: ReminderStatus,
) -> HistoryEntry:
    entry = HistoryEntry(
        user_id=reminder.user_id,
        pet_id=reminder.pet_id,
        medication_id=reminder.medication_id,
        medication_name=medication.name if medication else None,
        dosage=medication.dosage if medication else "",
        scheduled_time=to_utc(reminder.scheduled_time),
        status=status,
    )
    db.add(entry)
    return entry


def _transition(db: Session, reminder_id: int, user_id: int, status: ReminderStatus) -> bool:
    updated = (
        db.query(Reminder)
        .filter(
            Reminder.id == reminder_id,
            Reminder.user_id == user_id,
            Reminder.status == ReminderStatus.pending,
        )
        .update({Reminder.status: status}, synchronize_session=False)
    )
    return updated == 1


def mark_as_given(db: Session, reminder_id: int, acting_user_id: int) -> Result[Reminder]:
    try:
        row = (
            db.query(Reminder, Medication)
            .outerjoin(Medication, Medication.id == Reminder.medication_id)
            .filter(Reminder.id == reminder_id, Reminder.user_id == acting_user_id)
            .first()
        )
        if not row:
            return Result.failure(NotFound("Reminder not found"))
        reminder, medication = row
        if reminder.status != ReminderStatus.pending:
            return Result.failure(AlreadyCompleted("Reminder has already been completed"))

        if not _transition(db, reminder_id, acting_user_id, ReminderStatus.given):
            db.rollback()
            return Result.failure(AlreadyCompleted("Reminder has already been completed"))
        db.commit()
        db.refresh(reminder)
    except SQLAlchemyError as exc:
        return Result.failure(store_error(db, exc))

    try:
        _write_history(db, reminder, medication, ReminderStatus.given)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Failed to add history entry for reminder %s", reminder_id)

    logger.info("Reminder %s marked as given by user %s", reminder_id, acting_user_id)
    return Result.success(reminder)


def delete_future_reminders(db: Session, medication_id: int, now: datetime | None = None) -> int:
    """Remove pending reminders still ahead of `now`. The caller commits."""
    cutoff = to_utc(now or utcnow())
    future = (
        db.query(Reminder)
        .filter(
            Reminder.medication_id == medication_id,
            Reminder.status == ReminderStatus.pending,
            Reminder.scheduled_time > cutoff,
        )
        .all()
    )
    for reminder in future:
        db.delete(reminder)
    if future:
        db.flush()
    return len(future)


def get_todays_reminders(
    db: Session,
    user_id: int,
    tz: tzinfo,
    now: datetime | None = None,
) -> Result[list[Reminder]]:
    start, end = local_day_bounds(tz, now)
    try:
        rows = (
            db.query(Reminder)
            .options(joinedload(Reminder.pet), joinedload(Reminder.medication))
            .filter(
                Reminder.user_id == user_id,
                Reminder.scheduled_time >= start,
                Reminder.scheduled_time < end,
            )
            .order_by(Reminder.scheduled_time.asc(), Reminder.id.asc())
            .all()
        )
    except SQLAlchemyError as exc:
        return Result.failure(store_error(db, exc))
    return Result.success(rows)


def get_history(
    db: Session,
    user_id: int,
    pet_id: int | None = None,
    start: datetime | None = None,
    end: datetime | None = None,
) -> Result[list[HistoryEntry]]:
    try:
        q = db.query(HistoryEntry).filter(HistoryEntry.user_id == user_id)
        if pet_id is not None:
            q = q.filter(HistoryEntry.pet_id == pet_id)
        if start is not None:
            q = q.filter(HistoryEntry.scheduled_time >= to_utc(start))
        if end is not None:
            q = q.filter(HistoryEntry.scheduled_time <= to_utc(end))
        rows = q.order_by(HistoryEntry.scheduled_time.desc(), HistoryEntry.id.desc()).all()
    except SQLAlchemyError as exc:
        return Result.failure(store_error(db, exc))
    return Result.success(rows)


def mark_missed_reminders(
    db: Session,
    now: datetime | None = None,
    grace_minutes: int = MISSED_GRACE_MINUTES,
) -> int:
    """Move pending reminders past the grace window to "missed"."""
    cutoff = to_utc(now or utcnow()) - timedelta(minutes=grace_minutes)
    try:
        rows = (
            db.query(Reminder, Medication)
            .outerjoin(Medication, Medication.id == Reminder.medication_id)
            .filter(Reminder.status == ReminderStatus.pending, Reminder.scheduled_time < cutoff)
            .order_by(Reminder.scheduled_time.asc())
            .all()
        )
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("Missed sweep could not load pending reminders: %s", exc)
        return 0
    missed = 0
    for reminder, medication in rows:
        reminder_id = reminder.id
        try:
            if not _transition(db, reminder_id, reminder.user_id, ReminderStatus.missed):
                db.rollback()
                continue
            _write_history(db, reminder, medication, ReminderStatus.missed)
            db.commit()
        except SQLAlchemyError as exc:
            # Status change and history entry roll back together; the next sweep retries.
            db.rollback()
            logger.error("Missed sweep failed for reminder %s: %s", reminder_id, exc)
            continue
        missed += 1
    if missed:
        logger.info("Missed sweep marked %s reminder(s) as missed", missed)
    return missed

