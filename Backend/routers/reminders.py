from zoneinfo import ZoneInfo

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from database import get_db
from dependencies import get_current_user, get_timezone
from models.reminder import Reminder
from models.user import User
from schemas.reminder import ReminderCreate, ReminderOut, TodayReminderOut, TodayRemindersOut
from services.errors import unwrap
from services.reminder_status import derive_status, group_by_time_of_day, summarize, time_of_day_period, utcnow
from services.reminders import get_todays_reminders, mark_as_given, schedule_reminder, to_utc

router = APIRouter(prefix="/reminders", tags=["Reminders"])


def _to_out(reminder: Reminder) -> ReminderOut:
    return ReminderOut(
        id=reminder.id,
        pet_id=reminder.pet_id,
        medication_id=reminder.medication_id,
        scheduled_time=to_utc(reminder.scheduled_time),
        status=reminder.status.value,
        created_at=reminder.created_at,
    )


def _to_today_out(reminder: Reminder, now, tz: ZoneInfo) -> TodayReminderOut:
    info = derive_status(reminder.scheduled_time, reminder.status, now)
    return TodayReminderOut(
        **_to_out(reminder).model_dump(),
        pet_name=reminder.pet.name if reminder.pet else None,
        pet_species=reminder.pet.species if reminder.pet else None,
        medication_name=reminder.medication.name if reminder.medication else None,
        dosage=reminder.medication.dosage if reminder.medication else None,
        period=time_of_day_period(reminder.scheduled_time, tz),
        **info.to_dict(),
    )


@router.post("/", response_model=ReminderOut, status_code=201)
def create_reminder(
    data: ReminderCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    reminder = unwrap(
        schedule_reminder(db, current_user.id, data.pet_id, data.medication_id, data.scheduled_time)
    )
    return _to_out(reminder)


@router.get("/today", response_model=TodayRemindersOut)
def todays_reminders(
    tz: ZoneInfo = Depends(get_timezone),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Today's reminders with derived status, grouped by time of day."""
    now = utcnow()
    rows = unwrap(get_todays_reminders(db, current_user.id, tz, now))
    grouped = group_by_time_of_day(rows, tz)
    return TodayRemindersOut(
        timezone=str(tz),
        reminders=[_to_today_out(r, now, tz) for r in rows],
        grouped={period: [_to_today_out(r, now, tz) for r in items] for period, items in grouped.items()},
        summary=summarize(rows, now),
    )


@router.patch("/{reminder_id}/mark-given", response_model=ReminderOut)
def mark_given(
    reminder_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return _to_out(unwrap(mark_as_given(db, reminder_id, current_user.id)))
