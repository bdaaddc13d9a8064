from datetime import datetime

from pydantic import BaseModel


class ReminderCreate(BaseModel):
    pet_id: int
    medication_id: int
    scheduled_time: datetime


class ReminderOut(BaseModel):
    id: int
    pet_id: int
    medication_id: int
    scheduled_time: datetime
    status: str
    created_at: datetime | None


class TodayReminderOut(ReminderOut):
    pet_name: str | None = None
    pet_species: str | None = None
    medication_name: str | None = None
    dosage: str | None = None
    derived_status: str
    minutes_late: int | None = None
    minutes_until: int | None = None
    in_due_window: bool = False
    period: str


class TodayRemindersOut(BaseModel):
    timezone: str
    reminders: list[TodayReminderOut]
    grouped: dict[str, list[TodayReminderOut]]
    summary: dict[str, int]
