from pydantic import BaseModel


class NotificationPreferenceUpdate(BaseModel):
    email_enabled: bool
    push_enabled: bool


class NotificationPreferenceOut(BaseModel):
    email_enabled: bool
    push_enabled: bool


class NotificationLogCreate(BaseModel):
    type: str
    recipient: str
    subject: str
    message: str
    pet_name: str | None = None
    medication_name: str | None = None
    scheduled_time: str | None = None
