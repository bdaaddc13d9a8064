import logging
import smtplib
import uuid
from dataclasses import asdict, dataclass, field
from datetime import datetime, timedelta
from email.mime.text import MIMEText

import firebase_admin
from firebase_admin import messaging
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from config import (
    DISPATCH_WINDOW_MINUTES,
    SMTP_FROM_EMAIL,
    SMTP_HOST,
    SMTP_PASSWORD,
    SMTP_PORT,
    SMTP_TIMEOUT_SECONDS,
    SMTP_USER,
)
from models.notification import NotificationPreference
from models.reminder import NotificationChannel, Reminder, ReminderLog, ReminderStatus
from models.user import User
from services.errors import NotFound, Result, store_error
from services.reminder_status import utcnow
from services.reminders import to_utc

logger = logging.getLogger("petmeds.notifications")

SUCCESS = "success"
FAILED = "failed"


@dataclass
class DeliveryMessage:
    type: str
    recipient: str
    subject: str
    message: str
    pet_name: str | None = None
    medication_name: str | None = None
    scheduled_time: str | None = None


@dataclass
class LoggedNotification(DeliveryMessage):
    id: str = field(default_factory=lambda: f"notif_{uuid.uuid4().hex[:12]}")
    sent_at: str = field(default_factory=lambda: utcnow().isoformat())
    status: str = "logged"


class InMemoryNotificationLog:
    """Records messages instead of sending them. One instance per app or test."""

    def __init__(self):
        self._records: list[LoggedNotification] = []

    def send(self, message: DeliveryMessage) -> LoggedNotification:
        record = LoggedNotification(**asdict(message))
        self._records.append(record)
        return record

    def records(self) -> list[dict]:
        return [asdict(r) for r in self._records]

    def count(self) -> int:
        return len(self._records)

    def clear(self) -> None:
        self._records.clear()


class LiveNotificationSender:
    """Push through Firebase Admin, email through SMTP. Raises on failure."""

    def send(self, message: DeliveryMessage) -> None:
        if message.type == NotificationChannel.push.value:
            self._send_push(message)
        else:
            self._send_email(message)

    def _send_push(self, message: DeliveryMessage) -> None:
        if not firebase_admin._apps:
            raise RuntimeError("Firebase Admin is not initialized")
        msg = messaging.Message(
            token=message.recipient,
            notification=messaging.Notification(title=message.subject, body=message.message),
            android=messaging.AndroidConfig(
                notification=messaging.AndroidNotification(channel_id="petmeds_reminders"),
            ),
        )
        messaging.send(msg)

    def _send_email(self, message: DeliveryMessage) -> None:
        if not SMTP_HOST or not SMTP_USER or not SMTP_PASSWORD:
            raise RuntimeError("SMTP is not configured")
        msg = MIMEText(message.message)
        msg["Subject"] = message.subject
        msg["From"] = SMTP_FROM_EMAIL or SMTP_USER
        msg["To"] = message.recipient
        with smtplib.SMTP(SMTP_HOST, SMTP_PORT, timeout=SMTP_TIMEOUT_SECONDS) as server:
            server.ehlo()
            if server.has_extn("starttls"):
                server.starttls()
                server.ehlo()
            server.login(SMTP_USER, SMTP_PASSWORD)
            server.send_message(msg)


# ─── Preferences ───────────────────────────────────────────


def get_preferences(db: Session, user_id: int) -> dict:
    pref = db.query(NotificationPreference).filter(NotificationPreference.user_id == user_id).first()
    if not pref:
        return {"email_enabled": True, "push_enabled": True}
    return {"email_enabled": pref.email_enabled, "push_enabled": pref.push_enabled}


def update_preferences(db: Session, user_id: int, email_enabled: bool, push_enabled: bool) -> Result[dict]:
    try:
        pref = db.query(NotificationPreference).filter(NotificationPreference.user_id == user_id).first()
        if not pref:
            pref = NotificationPreference(user_id=user_id)
            db.add(pref)
        pref.email_enabled = email_enabled
        pref.push_enabled = push_enabled
        db.commit()
    except SQLAlchemyError as exc:
        return Result.failure(store_error(db, exc))
    return Result.success({"email_enabled": email_enabled, "push_enabled": push_enabled})


# ─── Dispatch ──────────────────────────────────────────────


def build_messages(reminder: Reminder, user: User, preferences: dict) -> list[DeliveryMessage]:
    pet_name = reminder.pet.name if reminder.pet else "your pet"
    med_name = reminder.medication.name if reminder.medication else "medication"
    dosage = reminder.medication.dosage if reminder.medication else ""
    scheduled = to_utc(reminder.scheduled_time).isoformat()
    messages = []
    if preferences["email_enabled"] and user.email:
        messages.append(
            DeliveryMessage(
                type=NotificationChannel.email.value,
                recipient=user.email,
                subject=f"Time for {pet_name}'s {med_name}",
                message=f"It's time to give {pet_name} their {dosage} of {med_name}.",
                pet_name=pet_name,
                medication_name=med_name,
                scheduled_time=scheduled,
            )
        )
    if preferences["push_enabled"] and user.push_token:
        messages.append(
            DeliveryMessage(
                type=NotificationChannel.push.value,
                recipient=user.push_token,
                subject=f"{pet_name} - {med_name}",
                message=f"Time for {dosage}",
                pet_name=pet_name,
                medication_name=med_name,
                scheduled_time=scheduled,
            )
        )
    return messages


def _already_sent(db: Session, reminder_id: int, channel: str) -> bool:
    return (
        db.query(ReminderLog.id)
        .filter(
            ReminderLog.reminder_id == reminder_id,
            ReminderLog.channel == NotificationChannel(channel),
            ReminderLog.status == SUCCESS,
        )
        .first()
        is not None
    )


def deliver_reminder(db: Session, sender, reminder: Reminder) -> dict:
    """Send on every enabled channel not yet delivered, logging each attempt."""
    user = db.get(User, reminder.user_id)
    result = {
        "reminder_id": reminder.id,
        "pet_name": reminder.pet.name if reminder.pet else None,
        "medication_name": reminder.medication.name if reminder.medication else None,
        "email_sent": False,
        "push_sent": False,
    }
    if not user:
        return result
    for message in build_messages(reminder, user, get_preferences(db, user.id)):
        if _already_sent(db, reminder.id, message.type):
            continue
        status, error_message = SUCCESS, None
        try:
            sender.send(message)
        except Exception as exc:
            # Delivery failures are recorded, they never abort the sweep.
            status, error_message = FAILED, str(exc)[:500]
            logger.warning("%s delivery failed for reminder %s: %s", message.type, reminder.id, exc)
        # Committed per channel so a later failure cannot drop the record of a send.
        db.add(
            ReminderLog(
                reminder_id=result["reminder_id"],
                channel=NotificationChannel(message.type),
                status=status,
                error_message=error_message,
            )
        )
        db.commit()
        if status == SUCCESS:
            result[f"{message.type}_sent"] = True
    return result


def dispatch_due_reminders(
    db: Session,
    sender,
    now: datetime | None = None,
    window_minutes: int = DISPATCH_WINDOW_MINUTES,
) -> list[dict]:
    now = to_utc(now or utcnow())
    due = (
        db.query(Reminder)
        .options(joinedload(Reminder.pet), joinedload(Reminder.medication))
        .filter(
            Reminder.status == ReminderStatus.pending,
            Reminder.scheduled_time >= now - timedelta(minutes=window_minutes),
            Reminder.scheduled_time <= now,
        )
        .order_by(Reminder.scheduled_time.asc())
        .all()
    )
    logger.info("Found %s pending reminder(s) to dispatch", len(due))
    results = []
    for reminder in due:
        reminder_id = reminder.id
        try:
            results.append(deliver_reminder(db, sender, reminder))
        except SQLAlchemyError as exc:
            db.rollback()
            logger.error("Error processing reminder %s: %s", reminder_id, exc)
            results.append({"reminder_id": reminder_id, "error": str(exc)})
    return results


def trigger_reminder(db: Session, sender, reminder_id: int, user_id: int) -> Result[dict]:
    try:
        reminder = (
            db.query(Reminder)
            .options(joinedload(Reminder.pet), joinedload(Reminder.medication))
            .filter(Reminder.id == reminder_id, Reminder.user_id == user_id)
            .first()
        )
        if not reminder:
            return Result.failure(NotFound("Reminder not found"))
        return Result.success(deliver_reminder(db, sender, reminder))
    except SQLAlchemyError as exc:
        return Result.failure(store_error(db, exc))
