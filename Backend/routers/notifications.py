from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from database import get_db
from dependencies import get_current_user, get_notification_sender
from models.user import User
from schemas.notification import NotificationPreferenceOut, NotificationPreferenceUpdate
from services.errors import unwrap
from services.notifications import get_preferences, trigger_reminder, update_preferences

router = APIRouter(prefix="/notifications", tags=["Notifications"])


@router.get("/preferences", response_model=NotificationPreferenceOut)
def read_preferences(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Channel preferences; both channels are on until the user saves otherwise."""
    return get_preferences(db, current_user.id)


@router.put("/preferences", response_model=NotificationPreferenceOut)
def save_preferences(
    data: NotificationPreferenceUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return unwrap(update_preferences(db, current_user.id, data.email_enabled, data.push_enabled))


@router.post("/reminders/{reminder_id}/trigger")
def send_reminder_now(
    reminder_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    sender=Depends(get_notification_sender),
):
    """Deliver one reminder on its enabled channels, skipping channels already sent."""
    result = unwrap(trigger_reminder(db, sender, reminder_id, current_user.id))
    return {"success": True, **result}
