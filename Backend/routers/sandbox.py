"""
Notification sandbox for local development and end-to-end tests.

Outside production the app sends reminders into an in-memory log instead of
real channels; these endpoints read, append to and clear that log.
"""

from fastapi import APIRouter, Depends, HTTPException, Query

import config
from dependencies import get_notification_log
from schemas.notification import NotificationLogCreate
from services.notifications import DeliveryMessage, InMemoryNotificationLog


def require_non_production() -> None:
    if config.is_production():
        raise HTTPException(status_code=403, detail="Test endpoints are not available in production")


router = APIRouter(prefix="/dev", tags=["Sandbox"], dependencies=[Depends(require_non_production)])


@router.post("/notifications")
def log_notification(
    data: NotificationLogCreate,
    log: InMemoryNotificationLog = Depends(get_notification_log),
):
    record = log.send(DeliveryMessage(**data.model_dump()))
    return {"success": True, "message": "Notification logged successfully", "notification_id": record.id}


@router.get("/notifications")
def list_logged_notifications(
    action: str | None = Query(default=None),
    log: InMemoryNotificationLog = Depends(get_notification_log),
):
    if action == "clear":
        log.clear()
        return {"success": True, "message": "Notification logs cleared"}
    if action == "count":
        return {"success": True, "count": log.count()}
    return {"success": True, "notifications": log.records(), "count": log.count()}


@router.delete("/notifications")
def clear_logged_notifications(log: InMemoryNotificationLog = Depends(get_notification_log)):
    log.clear()
    return {"success": True, "message": "All notification logs cleared"}
