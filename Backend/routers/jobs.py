import hmac

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

import config
from database import get_db
from dependencies import get_notification_sender
from services.notifications import dispatch_due_reminders
from services.reminders import mark_missed_reminders

router = APIRouter(prefix="/jobs", tags=["Jobs"])


def require_job_key(key: str = Query(default="")) -> None:
    if not config.JOB_RUN_KEY:
        raise HTTPException(status_code=503, detail="JOB_RUN_KEY is not configured")
    if not hmac.compare_digest(key, config.JOB_RUN_KEY):
        raise HTTPException(status_code=401, detail="Invalid job key")


@router.get("/run-reminder-notifications", dependencies=[Depends(require_job_key)])
def run_reminder_notifications(
    db: Session = Depends(get_db),
    sender=Depends(get_notification_sender),
):
    """External scheduler hook: notifies owners of reminders that just became due."""
    results = dispatch_due_reminders(db, sender)
    return {"ok": True, "processed": len(results), "results": results}


@router.get("/run-missed-sweep", dependencies=[Depends(require_job_key)])
def run_missed_sweep(db: Session = Depends(get_db)):
    """External scheduler hook: marks long-overdue pending reminders as missed."""
    return {"ok": True, "missed": mark_missed_reminders(db)}
