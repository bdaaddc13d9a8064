from datetime import datetime

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from database import get_db
from dependencies import get_current_user
from models.user import User
from schemas.history import HistoryEntryOut
from services.errors import unwrap
from services.reminders import get_history, to_utc

router = APIRouter(prefix="/history", tags=["History"])


@router.get("/", response_model=list[HistoryEntryOut])
def list_history(
    pet_id: int | None = Query(default=None),
    start: datetime | None = Query(default=None),
    end: datetime | None = Query(default=None),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    rows = unwrap(get_history(db, current_user.id, pet_id, start, end))
    return [
        HistoryEntryOut(
            id=row.id,
            pet_id=row.pet_id,
            medication_id=row.medication_id,
            medication_name=row.medication_name,
            dosage=row.dosage,
            scheduled_time=to_utc(row.scheduled_time),
            status=row.status.value,
            created_at=row.created_at,
        )
        for row in rows
    ]
