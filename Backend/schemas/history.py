from datetime import datetime

from pydantic import BaseModel


class HistoryEntryOut(BaseModel):
    id: int
    pet_id: int
    medication_id: int
    medication_name: str | None
    dosage: str
    scheduled_time: datetime
    status: str
    created_at: datetime | None
