from datetime import datetime

from pydantic import BaseModel, Field

from models.medication import MedicationFrequency

TIMING_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"


class MedicationCreate(BaseModel):
    pet_id: int
    name: str = Field(min_length=1, max_length=120)
    dosage: str = Field(min_length=1, max_length=120)
    frequency: MedicationFrequency = MedicationFrequency.daily
    timing: str = Field(pattern=TIMING_PATTERN)
    duration: str | None = Field(default=None, max_length=60)


class MedicationUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=120)
    dosage: str | None = Field(default=None, min_length=1, max_length=120)
    frequency: MedicationFrequency | None = None
    timing: str | None = Field(default=None, pattern=TIMING_PATTERN)
    duration: str | None = Field(default=None, max_length=60)


class MedicationOut(BaseModel):
    id: int
    pet_id: int
    pet_name: str | None = None
    name: str
    dosage: str
    frequency: MedicationFrequency
    timing: str
    duration: str | None
    created_at: datetime | None
