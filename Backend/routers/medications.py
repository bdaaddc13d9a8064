from zoneinfo import ZoneInfo

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from database import get_db
from dependencies import get_current_user, get_timezone
from models.medication import Medication
from models.pet import Pet
from models.user import User
from schemas.medication import MedicationCreate, MedicationOut, MedicationUpdate
from services.errors import unwrap
from services.medications import create_medication, delete_medication, list_medications, update_medication

router = APIRouter(prefix="/medications", tags=["Medications"])


def _to_out(med: Medication, pet: Pet | None = None) -> MedicationOut:
    return MedicationOut(
        id=med.id,
        pet_id=med.pet_id,
        pet_name=pet.name if pet else None,
        name=med.name,
        dosage=med.dosage,
        frequency=med.frequency,
        timing=med.timing,
        duration=med.duration,
        created_at=med.created_at,
    )


@router.get("/", response_model=list[MedicationOut])
def list_my_medications(
    pet_id: int | None = Query(default=None),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return [_to_out(med, pet) for med, pet in list_medications(db, current_user.id, pet_id)]


@router.post("/", response_model=MedicationOut, status_code=201)
def add_medication(
    data: MedicationCreate,
    tz: ZoneInfo = Depends(get_timezone),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Create a medication and schedule its first reminder. Free plan allows two."""
    med = unwrap(create_medication(db, current_user.id, data.model_dump(), tz))
    return _to_out(med, med.pet)


@router.put("/{medication_id}", response_model=MedicationOut)
def edit_medication(
    medication_id: int,
    data: MedicationUpdate,
    tz: ZoneInfo = Depends(get_timezone),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    med = unwrap(
        update_medication(db, medication_id, current_user.id, data.model_dump(exclude_unset=True), tz)
    )
    return _to_out(med, med.pet)


@router.delete("/{medication_id}")
def remove_medication(
    medication_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    removed = unwrap(delete_medication(db, medication_id, current_user.id))
    return {"message": "Medication removed", "removed_reminders": removed}
