import logging
from datetime import datetime, tzinfo

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from models.medication import Medication, MedicationFrequency
from models.pet import Pet
from services.errors import NotFound, PetMedsError, Result, ValidationError, store_error
from services.plan_limits import MEDICATION, ensure_can_create
from services.reminders import create_reminder, delete_future_reminders, next_occurrence, parse_timing

logger = logging.getLogger("petmeds.medications")

_MEDICATION_FIELDS = ("name", "dosage", "frequency", "timing", "duration")
_REQUIRED = {
    "name": "Medication name is required",
    "dosage": "Dosage is required",
    "frequency": "Frequency is required",
    "timing": "Timing is required",
}


def validate_medication_data(data: dict, partial: bool = False) -> None:
    if not partial and not data.get("pet_id"):
        raise ValidationError("Pet selection is required")
    for field, message in _REQUIRED.items():
        if partial and field not in data:
            continue
        value = data.get(field)
        if value is None or (isinstance(value, str) and not value.strip()):
            raise ValidationError(message)
    if "frequency" in data:
        try:
            MedicationFrequency(data["frequency"])
        except ValueError as exc:
            raise ValidationError(f"Unknown frequency '{data['frequency']}'") from exc
    if "timing" in data:
        parse_timing(data["timing"])


def _owned_medication(db: Session, medication_id: int, user_id: int) -> Medication:
    med = (
        db.query(Medication)
        .filter(Medication.id == medication_id, Medication.user_id == user_id)
        .first()
    )
    if not med:
        raise NotFound("Medication not found")
    return med


def list_medications(db: Session, user_id: int, pet_id: int | None = None) -> list[tuple[Medication, Pet]]:
    q = (
        db.query(Medication, Pet)
        .join(Pet, Pet.id == Medication.pet_id)
        .filter(Medication.user_id == user_id)
    )
    if pet_id is not None:
        q = q.filter(Medication.pet_id == pet_id)
    return q.order_by(Medication.created_at.desc(), Medication.id.desc()).all()


def create_medication(
    db: Session,
    user_id: int,
    data: dict,
    tz: tzinfo,
    now: datetime | None = None,
) -> Result[Medication]:
    """Insert a medication and its first reminder in one commit."""
    try:
        validate_medication_data(data)
        pet = db.query(Pet).filter(Pet.id == data["pet_id"], Pet.user_id == user_id).first()
        if not pet:
            raise NotFound("Pet not found")
        ensure_can_create(db, user_id, MEDICATION)

        med = Medication(
            user_id=user_id,
            pet_id=pet.id,
            name=data["name"].strip(),
            dosage=data["dosage"].strip(),
            frequency=MedicationFrequency(data["frequency"]),
            timing=data["timing"],
            duration=data.get("duration") or None,
        )
        db.add(med)
        db.flush()
        create_reminder(db, user_id, pet.id, med.id, next_occurrence(med.timing, tz, now))
        db.commit()
        db.refresh(med)
    except PetMedsError as exc:
        db.rollback()
        return Result.failure(exc)
    except SQLAlchemyError as exc:
        return Result.failure(store_error(db, exc))
    return Result.success(med)


def update_medication(
    db: Session,
    medication_id: int,
    user_id: int,
    data: dict,
    tz: tzinfo,
    now: datetime | None = None,
) -> Result[Medication]:
    """A timing change replaces the pending future reminder with one at the new time."""
    try:
        validate_medication_data(data, partial=True)
        med = _owned_medication(db, medication_id, user_id)
        timing_changed = "timing" in data and data["timing"] != med.timing
        for key, value in data.items():
            if key not in _MEDICATION_FIELDS:
                continue
            if key == "frequency":
                value = MedicationFrequency(value)
            elif key in ("name", "dosage"):
                value = value.strip()
            setattr(med, key, value)
        if timing_changed:
            removed = delete_future_reminders(db, med.id, now)
            create_reminder(db, user_id, med.pet_id, med.id, next_occurrence(med.timing, tz, now))
            logger.info("Medication %s rescheduled, %s future reminder(s) replaced", med.id, removed)
        db.commit()
        db.refresh(med)
    except PetMedsError as exc:
        db.rollback()
        return Result.failure(exc)
    except SQLAlchemyError as exc:
        return Result.failure(store_error(db, exc))
    return Result.success(med)


def delete_medication(
    db: Session,
    medication_id: int,
    user_id: int,
    now: datetime | None = None,
) -> Result[int]:
    """Drop future reminders, then the medication. History entries are kept."""
    try:
        med = _owned_medication(db, medication_id, user_id)
        removed = delete_future_reminders(db, med.id, now)
        db.delete(med)
        db.commit()
    except PetMedsError as exc:
        return Result.failure(exc)
    except SQLAlchemyError as exc:
        return Result.failure(store_error(db, exc))
    return Result.success(removed)
