from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from models.pet import Pet
from services.errors import NotFound, PetMedsError, Result, ValidationError, store_error
from services.plan_limits import PET, ensure_can_create

_PET_FIELDS = ("name", "species", "breed", "age", "weight", "photo")


def validate_pet_data(data: dict, partial: bool = False) -> None:
    name = data.get("name")
    species = data.get("species")
    if not partial or "name" in data:
        if not name or not name.strip():
            raise ValidationError("Pet name is required")
        if len(name) > 50:
            raise ValidationError("Pet name must be less than 50 characters")
    if not partial or "species" in data:
        if not species or not species.strip():
            raise ValidationError("Species is required")


def _owned_pet(db: Session, pet_id: int, user_id: int) -> Pet:
    pet = db.query(Pet).filter(Pet.id == pet_id, Pet.user_id == user_id).first()
    if not pet:
        raise NotFound("Pet not found")
    return pet


def list_pets(db: Session, user_id: int) -> list[Pet]:
    return db.query(Pet).filter(Pet.user_id == user_id).order_by(Pet.name.asc()).all()


def get_pet(db: Session, pet_id: int, user_id: int) -> Result[Pet]:
    try:
        return Result.success(_owned_pet(db, pet_id, user_id))
    except PetMedsError as exc:
        return Result.failure(exc)


def create_pet(db: Session, user_id: int, data: dict) -> Result[Pet]:
    try:
        validate_pet_data(data)
        ensure_can_create(db, user_id, PET)
        pet = Pet(user_id=user_id, **{k: data.get(k) for k in _PET_FIELDS})
        pet.name = pet.name.strip()
        db.add(pet)
        db.commit()
        db.refresh(pet)
    except PetMedsError as exc:
        return Result.failure(exc)
    except SQLAlchemyError as exc:
        return Result.failure(store_error(db, exc))
    return Result.success(pet)


def update_pet(db: Session, pet_id: int, user_id: int, data: dict) -> Result[Pet]:
    try:
        validate_pet_data(data, partial=True)
        pet = _owned_pet(db, pet_id, user_id)
        for key, value in data.items():
            if key in _PET_FIELDS:
                setattr(pet, key, value)
        db.commit()
        db.refresh(pet)
    except PetMedsError as exc:
        return Result.failure(exc)
    except SQLAlchemyError as exc:
        return Result.failure(store_error(db, exc))
    return Result.success(pet)


def delete_pet(db: Session, pet_id: int, user_id: int) -> Result[None]:
    """Delete a pet with its medications and reminders. History stays."""
    try:
        pet = _owned_pet(db, pet_id, user_id)
        db.delete(pet)
        db.commit()
    except PetMedsError as exc:
        return Result.failure(exc)
    except SQLAlchemyError as exc:
        return Result.failure(store_error(db, exc))
    return Result.success(None)
