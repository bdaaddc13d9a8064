from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from database import get_db
from dependencies import get_current_user
from models.user import User
from schemas.pet import PetCreate, PetOut, PetUpdate
from services.errors import unwrap
from services.pets import create_pet, delete_pet, get_pet, list_pets, update_pet

router = APIRouter(prefix="/pets", tags=["Pets"])


@router.get("/", response_model=list[PetOut])
def list_my_pets(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return list_pets(db, current_user.id)


@router.post("/", response_model=PetOut, status_code=201)
def add_pet(
    data: PetCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Create a pet. Free plan users are limited to one."""
    return unwrap(create_pet(db, current_user.id, data.model_dump()))


@router.get("/{pet_id}", response_model=PetOut)
def read_pet(
    pet_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return unwrap(get_pet(db, pet_id, current_user.id))


@router.put("/{pet_id}", response_model=PetOut)
def edit_pet(
    pet_id: int,
    data: PetUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return unwrap(update_pet(db, pet_id, current_user.id, data.model_dump(exclude_unset=True)))


@router.delete("/{pet_id}")
def remove_pet(
    pet_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    unwrap(delete_pet(db, pet_id, current_user.id))
    return {"message": "Pet removed"}
