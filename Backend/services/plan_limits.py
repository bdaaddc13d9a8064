import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from config import FREE_MEDICATION_LIMIT, FREE_PET_LIMIT
from models.medication import Medication
from models.pet import Pet
from models.subscription import ACTIVE_STATUS, Subscription
from services.errors import PlanLimitExceeded, ValidationError

logger = logging.getLogger("petmeds.plan_limits")

PET = "pet"
MEDICATION = "medication"

_RESOURCES = {
    PET: (Pet, FREE_PET_LIMIT),
    MEDICATION: (Medication, FREE_MEDICATION_LIMIT),
}


def is_subscribed(db: Session, user_id: int) -> bool:
    """Active subscription check. Lookup failures count as free tier."""
    try:
        row = (
            db.query(Subscription.id)
            .filter(Subscription.user_id == user_id, Subscription.status == ACTIVE_STATUS)
            .first()
        )
    except SQLAlchemyError as exc:
        db.rollback()
        logger.warning("Subscription lookup failed for user %s, treating as free tier: %s", user_id, exc)
        return False
    return row is not None


def _count(db: Session, user_id: int, resource: str) -> int:
    model, _ = _RESOURCES[resource]
    return db.query(model).filter(model.user_id == user_id).count()


def _can_create(db: Session, user_id: int, resource: str) -> bool:
    if is_subscribed(db, user_id):
        return True
    _, limit = _RESOURCES[resource]
    return _count(db, user_id, resource) < limit


def can_create_pet(db: Session, user_id: int) -> bool:
    return _can_create(db, user_id, PET)


def can_create_medication(db: Session, user_id: int) -> bool:
    return _can_create(db, user_id, MEDICATION)


def ensure_can_create(db: Session, user_id: int, resource: str) -> None:
    if resource not in _RESOURCES:
        raise ValidationError(f"Unknown resource '{resource}'")
    if not _can_create(db, user_id, resource):
        _, limit = _RESOURCES[resource]
        raise PlanLimitExceeded(resource, limit)


def get_plan_summary(db: Session, user_id: int) -> dict:
    subscribed = is_subscribed(db, user_id)
    return {
        "tier": "premium" if subscribed else "free",
        "subscribed": subscribed,
        "limits": {
            "pets": None if subscribed else FREE_PET_LIMIT,
            "medications": None if subscribed else FREE_MEDICATION_LIMIT,
        },
        "usage": {
            "pets": _count(db, user_id, PET),
            "medications": _count(db, user_id, MEDICATION),
        },
    }
