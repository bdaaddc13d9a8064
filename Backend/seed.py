"""Seed a demo owner with one pet and its medications, then print a bearer token."""

from zoneinfo import ZoneInfo

import models  # noqa: F401
from config import APP_TIMEZONE
from database import SessionLocal, Base, engine
from models.pet import Pet
from models.user import User
from services.medications import create_medication
from services.security import create_access_token

Base.metadata.create_all(bind=engine)

DEMO_EMAIL = "test@example.com"
MEDICATIONS = [
    {"name": "Heartgard Plus", "dosage": "1 chewable", "frequency": "monthly", "timing": "08:00"},
    {"name": "Apoquel 16mg", "dosage": "1 tablet", "frequency": "daily", "timing": "18:30"},
]


def seed():
    db = SessionLocal()
    try:
        user = db.query(User).filter(User.email == DEMO_EMAIL).first()
        if user:
            print(f"Demo user already exists (id={user.id}), skipping seed.")
        else:
            user = User(email=DEMO_EMAIL, name="Test Owner")
            db.add(user)
            db.flush()
            pet = Pet(user_id=user.id, name="Buddy", species="dog", breed="Labrador")
            db.add(pet)
            db.commit()
            for med in MEDICATIONS:
                result = create_medication(db, user.id, {"pet_id": pet.id, **med}, ZoneInfo(APP_TIMEZONE))
                if not result.ok:
                    print(f"Could not add {med['name']}: {result.error.message}")
            print(f"Seeded demo user {DEMO_EMAIL} with pet {pet.name}.")
        print(f"Bearer token: {create_access_token({'sub': str(user.id)})}")
    finally:
        db.close()


if __name__ == "__main__":
    seed()
