import os

# Must be set before config/database are imported by the app modules.
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("APP_ENV", "test")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402

import models  # noqa: E402,F401
from database import Base, build_engine, get_db  # noqa: E402
from dependencies import get_notification_log, get_notification_sender  # noqa: E402
from main import app  # noqa: E402
from models.medication import Medication, MedicationFrequency  # noqa: E402
from models.pet import Pet  # noqa: E402
from models.reminder import Reminder, ReminderStatus  # noqa: E402
from models.subscription import Subscription  # noqa: E402
from models.user import User  # noqa: E402
from services.notifications import InMemoryNotificationLog  # noqa: E402


@pytest.fixture
def engine():
    engine = build_engine("sqlite://")
    Base.metadata.create_all(engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def db_session(engine):
    Session = sessionmaker(bind=engine, autoflush=False)
    session = Session()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def notification_log():
    return InMemoryNotificationLog()


@pytest.fixture
def client(db_session, notification_log):
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_notification_sender] = lambda: notification_log
    app.dependency_overrides[get_notification_log] = lambda: notification_log
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides = {}


@pytest.fixture
def make_user(db_session):
    counter = {"n": 0}

    def _make(email=None, subscribed=False, push_token=None):
        counter["n"] += 1
        user = User(email=email or f"owner{counter['n']}@example.com", name="Owner", push_token=push_token)
        db_session.add(user)
        db_session.flush()
        if subscribed:
            db_session.add(Subscription(user_id=user.id, status="active"))
        db_session.commit()
        return user

    return _make


@pytest.fixture
def make_pet(db_session):
    def _make(user, name="Buddy", species="dog"):
        pet = Pet(user_id=user.id, name=name, species=species)
        db_session.add(pet)
        db_session.commit()
        return pet

    return _make


@pytest.fixture
def make_medication(db_session):
    def _make(pet, name="Heartgard Plus", dosage="1 tablet", timing="08:00"):
        med = Medication(
            user_id=pet.user_id,
            pet_id=pet.id,
            name=name,
            dosage=dosage,
            frequency=MedicationFrequency.daily,
            timing=timing,
        )
        db_session.add(med)
        db_session.commit()
        return med

    return _make


@pytest.fixture
def make_reminder(db_session):
    def _make(medication, scheduled_time, status=ReminderStatus.pending):
        reminder = Reminder(
            user_id=medication.user_id,
            pet_id=medication.pet_id,
            medication_id=medication.id,
            scheduled_time=scheduled_time,
            status=status,
        )
        db_session.add(reminder)
        db_session.commit()
        return reminder

    return _make
