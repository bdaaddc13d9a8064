from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Enum as SAEnum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import enum

from database import Base


class MedicationFrequency(str, enum.Enum):
    daily = "daily"
    twice_daily = "twice-daily"
    weekly = "weekly"
    monthly = "monthly"
    as_needed = "as-needed"


class Medication(Base):
    __tablename__ = "medications"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    pet_id = Column(Integer, ForeignKey("pets.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(120), nullable=False)
    dosage = Column(String(120), nullable=False)
    frequency = Column(
        SAEnum(MedicationFrequency, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=MedicationFrequency.daily,
    )
    timing = Column(String(5), nullable=False)  # HH:MM, local time
    duration = Column(String(60), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    pet = relationship("Pet", back_populates="medications")
    reminders = relationship(
        "Reminder",
        back_populates="medication",
        cascade="all, delete-orphan",
    )
