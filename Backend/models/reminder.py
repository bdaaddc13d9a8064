from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Enum as SAEnum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import enum

from database import Base


class ReminderStatus(str, enum.Enum):
    pending = "pending"
    given = "given"
    missed = "missed"


class NotificationChannel(str, enum.Enum):
    email = "email"
    push = "push"


class Reminder(Base):
    __tablename__ = "reminders"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    pet_id = Column(Integer, ForeignKey("pets.id", ondelete="CASCADE"), nullable=False, index=True)
    medication_id = Column(Integer, ForeignKey("medications.id", ondelete="CASCADE"), nullable=False, index=True)
    scheduled_time = Column(DateTime(timezone=True), nullable=False, index=True)
    status = Column(SAEnum(ReminderStatus), nullable=False, default=ReminderStatus.pending, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    pet = relationship("Pet", back_populates="reminders")
    medication = relationship("Medication", back_populates="reminders")
    logs = relationship("ReminderLog", back_populates="reminder", cascade="all, delete-orphan")


class ReminderLog(Base):
    """One delivery attempt of a reminder on one channel."""

    __tablename__ = "reminder_logs"

    id = Column(Integer, primary_key=True, index=True)
    reminder_id = Column(Integer, ForeignKey("reminders.id", ondelete="CASCADE"), nullable=False, index=True)
    channel = Column(SAEnum(NotificationChannel), nullable=False)
    status = Column(String(20), nullable=False)  # success | failed
    error_message = Column(String(500), nullable=True)
    sent_at = Column(DateTime(timezone=True), server_default=func.now())

    reminder = relationship("Reminder", back_populates="logs")
