from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Enum as SAEnum
from sqlalchemy.sql import func

from database import Base
from models.reminder import ReminderStatus


class HistoryEntry(Base):
    """Append-only log of completed reminders.

    pet_id and medication_id are plain references on purpose: entries stay
    after the pet or medication is deleted.
    """

    __tablename__ = "history"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    pet_id = Column(Integer, nullable=False, index=True)
    medication_id = Column(Integer, nullable=False, index=True)
    medication_name = Column(String(120), nullable=True)
    dosage = Column(String(120), nullable=False, default="")
    scheduled_time = Column(DateTime(timezone=True), nullable=False, index=True)
    status = Column(SAEnum(ReminderStatus), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
