from models.user import User
from models.pet import Pet
from models.medication import Medication, MedicationFrequency
from models.reminder import Reminder, ReminderLog, ReminderStatus, NotificationChannel
from models.history import HistoryEntry
from models.subscription import Subscription
from models.notification import NotificationPreference

__all__ = [
    "User",
    "Pet",
    "Medication",
    "MedicationFrequency",
    "Reminder",
    "ReminderLog",
    "ReminderStatus",
    "NotificationChannel",
    "HistoryEntry",
    "Subscription",
    "NotificationPreference",
]
