"""Cron entry point: dispatch due reminders, then sweep long-overdue ones to missed."""

import logging

import models  # noqa: F401
from database import SessionLocal
from services.firebase import init_firebase
from services.notifications import LiveNotificationSender, dispatch_due_reminders
from services.reminders import mark_missed_reminders

logger = logging.getLogger("petmeds.jobs")


def main():
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s [%(name)s] %(message)s")
    init_firebase()
    db = SessionLocal()
    try:
        results = dispatch_due_reminders(db, LiveNotificationSender())
        sent = sum(1 for r in results if r.get("email_sent") or r.get("push_sent"))
        logger.info("Reminder notifications: %s processed, %s delivered", len(results), sent)

        missed = mark_missed_reminders(db)
        logger.info("Missed sweep: %s reminder(s)", missed)
    finally:
        db.close()


if __name__ == "__main__":
    main()
