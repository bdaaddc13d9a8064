import json
import logging
import os
import tempfile

import firebase_admin
from firebase_admin import credentials

from config import FIREBASE_SERVICE_ACCOUNT

logger = logging.getLogger("petmeds.firebase")


def init_firebase() -> bool:
    """Initialize Firebase Admin from FIREBASE_SERVICE_ACCOUNT. Returns True when ready."""
    if firebase_admin._apps:
        return True
    if not FIREBASE_SERVICE_ACCOUNT:
        logger.warning("FIREBASE_SERVICE_ACCOUNT not set, push notifications are disabled")
        return False
    try:
        sa_dict = json.loads(FIREBASE_SERVICE_ACCOUNT)
    except json.JSONDecodeError:
        # Some hosts wrap the JSON in extra quotes.
        cleaned = FIREBASE_SERVICE_ACCOUNT.strip().strip("'").strip('"')
        try:
            sa_dict = json.loads(cleaned)
        except json.JSONDecodeError:
            tmp = tempfile.NamedTemporaryFile(mode="w", suffix=".json", delete=False)
            tmp.write(FIREBASE_SERVICE_ACCOUNT)
            tmp.close()
            os.environ["GOOGLE_APPLICATION_CREDENTIALS"] = tmp.name
            firebase_admin.initialize_app()
            return True

    if "private_key" in sa_dict and "\\n" in sa_dict["private_key"]:
        sa_dict["private_key"] = sa_dict["private_key"].replace("\\n", "\n")
    firebase_admin.initialize_app(credentials.Certificate(sa_dict))
    logger.info("Firebase Admin SDK initialized")
    return True
