from datetime import datetime, timezone

from models.user import User
from services.security import create_access_token

NOW = datetime(2026, 3, 10, 12, 0, tzinfo=timezone.utc)


def auth_headers(user: User) -> dict:
    return {"Authorization": f"Bearer {create_access_token({'sub': str(user.id)})}"}
