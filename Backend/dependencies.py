from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from fastapi import Depends, HTTPException, Query, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from config import APP_TIMEZONE
from database import get_db
from models.user import User
from services.notifications import InMemoryNotificationLog
from services.security import decode_user_id

bearer_scheme = HTTPBearer(auto_error=False)


def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> User:
    if not credentials:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
    user_id = decode_user_id(credentials.credentials)
    user = db.get(User, user_id) if user_id is not None else None
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
    return user


def get_timezone(tz: str | None = Query(default=None)) -> ZoneInfo:
    try:
        return ZoneInfo(tz or APP_TIMEZONE)
    except (ZoneInfoNotFoundError, ValueError, OSError):
        raise HTTPException(status_code=400, detail=f"Unknown timezone '{tz}'")


def get_notification_sender(request: Request):
    return request.app.state.notification_sender


def get_notification_log(request: Request) -> InMemoryNotificationLog:
    return request.app.state.notification_log
