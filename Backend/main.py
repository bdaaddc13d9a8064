import logging
import os
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

import models  # noqa: F401  (registers every table on Base.metadata)
from config import APP_NAME, APP_VERSION, APP_ENV, CORS_ORIGINS, is_production
from database import Base, engine, get_db
from routers import (
    pets_router,
    medications_router,
    reminders_router,
    history_router,
    subscription_router,
    notifications_router,
    jobs_router,
    sandbox_router,
)
from services.errors import PetMedsError
from services.firebase import init_firebase
from services.notifications import InMemoryNotificationLog, LiveNotificationSender

logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO").upper(), format="%(asctime)s %(levelname)s [%(name)s] %(message)s")

logs_path = os.path.join(os.path.dirname(__file__), "logs")
os.makedirs(logs_path, exist_ok=True)
error_log_file = os.path.join(logs_path, "errors.log")
error_logger = logging.getLogger("petmeds.errors")
if not error_logger.handlers:
    error_logger.setLevel(logging.ERROR)
    fh = logging.FileHandler(error_log_file, encoding="utf-8")
    fh.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(message)s"))
    error_logger.addHandler(fh)
    error_logger.propagate = False


@asynccontextmanager
async def lifespan(app: FastAPI):
    Base.metadata.create_all(bind=engine)
    if is_production():
        init_firebase()
    yield


app = FastAPI(
    title=APP_NAME,
    description="Pet medication reminders, history and plan limits - Backend API",
    version=APP_VERSION,
    lifespan=lifespan,
)

# Real channels only in production; everywhere else reminders land in the sandbox log.
app.state.notification_log = InMemoryNotificationLog()
app.state.notification_sender = LiveNotificationSender() if is_production() else app.state.notification_log

cors_origins = [o.strip() for o in CORS_ORIGINS.split(",") if o.strip()]
allow_any_origin = "*" in cors_origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if allow_any_origin else cors_origins,
    # Browsers reject wildcard+credentials.
    allow_credentials=False if allow_any_origin else True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routers
app.include_router(pets_router)
app.include_router(medications_router)
app.include_router(reminders_router)
app.include_router(history_router)
app.include_router(subscription_router)
app.include_router(notifications_router)
app.include_router(jobs_router)
app.include_router(sandbox_router)


@app.exception_handler(PetMedsError)
async def _petmeds_error_handler(request: Request, exc: PetMedsError):
    if exc.status_code >= 500:
        error_logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.middleware("http")
async def _capture_unhandled_errors(request: Request, call_next):
    try:
        return await call_next(request)
    except Exception as exc:  # pragma: no cover
        error_logger.exception("Unhandled server error on %s %s: %s", request.method, request.url.path, exc)
        return JSONResponse(status_code=500, content={"detail": "Internal server error"})


@app.get("/", tags=["Health"])
def root():
    return {"status": "ok", "service": APP_NAME, "version": APP_VERSION}


@app.get("/health", tags=["Health"])
def health_check(db: Session = Depends(get_db)):
    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError as exc:
        return JSONResponse(
            status_code=503,
            content={"status": "unhealthy", "error": "Database connection failed", "details": str(exc)},
        )
    return {"status": "healthy", "version": APP_VERSION, "environment": APP_ENV, "database": "connected"}
