from routers.pets import router as pets_router
from routers.medications import router as medications_router
from routers.reminders import router as reminders_router
from routers.history import router as history_router
from routers.subscription import router as subscription_router
from routers.notifications import router as notifications_router
from routers.jobs import router as jobs_router
from routers.sandbox import router as sandbox_router

__all__ = [
    "pets_router",
    "medications_router",
    "reminders_router",
    "history_router",
    "subscription_router",
    "notifications_router",
    "jobs_router",
    "sandbox_router",
]
