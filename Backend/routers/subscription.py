from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from database import get_db
from dependencies import get_current_user
from models.user import User
from schemas.subscription import PlanSummaryOut
from services.plan_limits import get_plan_summary

router = APIRouter(prefix="/subscription", tags=["Subscription"])


@router.get("/plan", response_model=PlanSummaryOut)
def plan_summary(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Current tier, free-plan limits and usage, for the upgrade prompt."""
    return get_plan_summary(db, current_user.id)
