from pydantic import BaseModel


class PlanSummaryOut(BaseModel):
    tier: str
    subscribed: bool
    limits: dict[str, int | None]
    usage: dict[str, int]
