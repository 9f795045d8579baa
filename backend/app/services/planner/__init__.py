"""AI screening planner: prompt context loaders and the OpenAI tool loop."""

from app.services.planner.context import (
    MinifiedScreening,
    MinifiedTaste,
    get_screenings_context,
    get_user_taste_context,
)
from app.services.planner.planner_service import PlannerRequest, PlannerResult, PlannerService

__all__ = [
    "MinifiedScreening",
    "MinifiedTaste",
    "PlannerRequest",
    "PlannerResult",
    "PlannerService",
    "get_screenings_context",
    "get_user_taste_context",
]
