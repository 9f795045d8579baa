"""Schemas for the AI screening planner."""

from typing import List, Literal, Optional

from pydantic import ConfigDict, Field

from ._strict_base import StrictModel, StrictRequestModel


class ChatMessage(StrictRequestModel):
    role: Literal["user", "assistant"]
    content: str


class PlannerChatRequest(StrictRequestModel):
    """Conversation so far plus the edition and days to plan for."""

    model_config = ConfigDict(extra="forbid", validate_assignment=True, populate_by_name=True)

    messages: List[ChatMessage] = Field(default_factory=list)
    edition_id: Optional[str] = Field(default=None, alias="editionId")
    dates: Optional[List[str]] = None


class PlannerRecommendation(StrictModel):
    screening_id: str
    reason: str = ""
    film_id: Optional[str] = None
    title: Optional[str] = None
    date: str = ""
    time: str = ""
    venue: Optional[str] = None


class PlannerChatResponse(StrictModel):
    message: str = ""
    recommendations: List[PlannerRecommendation] = Field(default_factory=list)
