# backend/app/services/planner/llm_schema.py
"""
Pydantic schema for the ``suggestScreenings`` tool.

The JSON schema handed to the model is generated from these models, and the
model's tool-call arguments are validated against them.
"""
from typing import Any, Dict, List

from pydantic import ConfigDict, Field

from app.schemas._strict_base import StrictModel

SUGGEST_SCREENINGS_TOOL = "suggestScreenings"


class SuggestedScreening(StrictModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    screening_id: str = Field(
        alias="screeningId", description="Id of a screening from the available screenings list"
    )
    reason: str = Field(description="Why this screening fits the user, written in Korean")


class SuggestScreeningsInput(StrictModel):
    """Arguments of one ``suggestScreenings`` call."""

    model_config = ConfigDict(extra="forbid")

    recommendations: List[SuggestedScreening] = Field(default_factory=list)


def suggest_screenings_tool() -> Dict[str, Any]:
    """Chat-completions tool definition for ``suggestScreenings``."""
    return {
        "type": "function",
        "function": {
            "name": SUGGEST_SCREENINGS_TOOL,
            "description": "Suggest a list of screenings to the user.",
            "parameters": SuggestScreeningsInput.model_json_schema(),
        },
    }
