# backend/app/schemas/privacy.py
"""
Pydantic schemas for rating/review privacy settings.
"""

from typing import Optional

from pydantic import ConfigDict, Field

from ._strict_base import StrictModel, StrictRequestModel


class PrivacySettingsResponse(StrictModel):
    user_id: str
    rating_visibility: str = Field(description="private | friends | public")
    review_visibility: str = Field(description="private | friends | public")


class PrivacyUpdateRequest(StrictRequestModel):
    """
    Partial update; values are checked by the service so an unknown
    visibility is a 400 with a field-specific message.
    """

    model_config = ConfigDict(extra="forbid", validate_assignment=True, populate_by_name=True)

    rating_visibility: Optional[str] = Field(default=None, alias="ratingVisibility")
    review_visibility: Optional[str] = Field(default=None, alias="reviewVisibility")
