# backend/app/routes/v1/timetable.py
"""
Timetable routes - API v1

GET /api/v1/timetable?edition=&date= → the signed-in user's favorite
screenings for one festival day, with overlap groups for side-by-side layout.
"""

import asyncio
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from ...api.dependencies import get_current_user
from ...api.dependencies.services import get_timetable_service
from ...core.exceptions import DomainException, raise_503_if_pool_exhaustion
from ...models.user import User
from ...schemas.timetable import TimetableResponse
from ...services.timetable_service import TimetableService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["timetable-v1"])


@router.get("", response_model=TimetableResponse)
async def get_timetable(
    edition: Optional[str] = Query(None),
    date: Optional[str] = Query(None, description="YYYY-MM-DD"),
    current_user: User = Depends(get_current_user),
    timetable_service: TimetableService = Depends(get_timetable_service),
) -> TimetableResponse:
    try:
        result = await asyncio.to_thread(timetable_service.build, current_user.id, edition, date)
        return TimetableResponse(**result)
    except DomainException as exc:
        raise exc.to_http_exception() from exc
    except Exception as e:
        raise_503_if_pool_exhaustion(e)
        logger.error(f"Error building timetable: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to build timetable"
        )
