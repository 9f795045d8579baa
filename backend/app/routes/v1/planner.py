# backend/app/routes/v1/planner.py
"""
AI screening planner routes - API v1

Endpoints under /api/v1/planner:
    POST /chat          → One planner turn, answered as JSON
    POST /chat/stream   → The same turn as Server-Sent Events
"""

import asyncio
from datetime import datetime, timezone
import logging
from typing import AsyncGenerator

from fastapi import APIRouter, Depends, HTTPException, status
from sse_starlette.sse import EventSourceResponse

from ...api.dependencies import get_current_user
from ...api.dependencies.services import get_planner_service
from ...core.exceptions import DomainException, raise_503_if_pool_exhaustion
from ...models.user import User
from ...schemas.planner import PlannerChatRequest, PlannerChatResponse
from ...services.planner import PlannerRequest, PlannerService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["planner-v1"])


async def _prepare(
    planner_service: PlannerService, current_user: User, payload: PlannerChatRequest
) -> PlannerRequest:
    try:
        return await asyncio.to_thread(
            planner_service.build_request,
            current_user.id,
            [message.model_dump() for message in payload.messages],
            payload.edition_id,
            payload.dates,
        )
    except DomainException as exc:
        raise exc.to_http_exception() from exc
    except Exception as e:
        raise_503_if_pool_exhaustion(e)
        logger.error(f"Error preparing planner request: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to prepare planner"
        )


@router.post(
    "/chat",
    response_model=PlannerChatResponse,
    responses={
        400: {"description": "Missing editionId or dates"},
        401: {"description": "Not authenticated"},
        503: {"description": "The model timed out or is unavailable"},
    },
)
async def planner_chat(
    payload: PlannerChatRequest,
    current_user: User = Depends(get_current_user),
    planner_service: PlannerService = Depends(get_planner_service),
) -> PlannerChatResponse:
    """
    Plan screenings for the given edition and days.

    The model sees the day's screenings and the user's highly rated films,
    and answers with a message plus recommended screenings.
    """
    request = await _prepare(planner_service, current_user, payload)
    try:
        result = await planner_service.chat(request)
    except DomainException as exc:
        raise exc.to_http_exception() from exc
    return PlannerChatResponse(**result.to_dict())


@router.post(
    "/chat/stream",
    responses={
        200: {"description": "SSE stream of text, recommendations and done events"},
        400: {"description": "Missing editionId or dates"},
        401: {"description": "Not authenticated"},
    },
)
async def planner_chat_stream(
    payload: PlannerChatRequest,
    current_user: User = Depends(get_current_user),
    planner_service: PlannerService = Depends(get_planner_service),
) -> EventSourceResponse:
    request = await _prepare(planner_service, current_user, payload)
    logger.info(
        "[SSE] Planner stream started",
        extra={
            "user_id": current_user.id,
            "edition_id": request.edition_id,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        },
    )

    async def event_generator() -> AsyncGenerator[dict[str, str], None]:
        async for event in planner_service.stream_events(request):
            yield event

    return EventSourceResponse(
        event_generator(),
        headers={
            "Cache-Control": "no-cache, no-store, must-revalidate",
            "X-Accel-Buffering": "no",
        },
        media_type="text/event-stream",
    )
