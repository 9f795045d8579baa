# backend/app/routes/v1/user_entries.py
"""
User entry routes - API v1

A user's own rating and short review per film, under /api/v1/user-entries.

Endpoints:
    GET /?film_id=        → My entry for the film (204 when none)
    PUT /                 → Upsert rating / short review
    DELETE /?film_id=     → Delete my entry (always 204)
    GET /list             → My entries with a rating or review, newest first
"""

import asyncio
import logging
from typing import List, Optional, Union

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from ...api.dependencies import get_current_user
from ...api.dependencies.services import get_user_entry_service
from ...core.exceptions import DomainException, raise_503_if_pool_exhaustion
from ...models.user import User
from ...schemas.user_entry import UserEntryResponse, UserEntryUpsert
from ...services.user_entry_service import UserEntryService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["user-entries-v1"])


@router.get(
    "",
    response_model=UserEntryResponse,
    responses={204: {"description": "No entry for this film"}},
)
async def get_user_entry(
    film_id: Optional[str] = Query(None),
    current_user: User = Depends(get_current_user),
    entry_service: UserEntryService = Depends(get_user_entry_service),
) -> Union[UserEntryResponse, Response]:
    try:
        entry = await asyncio.to_thread(entry_service.get_entry, current_user.id, film_id)
    except DomainException as exc:
        raise exc.to_http_exception() from exc
    except Exception as e:
        raise_503_if_pool_exhaustion(e)
        logger.error(f"Error loading entry for film {film_id}: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to load entry"
        )
    if entry is None:
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    return UserEntryResponse(**entry)


@router.put("", response_model=UserEntryResponse)
async def put_user_entry(
    payload: UserEntryUpsert,
    current_user: User = Depends(get_current_user),
    entry_service: UserEntryService = Depends(get_user_entry_service),
) -> UserEntryResponse:
    """
    Save my rating and short review for a film.

    A rating of zero or less clears it; a rating above 5 is a 400.
    """
    try:
        entry = await asyncio.to_thread(
            entry_service.upsert_entry,
            current_user.id,
            payload.film_id,
            payload.rating,
            payload.short_review,
        )
        return UserEntryResponse(**entry)
    except DomainException as exc:
        raise exc.to_http_exception() from exc
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception as e:
        raise_503_if_pool_exhaustion(e)
        logger.error(f"Error saving entry: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to save entry"
        )


@router.delete("", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user_entry(
    film_id: Optional[str] = Query(None),
    current_user: User = Depends(get_current_user),
    entry_service: UserEntryService = Depends(get_user_entry_service),
) -> Response:
    try:
        await asyncio.to_thread(entry_service.delete_entry, current_user.id, film_id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    except DomainException as exc:
        raise exc.to_http_exception() from exc
    except Exception as e:
        raise_503_if_pool_exhaustion(e)
        logger.error(f"Error deleting entry for film {film_id}: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to delete entry"
        )


@router.get("/list", response_model=List[UserEntryResponse])
async def list_user_entries(
    current_user: User = Depends(get_current_user),
    entry_service: UserEntryService = Depends(get_user_entry_service),
) -> List[UserEntryResponse]:
    try:
        entries = await asyncio.to_thread(entry_service.list_entries, current_user.id)
        return [UserEntryResponse(**entry) for entry in entries]
    except DomainException as exc:
        raise exc.to_http_exception() from exc
    except Exception as e:
        raise_503_if_pool_exhaustion(e)
        logger.error(f"Error listing entries: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to list entries"
        )
