# backend/app/routes/v1/favorite_screenings.py
"""
Favorite screenings routes - API v1

Versioned endpoints under /api/v1/favorite-screenings.
All business logic delegated to FavoriteScreeningService.

Endpoints:
    GET /?screening_ids=a,b              → The user's favorites among the ids
    PUT /                                → Favorite / unfavorite / update priority and order
    GET /mine                            → Every favorite of the user
    POST /{screening_id}/priority        → Cycle the priority 0 → 1 → 2 → 0
"""

import asyncio
import logging
from typing import Optional, Union

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from fastapi.params import Path

from ...api.dependencies import get_current_user
from ...api.dependencies.services import get_favorite_screening_service
from ...core.exceptions import DomainException, raise_503_if_pool_exhaustion
from ...models.user import User
from ...schemas.favorite_screening import (
    FavoriteScreeningListResponse,
    FavoriteScreeningMineResponse,
    FavoriteScreeningResponse,
    FavoriteScreeningUpdate,
)
from ...services.favorites_service import FAVORITE_FIELDS, FavoriteScreeningService
from ...utils.csv_params import parse_csv

logger = logging.getLogger(__name__)

router = APIRouter(tags=["favorite-screenings-v1"])


@router.get("", response_model=FavoriteScreeningListResponse)
async def get_favorite_screenings(
    screening_ids: Optional[str] = Query(None, description="Comma separated screening ids"),
    current_user: User = Depends(get_current_user),
    favorites_service: FavoriteScreeningService = Depends(get_favorite_screening_service),
) -> FavoriteScreeningListResponse:
    try:
        items = await asyncio.to_thread(
            favorites_service.get_favorites, current_user.id, parse_csv(screening_ids)
        )
        return FavoriteScreeningListResponse(items=items)
    except DomainException as exc:
        raise exc.to_http_exception() from exc
    except Exception as e:
        raise_503_if_pool_exhaustion(e)
        logger.error(f"Error loading favorite screenings: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to load favorites"
        )


@router.put(
    "",
    response_model=FavoriteScreeningResponse,
    responses={204: {"description": "Favorite removed"}},
)
async def put_favorite_screening(
    payload: FavoriteScreeningUpdate,
    current_user: User = Depends(get_current_user),
    favorites_service: FavoriteScreeningService = Depends(get_favorite_screening_service),
) -> Union[FavoriteScreeningResponse, Response]:
    """
    Favorite or unfavorite a screening.

    ``favorite=false`` removes it and answers 204. Otherwise the favorite is
    upserted and ``priority`` / ``sort_order`` are written only when sent.
    """
    updates = {field: getattr(payload, field) for field in FAVORITE_FIELDS if field in payload.model_fields_set}
    try:
        result = await asyncio.to_thread(
            favorites_service.set_favorite,
            current_user.id,
            payload.screening_id,
            payload.favorite is not False,
            updates,
        )
    except DomainException as exc:
        raise exc.to_http_exception() from exc
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception as e:
        raise_503_if_pool_exhaustion(e)
        logger.error(f"Error updating favorite screening: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to update favorite"
        )

    if result is None:
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    return FavoriteScreeningResponse(**result)


@router.get("/mine", response_model=FavoriteScreeningMineResponse)
async def list_my_favorite_screenings(
    current_user: User = Depends(get_current_user),
    favorites_service: FavoriteScreeningService = Depends(get_favorite_screening_service),
) -> FavoriteScreeningMineResponse:
    try:
        items = await asyncio.to_thread(favorites_service.list_favorites, current_user.id)
        return FavoriteScreeningMineResponse(items=items)
    except DomainException as exc:
        raise exc.to_http_exception() from exc
    except Exception as e:
        raise_503_if_pool_exhaustion(e)
        logger.error(f"Error listing favorite screenings: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to load favorites"
        )


@router.post("/{screening_id}/priority", response_model=FavoriteScreeningResponse)
async def cycle_favorite_priority(
    screening_id: str = Path(..., min_length=1, max_length=128),
    current_user: User = Depends(get_current_user),
    favorites_service: FavoriteScreeningService = Depends(get_favorite_screening_service),
) -> FavoriteScreeningResponse:
    try:
        result = await asyncio.to_thread(favorites_service.cycle_priority, current_user.id, screening_id)
        return FavoriteScreeningResponse(**result)
    except DomainException as exc:
        raise exc.to_http_exception() from exc
    except Exception as e:
        raise_503_if_pool_exhaustion(e)
        logger.error(f"Error cycling priority of {screening_id}: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to update priority"
        )
