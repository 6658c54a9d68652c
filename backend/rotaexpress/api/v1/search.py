from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from rotaexpress.schemas.search import SearchRequest, SearchResponse
from rotaexpress.services.resolver import (
    ZoneResolutionService,
    get_resolution_service,
)


router = APIRouter()


def get_service() -> ZoneResolutionService:
    return get_resolution_service()


@router.post("/", response_model=SearchResponse, status_code=status.HTTP_200_OK)
async def search_location(
    payload: SearchRequest,
    service: ZoneResolutionService = Depends(get_service),
) -> SearchResponse:
    result = await service.resolve(payload.query)
    if result is None:
        raise HTTPException(status.HTTP_404_NOT_FOUND, "Location not found")
    return SearchResponse.from_result(result)
