from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from rotaexpress.schemas.search import Suggestion, SuggestionListResponse
from rotaexpress.services.suggestions import (
    SuggestionService,
    get_suggestion_service,
)


router = APIRouter()


def get_service() -> SuggestionService:
    return get_suggestion_service()


@router.get("/", response_model=SuggestionListResponse)
async def list_suggestions(
    q: str = Query(default="", max_length=200),
    service: SuggestionService = Depends(get_service),
) -> SuggestionListResponse:
    items = await service.suggest(q)
    return SuggestionListResponse(
        suggestions=[Suggestion.from_item(item) for item in items]
    )
