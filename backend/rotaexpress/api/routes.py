from __future__ import annotations

from fastapi import APIRouter

from rotaexpress.api.v1 import search, suggestions, zones

router = APIRouter()
router.include_router(search.router, prefix="/v1/search", tags=["search"])
router.include_router(
    suggestions.router, prefix="/v1/suggestions", tags=["suggestions"]
)
router.include_router(zones.router, prefix="/v1/zones", tags=["zones"])
