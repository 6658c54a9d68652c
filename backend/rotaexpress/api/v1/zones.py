from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from rotaexpress.schemas.zones import (
    PolygonUpdateRequest,
    ZoneListResponse,
    ZonePayload,
)
from rotaexpress.services.zone_store import (
    ZoneNotFoundError,
    ZoneStore,
    get_zone_store,
)


router = APIRouter()


def get_store() -> ZoneStore:
    return get_zone_store()


@router.get("/", response_model=ZoneListResponse)
async def list_zones(store: ZoneStore = Depends(get_store)) -> ZoneListResponse:
    return ZoneListResponse(
        zones=[ZonePayload.from_zone(zone) for zone in store.snapshot()]
    )


@router.put("/{zone_id}/polygon", response_model=ZonePayload)
async def replace_zone_polygon(
    zone_id: str,
    payload: PolygonUpdateRequest,
    store: ZoneStore = Depends(get_store),
) -> ZonePayload:
    try:
        zone = store.replace_polygon(zone_id, payload.polygon)
    except ZoneNotFoundError:
        raise HTTPException(status.HTTP_404_NOT_FOUND, "Zone not found")
    return ZonePayload.from_zone(zone)
