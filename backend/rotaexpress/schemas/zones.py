from __future__ import annotations

from pydantic import BaseModel, Field

from rotaexpress.domain.zones import Zone


class PolygonPoint(BaseModel):
    lat: float
    lng: float


class ZonePayload(BaseModel):
    id: str
    name: str
    color: str
    role: str
    driver: str | None = None
    polygon: list[PolygonPoint] = Field(default_factory=list)

    @classmethod
    def from_zone(cls, zone: Zone) -> "ZonePayload":
        return cls(
            id=zone.id,
            name=zone.name.value,
            color=zone.color,
            role=zone.role.value,
            driver=zone.driver,
            polygon=[PolygonPoint(lat=v.lat, lng=v.lng) for v in zone.polygon],
        )


class ZoneListResponse(BaseModel):
    zones: list[ZonePayload]


class PolygonUpdateRequest(BaseModel):
    # Points arrive as [lat, lng] pairs or {"lat": .., "lng": ..} records.
    polygon: list[tuple[float, float] | PolygonPoint]
