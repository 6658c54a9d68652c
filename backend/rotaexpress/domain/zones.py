from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable

from rotaexpress.domain.geometry import Point, Vertex, contains


class DeliveryDay(str, Enum):
    MONDAY = "Segunda-feira"
    TUESDAY = "Terça-feira"
    WEDNESDAY = "Quarta-feira"
    THURSDAY = "Quinta-feira"
    FRIDAY = "Sexta-feira"
    REMOTE = "Região Distante"
    OUT_OF_BOUNDS = "Fora da área de cobertura"


class ZoneRole(str, Enum):
    PRIMARY = "primary"
    FALLBACK = "fallback"


@dataclass(frozen=True, slots=True)
class Zone:
    """A delivery area. Only its polygon may be replaced after loading."""

    id: str
    name: DeliveryDay
    color: str
    polygon: tuple[Vertex, ...]
    role: ZoneRole = ZoneRole.PRIMARY
    driver: str | None = None

    @property
    def is_fallback(self) -> bool:
        return self.role is ZoneRole.FALLBACK


@dataclass(frozen=True, slots=True)
class Match:
    zone_id: str
    day: DeliveryDay
    driver_name: str
    color: str


@dataclass(frozen=True, slots=True)
class SearchResult:
    address: str
    coordinates: Point
    matches: tuple[Match, ...]

    @property
    def out_of_coverage(self) -> bool:
        return not self.matches


def match_zones(
    point: Point,
    zones: Iterable[Zone],
    *,
    primary_driver: str,
    fallback_driver: str,
) -> list[Match]:
    """
    Return every primary zone containing ``point``, in configured order.

    The fallback zone is only consulted when no primary zone matched, and
    then yields at most one remote match. An empty list means the point is
    out of coverage.
    """
    primary: list[Zone] = []
    fallback: Zone | None = None
    for zone in zones:
        if zone.is_fallback:
            if fallback is None:
                fallback = zone
        else:
            primary.append(zone)

    matches = [
        Match(
            zone_id=zone.id,
            day=zone.name,
            driver_name=zone.driver or primary_driver,
            color=zone.color,
        )
        for zone in primary
        if contains(point, zone.polygon)
    ]

    if not matches and fallback is not None and contains(point, fallback.polygon):
        matches.append(
            Match(
                zone_id=fallback.id,
                day=DeliveryDay.REMOTE,
                driver_name=fallback.driver or fallback_driver,
                color=fallback.color,
            )
        )

    return matches
