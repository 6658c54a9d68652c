from __future__ import annotations

import json
from dataclasses import replace
from pathlib import Path
from typing import Any, Iterable, Mapping

from rotaexpress.core.config import get_settings
from rotaexpress.core.logging import get_logger
from rotaexpress.domain.geometry import to_polygon
from rotaexpress.domain.zones import DeliveryDay, Zone, ZoneRole


_logger = get_logger(__name__)


class ZoneConfigurationError(RuntimeError):
    """Raised when the static zone configuration is malformed."""


class ZoneNotFoundError(KeyError):
    """Raised when a zone edit targets an unknown zone id."""


class ZoneStore:
    """
    Holds the current zone set as an immutable snapshot.

    Readers take ``snapshot()`` once per resolution. Polygon edits build a
    new tuple and swap the reference, so a reader never sees a partially
    applied edit.
    """

    def __init__(self, zones: Iterable[Zone]) -> None:
        snapshot = tuple(zones)
        _validate(snapshot)
        self._zones = snapshot

    @classmethod
    def from_file(cls, path: Path) -> "ZoneStore":
        try:
            payload = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            raise ZoneConfigurationError(
                f"Could not read zone configuration '{path}': {exc}"
            ) from exc

        entries = payload.get("zones") if isinstance(payload, Mapping) else payload
        if not isinstance(entries, list):
            raise ZoneConfigurationError("Zone configuration must list zones")

        zones = [_parse_zone(entry) for entry in entries]
        _logger.info("Zones loaded", path=str(path), total=len(zones))
        return cls(zones)

    def snapshot(self) -> tuple[Zone, ...]:
        return self._zones

    def get(self, zone_id: str) -> Zone:
        for zone in self._zones:
            if zone.id == zone_id:
                return zone
        raise ZoneNotFoundError(zone_id)

    def replace_polygon(self, zone_id: str, polygon: Iterable[Any]) -> Zone:
        """Substitute the polygon of one zone; every other field is kept."""

        vertices = to_polygon(polygon)
        current = self._zones
        updated: Zone | None = None
        zones: list[Zone] = []
        for zone in current:
            if zone.id == zone_id:
                updated = replace(zone, polygon=vertices)
                zones.append(updated)
            else:
                zones.append(zone)

        if updated is None:
            raise ZoneNotFoundError(zone_id)

        self._zones = tuple(zones)
        _logger.info("Zone polygon replaced", zone_id=zone_id, vertices=len(vertices))
        return updated


def _parse_zone(entry: Any) -> Zone:
    if not isinstance(entry, Mapping):
        raise ZoneConfigurationError(f"Invalid zone entry: {entry!r}")

    zone_id = str(entry.get("id") or "").strip()
    if not zone_id:
        raise ZoneConfigurationError("Zone entry without id")

    try:
        name = DeliveryDay(entry.get("name"))
        role = ZoneRole(entry.get("role", ZoneRole.PRIMARY.value))
        polygon = to_polygon(entry.get("polygon") or [])
    except (TypeError, ValueError) as exc:
        raise ZoneConfigurationError(f"Invalid zone '{zone_id}': {exc}") from exc

    driver = entry.get("driver")
    return Zone(
        id=zone_id,
        name=name,
        color=str(entry.get("color") or "#64748b"),
        polygon=polygon,
        role=role,
        driver=str(driver) if driver else None,
    )


def _validate(zones: tuple[Zone, ...]) -> None:
    ids = [zone.id for zone in zones]
    duplicates = sorted({zone_id for zone_id in ids if ids.count(zone_id) > 1})
    if duplicates:
        raise ZoneConfigurationError(f"Duplicate zone ids: {', '.join(duplicates)}")

    fallback = [zone.id for zone in zones if zone.is_fallback]
    if len(fallback) != 1:
        raise ZoneConfigurationError(
            f"Exactly one fallback zone is required, found {len(fallback)}"
        )


_zone_store: ZoneStore | None = None


def get_zone_store() -> ZoneStore:
    global _zone_store
    if _zone_store is None:
        _zone_store = ZoneStore.from_file(get_settings().zones_path)
    return _zone_store
