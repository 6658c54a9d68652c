from __future__ import annotations

from typing import Awaitable, Callable

from rotaexpress.core.config import get_settings
from rotaexpress.core.logging import get_logger
from rotaexpress.domain.query import is_postal_code, looks_like_address
from rotaexpress.domain.zones import SearchResult, match_zones
from rotaexpress.services.geocoding import GeocodeResult, geocode_query
from rotaexpress.services.llm import normalize_query
from rotaexpress.services.postal import lookup_postal_code
from rotaexpress.services.zone_store import ZoneStore, get_zone_store


NormalizerCallable = Callable[[str], Awaitable[str]]
PostalLookupCallable = Callable[[str], Awaitable[str | None]]
GeocoderCallable = Callable[[str], Awaitable[GeocodeResult | None]]


_logger = get_logger(__name__)


class ZoneResolutionService:
    """Turn a user query into an address, a coordinate and its delivery zones."""

    def __init__(
        self,
        zone_store: ZoneStore,
        *,
        normalizer: NormalizerCallable = normalize_query,
        postal_lookup: PostalLookupCallable = lookup_postal_code,
        geocoder: GeocoderCallable = geocode_query,
        primary_driver: str | None = None,
        fallback_driver: str | None = None,
    ) -> None:
        settings = get_settings()
        self._zone_store = zone_store
        self._normalizer = normalizer
        self._postal_lookup = postal_lookup
        self._geocoder = geocoder
        self._primary_driver = primary_driver or settings.primary_driver_name
        self._fallback_driver = fallback_driver or settings.fallback_driver_name

    async def resolve(self, raw_query: str) -> SearchResult | None:
        """Return the resolved search result, or None when the location is unknown."""

        query = (raw_query or "").strip()
        if not query:
            return None

        search_query = await self._prepare_query(query)
        location = await self._locate(search_query)
        if location is None:
            _logger.info("Location not found", query=query, search_query=search_query)
            return None

        zones = self._zone_store.snapshot()
        matches = match_zones(
            location.coordinates,
            zones,
            primary_driver=self._primary_driver,
            fallback_driver=self._fallback_driver,
        )
        _logger.info(
            "Query resolved",
            query=query,
            address=location.address,
            latitude=location.latitude,
            longitude=location.longitude,
            zones=[match.zone_id for match in matches],
        )
        return SearchResult(
            address=location.address,
            coordinates=location.coordinates,
            matches=tuple(matches),
        )

    async def _prepare_query(self, query: str) -> str:
        if looks_like_address(query):
            return query

        try:
            normalized = await self._normalizer(query)
        except Exception as exc:  # normalization is best effort
            _logger.warning("Query normalization failed", query=query, error=str(exc))
            return query

        return normalized.strip() if normalized and normalized.strip() else query

    async def _locate(self, query: str) -> GeocodeResult | None:
        if is_postal_code(query):
            address = await self._lookup_postal_code(query)
            if address:
                result = await self._geocode(address)
                if result is not None:
                    return result
                _logger.info(
                    "Postal address not geocoded, retrying with query",
                    query=query,
                    address=address,
                )

        return await self._geocode(query)

    async def _geocode(self, query: str) -> GeocodeResult | None:
        try:
            return await self._geocoder(query)
        except Exception as exc:  # a failed lookup is reported as not found
            _logger.warning("Geocoding failed", query=query, error=str(exc))
            return None

    async def _lookup_postal_code(self, query: str) -> str | None:
        try:
            return await self._postal_lookup(query)
        except Exception as exc:  # fall back to geocoding the raw postal code
            _logger.warning("Postal lookup failed", query=query, error=str(exc))
            return None


_resolution_service: ZoneResolutionService | None = None


def get_resolution_service() -> ZoneResolutionService:
    global _resolution_service
    if _resolution_service is None:
        _resolution_service = ZoneResolutionService(get_zone_store())
    return _resolution_service
