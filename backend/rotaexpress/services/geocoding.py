from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import TYPE_CHECKING

from cachetools import TTLCache
from geopy.exc import (
    GeocoderQuotaExceeded,
    GeocoderServiceError,
    GeocoderTimedOut,
    GeocoderUnavailable,
    GeopyError,
)
from geopy.geocoders import get_geocoder_for_service
from geopy.geocoders.base import Geocoder

from rotaexpress.core.config import get_settings
from rotaexpress.core.logging import get_logger

if TYPE_CHECKING:  # pragma: no cover - typing helpers only
    from geopy.location import Location

    from rotaexpress.core.config import Settings

_logger = get_logger(__name__)
_cache = TTLCache(maxsize=512, ttl=60 * 60 * 24)
_cache_lock = asyncio.Lock()
_geocoder_lock = asyncio.Lock()
_geocode_call_lock = asyncio.Lock()
_geocoder: Geocoder | None = None


@dataclass(frozen=True, slots=True)
class GeocodeResult:
    address: str
    latitude: float
    longitude: float

    @property
    def coordinates(self) -> tuple[float, float]:
        return (self.latitude, self.longitude)


async def geocode_query(query: str) -> GeocodeResult | None:
    """Return the single best match for ``query`` within the configured country."""

    query = query.strip()
    if not query:
        return None

    async with _cache_lock:
        cached = _cache.get(query)
    if cached:
        _logger.info("Geocoding cache hit", query=query)
        return cached

    _logger.info("Geocoding lookup", query=query)
    try:
        location = await _geocode(query)
    except (GeocoderQuotaExceeded, GeocoderTimedOut) as exc:
        message = (
            "Geocoding quota exceeded"
            if isinstance(exc, GeocoderQuotaExceeded)
            else "Geocoding timed out"
        )
        _logger.warning(message, query=query)
        return None
    except (GeocoderServiceError, GeocoderUnavailable, GeopyError) as exc:
        _logger.warning("Geocoding failed", query=query, error=str(exc))
        return None

    result = _to_result(location, query)
    if result is None:
        _logger.info("No geocoding candidates", query=query)
        return None

    async with _cache_lock:
        _cache[query] = result
    _logger.info(
        "Geocoding success",
        query=query,
        latitude=result.latitude,
        longitude=result.longitude,
    )
    return result


def _to_result(location: "Location | None", query: str) -> GeocodeResult | None:
    if location is None:
        return None

    latitude = getattr(location, "latitude", None)
    longitude = getattr(location, "longitude", None)
    if latitude is None or longitude is None:
        return None

    address = getattr(location, "address", None)
    if not address:
        raw = getattr(location, "raw", None) or {}
        display_name = raw.get("display_name") if isinstance(raw, dict) else None
        address = display_name if isinstance(display_name, str) else query

    return GeocodeResult(address, float(latitude), float(longitude))


async def _geocode(query: str) -> "Location | None":
    geocoder = await _get_geocoder()
    settings = get_settings()

    async with _geocode_call_lock:
        return await asyncio.to_thread(
            geocoder.geocode,
            query,
            exactly_one=True,
            country_codes=settings.geocoder_country_codes or None,
        )


async def _get_geocoder() -> Geocoder:
    global _geocoder
    async with _geocoder_lock:
        if _geocoder is None:
            _geocoder = _create_geocoder(get_settings())
        return _geocoder


def _create_geocoder(settings: "Settings") -> Geocoder:
    geocoder_cls = get_geocoder_for_service("nominatim")
    kwargs: dict[str, object] = {
        "user_agent": settings.geocoder_user_agent or "rotaexpress-geocoder",
        "timeout": settings.geocoder_timeout,
    }
    if settings.geocoder_domain:
        kwargs["domain"] = settings.geocoder_domain
    return geocoder_cls(**kwargs)
