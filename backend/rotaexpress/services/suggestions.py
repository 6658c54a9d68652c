from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable, Mapping, Sequence

from geopy.geocoders import get_geocoder_for_service
from geopy.geocoders.base import Geocoder

from rotaexpress.core.config import get_settings
from rotaexpress.core.logging import get_logger
from rotaexpress.domain.suggestions import (
    SuggestionItem,
    address_suggestion,
    client_suggestion,
)
from rotaexpress.services.directory import ClientDirectory, get_client_directory


AddressCandidates = Sequence[Mapping[str, Any]]
SuggestionSourceCallable = Callable[[str, int, str], Awaitable[AddressCandidates]]


_logger = get_logger(__name__)
_photon_lock = asyncio.Lock()
_photon: Geocoder | None = None

_MIN_QUERY_LENGTH = 2
_MIN_EXTERNAL_QUERY_LENGTH = 3


async def fetch_address_candidates(
    query: str, limit: int, language: str
) -> AddressCandidates:
    """Query Photon for search-as-you-type candidates and return their properties."""

    photon = _get_photon()
    async with _photon_lock:
        locations = await asyncio.to_thread(
            photon.geocode,
            query,
            exactly_one=False,
            limit=limit,
            language=language,
        )

    candidates: list[Mapping[str, Any]] = []
    for location in locations or []:
        raw = getattr(location, "raw", None) or {}
        properties = raw.get("properties") if isinstance(raw, Mapping) else None
        if isinstance(properties, Mapping):
            candidates.append(properties)
    return candidates


def _get_photon() -> Geocoder:
    global _photon
    if _photon is None:
        settings = get_settings()
        geocoder_cls = get_geocoder_for_service("photon")
        _photon = geocoder_cls(
            domain=settings.suggestion_domain,
            timeout=settings.suggestion_timeout,
            user_agent=settings.geocoder_user_agent,
        )
    return _photon


class SuggestionService:
    """Merges client directory hits and external address candidates."""

    def __init__(
        self,
        directory: ClientDirectory,
        *,
        source: SuggestionSourceCallable = fetch_address_candidates,
        local_limit: int = 3,
        external_limit: int = 5,
        language: str = "pt",
    ) -> None:
        self._directory = directory
        self._source = source
        self._local_limit = local_limit
        self._external_limit = external_limit
        self._language = language

    async def suggest(self, partial: str | None) -> list[SuggestionItem]:
        needle = (partial or "").strip().lower()
        if len(needle) < _MIN_QUERY_LENGTH:
            return []

        local = [
            client_suggestion(record)
            for record in self._directory.search(needle, self._local_limit)
        ]
        external = await self._external_suggestions(needle)
        return [*local, *external]

    async def _external_suggestions(self, needle: str) -> list[SuggestionItem]:
        if len(needle) < _MIN_EXTERNAL_QUERY_LENGTH:
            return []
        if not any(ch.isalnum() for ch in needle):
            return []

        try:
            candidates = await self._source(
                needle, self._external_limit, self._language
            )
        except Exception as exc:  # degrade to local-only results
            _logger.warning("Address suggestions failed", query=needle, error=str(exc))
            return []

        items: list[SuggestionItem] = []
        for properties in candidates:
            item = address_suggestion(properties)
            if item is not None:
                items.append(item)
        return items


_suggestion_service: SuggestionService | None = None


def get_suggestion_service() -> SuggestionService:
    global _suggestion_service
    if _suggestion_service is None:
        settings = get_settings()
        _suggestion_service = SuggestionService(
            get_client_directory(),
            local_limit=settings.local_suggestion_limit,
            external_limit=settings.suggestion_limit,
            language=settings.suggestion_language,
        )
    return _suggestion_service
