from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field, field_validator

from rotaexpress.domain.suggestions import SuggestionItem
from rotaexpress.domain.zones import Match, SearchResult


class SearchRequest(BaseModel):
    query: str = Field(..., min_length=1)

    @field_validator("query", mode="before")
    def _strip_query(cls, value: str) -> str:
        if isinstance(value, str):
            return value.strip()
        return value


class DeliveryMatch(BaseModel):
    zone_id: str
    day: str
    driver_name: str
    color: str

    @classmethod
    def from_match(cls, match: Match) -> "DeliveryMatch":
        return cls(
            zone_id=match.zone_id,
            day=match.day.value,
            driver_name=match.driver_name,
            color=match.color,
        )


class SearchResponse(BaseModel):
    address: str
    latitude: float
    longitude: float
    matches: list[DeliveryMatch] = Field(default_factory=list)
    out_of_coverage: bool = False

    @classmethod
    def from_result(cls, result: SearchResult) -> "SearchResponse":
        latitude, longitude = result.coordinates
        return cls(
            address=result.address,
            latitude=latitude,
            longitude=longitude,
            matches=[DeliveryMatch.from_match(match) for match in result.matches],
            out_of_coverage=result.out_of_coverage,
        )


class Suggestion(BaseModel):
    label: str
    value: str
    kind: Literal["client", "address"]

    @classmethod
    def from_item(cls, item: SuggestionItem) -> "Suggestion":
        return cls(label=item.label, value=item.value, kind=item.kind)


class SuggestionListResponse(BaseModel):
    suggestions: list[Suggestion] = Field(default_factory=list)
