from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Mapping


SuggestionKind = Literal["client", "address"]

_MIN_ADDRESS_LABEL_LENGTH = 6


@dataclass(frozen=True, slots=True)
class ClientRecord:
    id: str
    name: str
    address: str

    def matches(self, needle: str) -> bool:
        """Case-insensitive substring match on name or address."""
        needle = needle.lower()
        return needle in self.name.lower() or needle in self.address.lower()


@dataclass(frozen=True, slots=True)
class SuggestionItem:
    label: str
    value: str
    kind: SuggestionKind


def client_suggestion(record: ClientRecord) -> SuggestionItem:
    return SuggestionItem(
        label=f"{record.name} - {record.address}",
        value=record.address,
        kind="client",
    )


def compose_address_label(properties: Mapping[str, object]) -> str:
    """
    Join the displayable parts of a structured address candidate.

    The candidate name is only kept when it differs from the street, so
    that street features are not listed twice.
    """
    name = properties.get("name")
    street = properties.get("street")
    parts = [
        name if name != street else None,
        street,
        properties.get("housenumber"),
        properties.get("district"),
        properties.get("city"),
        properties.get("state"),
    ]
    return ", ".join(
        str(part).strip() for part in parts if part is not None and str(part).strip()
    )


def address_suggestion(properties: Mapping[str, object]) -> SuggestionItem | None:
    label = compose_address_label(properties)
    if len(label) < _MIN_ADDRESS_LABEL_LENGTH:
        return None
    return SuggestionItem(label=label, value=label, kind="address")
