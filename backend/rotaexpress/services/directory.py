from __future__ import annotations

import json
from pathlib import Path
from typing import Iterable, Mapping

from rotaexpress.core.config import get_settings
from rotaexpress.core.logging import get_logger
from rotaexpress.domain.suggestions import ClientRecord


_logger = get_logger(__name__)


class ClientDirectory:
    """Read-only list of known clients, kept in configuration order."""

    def __init__(self, records: Iterable[ClientRecord]) -> None:
        self._records = tuple(records)

    @classmethod
    def from_file(cls, path: Path) -> "ClientDirectory":
        payload = json.loads(path.read_text(encoding="utf-8"))
        entries = payload.get("clients", []) if isinstance(payload, Mapping) else payload
        records = [
            ClientRecord(
                id=str(entry["id"]),
                name=str(entry["name"]),
                address=str(entry["address"]),
            )
            for entry in entries
        ]
        _logger.info("Client directory loaded", path=str(path), total=len(records))
        return cls(records)

    def search(self, needle: str, limit: int) -> list[ClientRecord]:
        matches: list[ClientRecord] = []
        for record in self._records:
            if len(matches) >= limit:
                break
            if record.matches(needle):
                matches.append(record)
        return matches


_directory: ClientDirectory | None = None


def get_client_directory() -> ClientDirectory:
    global _directory
    if _directory is None:
        _directory = ClientDirectory.from_file(get_settings().clients_path)
    return _directory
