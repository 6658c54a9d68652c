from __future__ import annotations

import pytest

from rotaexpress.domain.geometry import to_polygon
from rotaexpress.domain.zones import DeliveryDay, Zone, ZoneRole


def square(lat: float, lng: float, size: float):
    return to_polygon(
        [
            (lat, lng),
            (lat, lng + size),
            (lat + size, lng + size),
            (lat + size, lng),
        ]
    )


@pytest.fixture
def zones() -> list[Zone]:
    return [
        Zone("segunda", DeliveryDay.MONDAY, "#6366f1", square(0, 0, 2)),
        Zone("terca", DeliveryDay.TUESDAY, "#10b981", square(1, 1, 2)),
        Zone(
            "remote",
            DeliveryDay.REMOTE,
            "#64748b",
            square(-10, -10, 20),
            role=ZoneRole.FALLBACK,
        ),
    ]
