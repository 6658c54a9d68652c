from __future__ import annotations

from typing import Any, Iterable, Mapping, NamedTuple, Sequence


class Vertex(NamedTuple):
    """A polygon vertex in decimal degrees."""

    lat: float
    lng: float


Point = tuple[float, float]


def to_vertex(value: Any) -> Vertex:
    """
    Adapt an externally supplied polygon point to a Vertex.

    Accepts an ordered ``(lat, lng)`` pair, a mapping with ``lat``/``lng``
    keys, or any object exposing ``lat``/``lng`` attributes.
    """
    if isinstance(value, Vertex):
        return value
    if isinstance(value, Mapping):
        if "lat" not in value or "lng" not in value:
            raise ValueError(f"Polygon point needs lat and lng: {value!r}")
        return _coerce(value, value["lat"], value["lng"])
    if isinstance(value, Sequence) and not isinstance(value, (str, bytes)):
        if len(value) != 2:
            raise ValueError(
                f"Polygon point pairs need exactly 2 values, got {len(value)}"
            )
        return _coerce(value, value[0], value[1])
    if hasattr(value, "lat") and hasattr(value, "lng"):
        return _coerce(value, value.lat, value.lng)
    raise ValueError(f"Unsupported polygon point: {value!r}")


def _coerce(value: Any, lat: Any, lng: Any) -> Vertex:
    try:
        return Vertex(float(lat), float(lng))
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Unsupported polygon point: {value!r}") from exc


def to_polygon(points: Iterable[Any]) -> tuple[Vertex, ...]:
    return tuple(to_vertex(point) for point in points)


def contains(point: Point, polygon: Sequence[Vertex]) -> bool:
    """
    Ray-casting (even-odd) point-in-polygon test.

    The ring is closed implicitly from the last vertex back to the first.
    Polygons with fewer than three vertices never contain a point. Points
    lying exactly on an edge may fall on either side.
    """
    if len(polygon) < 3:
        return False

    lat, lng = point
    inside = False
    j = len(polygon) - 1
    for i in range(len(polygon)):
        xi, yi = polygon[i]
        xj, yj = polygon[j]
        # The straddle test guarantees yi != yj before the division runs.
        if (yi > lng) != (yj > lng) and lat < (xj - xi) * (lng - yi) / (yj - yi) + xi:
            inside = not inside
        j = i
    return inside
