from __future__ import annotations

import pytest

from rotaexpress.core.config import get_settings
from rotaexpress.domain.zones import DeliveryDay
from rotaexpress.services.geocoding import GeocodeResult
from rotaexpress.services.resolver import ZoneResolutionService
from rotaexpress.services.zone_store import ZoneStore


class _Recorder:
    """Stub collaborators that remember every call they receive."""

    def __init__(self, *, normalized=None, postal=None, geocoded=None):
        self.normalized = normalized or {}
        self.postal = postal or {}
        self.geocoded = geocoded or {}
        self.calls: list[tuple[str, str]] = []

    async def normalizer(self, query):
        self.calls.append(("normalize", query))
        return self.normalized.get(query, query)

    async def postal_lookup(self, query):
        self.calls.append(("postal", query))
        return self.postal.get(query)

    async def geocoder(self, query):
        self.calls.append(("geocode", query))
        return self.geocoded.get(query)


def _service(zones, recorder):
    return ZoneResolutionService(
        ZoneStore(zones),
        normalizer=recorder.normalizer,
        postal_lookup=recorder.postal_lookup,
        geocoder=recorder.geocoder,
    )


@pytest.mark.asyncio
async def test_comma_separated_query_skips_normalization(zones):
    query = "Avenida Paulista, 1000, São Paulo"
    recorder = _Recorder(
        geocoded={query: GeocodeResult("Avenida Paulista, Bela Vista", 1.5, 1.5)}
    )

    result = await _service(zones, recorder).resolve(query)

    assert recorder.calls == [("geocode", query)]
    assert result is not None
    assert result.address == "Avenida Paulista, Bela Vista"
    assert result.coordinates == (1.5, 1.5)
    assert [m.zone_id for m in result.matches] == ["segunda", "terca"]


@pytest.mark.asyncio
async def test_free_text_query_is_normalized_before_geocoding(zones):
    recorder = _Recorder(
        normalized={"mercado do silva": "Supermercado Silva, São Paulo, SP"},
        geocoded={
            "Supermercado Silva, São Paulo, SP": GeocodeResult("Silva", 0.5, 0.5)
        },
    )

    result = await _service(zones, recorder).resolve("  mercado do silva ")

    assert recorder.calls == [
        ("normalize", "mercado do silva"),
        ("geocode", "Supermercado Silva, São Paulo, SP"),
    ]
    assert [m.day for m in result.matches] == [DeliveryDay.MONDAY]


@pytest.mark.asyncio
async def test_normalizer_failure_falls_back_to_raw_query(zones):
    async def _broken_normalizer(_query):
        raise RuntimeError("model unavailable")

    recorder = _Recorder(geocoded={"praça da sé": GeocodeResult("Sé", 5.0, 5.0)})
    service = ZoneResolutionService(
        ZoneStore(zones),
        normalizer=_broken_normalizer,
        postal_lookup=recorder.postal_lookup,
        geocoder=recorder.geocoder,
    )

    result = await service.resolve("praça da sé")

    assert recorder.calls == [("geocode", "praça da sé")]
    assert [m.day for m in result.matches] == [DeliveryDay.REMOTE]
    assert result.matches[0].driver_name == "José Roberto"


@pytest.mark.asyncio
async def test_postal_code_resolves_through_postal_lookup(zones):
    address = "Avenida Paulista, São Paulo, SP, Brasil"
    recorder = _Recorder(
        postal={"01310-000": address},
        geocoded={address: GeocodeResult("Avenida Paulista", 0.5, 0.5)},
    )

    result = await _service(zones, recorder).resolve("01310-000")

    assert recorder.calls == [
        ("normalize", "01310-000"),
        ("postal", "01310-000"),
        ("geocode", address),
    ]
    assert result.address == "Avenida Paulista"


@pytest.mark.asyncio
async def test_postal_lookup_miss_geocodes_the_postal_code(zones):
    recorder = _Recorder(
        geocoded={"01310-000": GeocodeResult("01310-000, São Paulo", 0.5, 0.5)}
    )

    result = await _service(zones, recorder).resolve("01310-000")

    assert recorder.calls[-2:] == [("postal", "01310-000"), ("geocode", "01310-000")]
    assert result is not None


@pytest.mark.asyncio
async def test_postal_address_geocoder_miss_retries_with_query(zones):
    recorder = _Recorder(
        postal={"01310000": "Rua Inexistente, São Paulo, SP, Brasil"},
        geocoded={"01310000": GeocodeResult("01310-000, São Paulo", 20.0, 20.0)},
    )

    result = await _service(zones, recorder).resolve("01310000")

    assert recorder.calls[-2:] == [
        ("geocode", "Rua Inexistente, São Paulo, SP, Brasil"),
        ("geocode", "01310000"),
    ]
    assert result.matches == ()
    assert result.out_of_coverage


@pytest.mark.asyncio
async def test_postal_lookup_exception_is_not_fatal(zones):
    async def _broken_postal(_query):
        raise ConnectionError("viacep down")

    recorder = _Recorder(geocoded={"01310-000": GeocodeResult("CEP", 0.5, 0.5)})
    service = ZoneResolutionService(
        ZoneStore(zones),
        normalizer=recorder.normalizer,
        postal_lookup=_broken_postal,
        geocoder=recorder.geocoder,
    )

    result = await service.resolve("01310-000")

    assert result is not None
    assert result.address == "CEP"


@pytest.mark.asyncio
async def test_geocoder_miss_is_not_found(zones):
    recorder = _Recorder()

    assert await _service(zones, recorder).resolve("lugar nenhum") is None


@pytest.mark.asyncio
async def test_blank_query_makes_no_calls(zones):
    recorder = _Recorder()

    assert await _service(zones, recorder).resolve("   ") is None
    assert recorder.calls == []


@pytest.mark.asyncio
async def test_resolution_uses_snapshot_taken_after_edit(zones):
    store = ZoneStore(zones)
    recorder = _Recorder(geocoded={"a, b": GeocodeResult("A", 0.5, 0.5)})
    service = ZoneResolutionService(
        store,
        normalizer=recorder.normalizer,
        postal_lookup=recorder.postal_lookup,
        geocoder=recorder.geocoder,
    )

    store.replace_polygon("segunda", [(50, 50), (50, 51), (51, 51), (51, 50)])
    result = await service.resolve("a, b")

    assert [m.zone_id for m in result.matches] == ["remote"]


@pytest.mark.asyncio
async def test_normalized_postal_code_goes_through_postal_lookup(zones):
    address = "Avenida Paulista, São Paulo, SP, Brasil"
    recorder = _Recorder(
        normalized={"cep da paulista": "01310-000"},
        postal={"01310-000": address},
        geocoded={address: GeocodeResult("Avenida Paulista", 0.5, 0.5)},
    )

    result = await _service(zones, recorder).resolve("cep da paulista")

    assert recorder.calls == [
        ("normalize", "cep da paulista"),
        ("postal", "01310-000"),
        ("geocode", address),
    ]
    assert result.address == "Avenida Paulista"


@pytest.mark.asyncio
async def test_driver_names_default_to_settings(zones, monkeypatch):
    settings = get_settings().model_copy(
        update={"primary_driver_name": "Ana", "fallback_driver_name": "Bruno"}
    )
    monkeypatch.setattr("rotaexpress.services.resolver.get_settings", lambda: settings)
    recorder = _Recorder(
        geocoded={
            "a, b": GeocodeResult("A", 0.5, 0.5),
            "c, d": GeocodeResult("C", 5.0, 5.0),
        }
    )
    service = _service(zones, recorder)

    primary = await service.resolve("a, b")
    remote = await service.resolve("c, d")

    assert [m.driver_name for m in primary.matches] == ["Ana"]
    assert [m.driver_name for m in remote.matches] == ["Bruno"]


@pytest.mark.asyncio
async def test_explicit_driver_names_win(zones):
    recorder = _Recorder(geocoded={"a, b": GeocodeResult("A", 0.5, 0.5)})
    service = ZoneResolutionService(
        ZoneStore(zones),
        normalizer=recorder.normalizer,
        postal_lookup=recorder.postal_lookup,
        geocoder=recorder.geocoder,
        primary_driver="Carla",
    )

    result = await service.resolve("a, b")

    assert [m.driver_name for m in result.matches] == ["Carla"]
