from __future__ import annotations

from typing import Any, Mapping

import httpx

from rotaexpress.core.config import get_settings
from rotaexpress.core.logging import get_logger
from rotaexpress.domain.query import clean_postal_code


_logger = get_logger(__name__)


async def lookup_postal_code(
    postal_code: str,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> str | None:
    """Resolve a CEP to a readable address via ViaCEP, or None."""

    cep = clean_postal_code(postal_code)
    if cep is None:
        return None

    settings = get_settings()
    url = settings.postal_lookup_url.format(cep=cep)

    try:
        async with httpx.AsyncClient(
            timeout=settings.postal_lookup_timeout, transport=transport
        ) as client:
            response = await client.get(url)
            response.raise_for_status()
            data = response.json()
    except (httpx.HTTPError, ValueError) as exc:
        _logger.warning("Postal lookup failed", cep=cep, error=str(exc))
        return None

    if not isinstance(data, Mapping) or data.get("erro"):
        _logger.info("Postal code not found", cep=cep)
        return None

    address = _compose_address(data, settings.postal_country_label)
    _logger.info("Postal lookup success", cep=cep, address=address)
    return address


def _compose_address(data: Mapping[str, Any], country: str) -> str | None:
    parts = [data.get("logradouro"), data.get("localidade"), data.get("uf")]
    cleaned = [str(part).strip() for part in parts if part and str(part).strip()]
    if not cleaned:
        return None
    return ", ".join([*cleaned, country])
