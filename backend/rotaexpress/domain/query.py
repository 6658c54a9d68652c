from __future__ import annotations

import re


# Brazilian CEP: 5 digits, optional hyphen, 3 digits.
_POSTAL_CODE_PATTERN = re.compile(r"^[0-9]{5}-?[0-9]{3}$")
_POSTAL_CODE_DIGITS = 8
_ADDRESS_SEPARATOR = ","


def is_postal_code(query: str) -> bool:
    return bool(_POSTAL_CODE_PATTERN.fullmatch(query.strip()))


def clean_postal_code(query: str) -> str | None:
    """Strip everything but digits; return None unless a full CEP remains."""
    digits = re.sub(r"[^0-9]", "", query)
    if len(digits) != _POSTAL_CODE_DIGITS:
        return None
    return digits


def looks_like_address(query: str) -> bool:
    """Comma separated queries are treated as already fully qualified."""
    return _ADDRESS_SEPARATOR in query
