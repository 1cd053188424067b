"""Pure normalization helpers for upstream transaction fields.

Every function here is total: malformed input yields ``None`` (or the input
unchanged, where noted) instead of raising.
"""

from __future__ import annotations

import re
from datetime import date, datetime, timedelta
from typing import Final

_NAME_PUNCTUATION = re.compile(r"[,.;:]")
_WHITESPACE = re.compile(r"\s+")
_TRAILING_PUNCTUATION = re.compile(r"[,.;]+$")
_US_DATE = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4})$")
_SERIAL_NUMBER = re.compile(r"^\d+(\.\d+)?$")
_STREET_NUMBER = re.compile(r"^\d+")
_ZIP_CODE = re.compile(r"^(\d{5})(?:-?\d{4})?$")

SERIAL_DATE_EPOCH: Final[date] = date(1899, 12, 30)
_SERIAL_MAX: Final[int] = 100_000
_SERIAL_YEAR_RANGE: Final[range] = range(1900, 2101)

_BUSINESS_SUFFIXES: Final[dict[str, str]] = {
    "LLC": "LLC",
    "LLP": "LLP",
    "PLLC": "PLLC",
    "LC": "LC",
    "PC": "PC",
    "P.C": "PC",
    "LP": "LP",
    "GP": "GP",
    "INC": "Inc",
    "INCORPORATED": "Inc",
    "CORP": "Corp",
    "CORPORATION": "Corp",
}

STREET_TYPE_ABBREVIATIONS: Final[dict[str, str]] = {
    "avenue": "Ave",
    "av": "Ave",
    "ave": "Ave",
    "avn": "Ave",
    "avnue": "Ave",
    "boulevard": "Blvd",
    "blvd": "Blvd",
    "boul": "Blvd",
    "boulv": "Blvd",
    "circle": "Cir",
    "cir": "Cir",
    "circ": "Cir",
    "crcl": "Cir",
    "court": "Ct",
    "ct": "Ct",
    "crt": "Ct",
    "drive": "Dr",
    "dr": "Dr",
    "drv": "Dr",
    "lane": "Ln",
    "ln": "Ln",
    "parkway": "Pkwy",
    "pkwy": "Pkwy",
    "parkwy": "Pkwy",
    "place": "Pl",
    "pl": "Pl",
    "plz": "Pl",
    "road": "Rd",
    "rd": "Rd",
    "street": "St",
    "st": "St",
    "str": "St",
    "strt": "St",
    "suite": "Ste",
    "ste": "Ste",
    "unit": "Unit",
    "way": "Way",
    "wy": "Way",
}

# ordered: first substring hit wins
_PROPERTY_TYPE_BUCKETS: Final[tuple[tuple[tuple[str, ...], str], ...]] = (
    (("condominium",), "Condominium"),
    (("duplex",), "Duplex"),
    (("triplex",), "Triplex"),
    (("fourplex",), "Fourplex"),
    (("townhome", "townhouse", "town home", "town house"), "Townhouse"),
    (("vacant land", "vacant lot"), "Vacant Land"),
)


def _clean_text(raw: object) -> str | None:
    if not isinstance(raw, str):
        return None
    stripped = raw.strip()
    return stripped or None


def _capitalize(word: str) -> str:
    return word[:1].upper() + word[1:].lower()


# Entity names -----------------------------------------------------------------


def canonicalize_name(raw: object) -> str | None:
    """Comparison key for an entity name.

    ``"Grandfield Properties, LLC."`` and ``"grandfield properties llc"`` share a key.
    """
    text = _clean_text(raw)
    if text is None:
        return None
    key = _WHITESPACE.sub(" ", _NAME_PUNCTUATION.sub("", text)).strip().lower()
    return key or None


def title_case_for_storage(raw: object) -> str | None:
    """Display form for an entity name with fixed casing for business suffixes."""
    text = _clean_text(raw)
    if text is None:
        return None
    words: list[str] = []
    for word in _WHITESPACE.split(text):
        cleaned = _TRAILING_PUNCTUATION.sub("", word)
        if not cleaned:
            continue
        suffix = _BUSINESS_SUFFIXES.get(cleaned.upper())
        words.append(suffix if suffix is not None else _capitalize(cleaned))
    result = _TRAILING_PUNCTUATION.sub("", " ".join(words)).strip()
    return result or None


# Dates ------------------------------------------------------------------------


def parse_flexible_date(raw: object) -> date | None:
    """Parse the date shapes the provider is known to emit.

    Accepts ``date``/``datetime`` values, ISO dates and datetimes (a trailing
    ``Z`` included), ``MM/DD/YYYY`` and spreadsheet serial day numbers counted
    from 1899-12-30.
    """
    if isinstance(raw, datetime):
        return raw.date()
    if isinstance(raw, date):
        return raw
    if isinstance(raw, bool):
        return None
    if isinstance(raw, int | float):
        return _parse_serial(float(raw))

    text = _clean_text(raw)
    if text is None:
        return None

    if _SERIAL_NUMBER.match(text):
        return _parse_serial(float(text))

    us_match = _US_DATE.match(text)
    if us_match is not None:
        month, day, year = (int(part) for part in us_match.groups())
        try:
            return date(year, month, day)
        except ValueError:
            return None

    iso_text = text[:-1] + "+00:00" if text.endswith(("Z", "z")) else text
    try:
        return datetime.fromisoformat(iso_text).date()
    except ValueError:
        pass
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        return None


def _parse_serial(value: float) -> date | None:
    if not 0 < value < _SERIAL_MAX:
        return None
    parsed = SERIAL_DATE_EPOCH + timedelta(days=int(value))
    if parsed.year not in _SERIAL_YEAR_RANGE:
        return None
    return parsed


# Locations --------------------------------------------------------------------


def normalize_address(raw: object) -> str | None:
    """Title-case a street address, keeping the street number and abbreviating its type."""
    text = _clean_text(raw)
    if text is None:
        return None
    parts = _WHITESPACE.split(text)
    number: str | None = None
    if _STREET_NUMBER.match(parts[0]):
        number = parts[0]
        parts = parts[1:]

    street: list[str] = []
    for index, word in enumerate(parts):
        abbreviation = STREET_TYPE_ABBREVIATIONS.get(word.lower())
        if index == len(parts) - 1 and abbreviation is not None:
            street.append(abbreviation)
        else:
            street.append(_capitalize(word))

    return " ".join(part for part in (number, " ".join(street)) if part) or None


def normalize_county_name(raw: object) -> str | None:
    """``"San Diego County, California"`` -> ``"San Diego"``."""
    text = _clean_text(raw)
    if text is None:
        return None
    county = text.split(",", 1)[0].strip()
    if county.lower().endswith(" county"):
        county = county[: -len(" county")].strip()
    return county or None


def normalize_zip_code(raw: object) -> str | None:
    if isinstance(raw, int) and not isinstance(raw, bool):
        raw = f"{raw:05d}"
    text = _clean_text(raw)
    if text is None:
        return None
    match = _ZIP_CODE.match(text)
    return match.group(1) if match else None


def normalize_property_type(raw: object) -> str | None:
    """Collapse provider property types into the buckets the store filters on.

    Unrecognised types are returned trimmed but otherwise unchanged.
    """
    text = _clean_text(raw)
    if text is None:
        return None
    lowered = text.lower()
    for needles, bucket in _PROPERTY_TYPE_BUCKETS:
        if any(needle in lowered for needle in needles):
            return bucket
    if "vacant" in lowered and "non-vacant" not in lowered:
        return "Vacant Land"
    return text


def address_key(
    address: object,
    city: object,
    state: object,
    zip_code: object = None,
) -> str | None:
    """Normalized identity of a street location; ``None`` without address, city and state."""
    street = normalize_address(address)
    city_text = _clean_text(city)
    state_text = _clean_text(state)
    if street is None or city_text is None or state_text is None:
        return None
    parts = [
        street.lower(),
        _WHITESPACE.sub(" ", city_text).lower(),
        state_text.upper(),
        normalize_zip_code(zip_code) or "",
    ]
    return "|".join(parts)


__all__ = [
    "SERIAL_DATE_EPOCH",
    "STREET_TYPE_ABBREVIATIONS",
    "address_key",
    "canonicalize_name",
    "normalize_address",
    "normalize_county_name",
    "normalize_property_type",
    "normalize_zip_code",
    "parse_flexible_date",
    "title_case_for_storage",
]
