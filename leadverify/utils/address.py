"""Address, owner-name and money normalization for record matching."""

from __future__ import annotations

import re

_STREET_SUFFIX_MAP = {
    "STREET": "ST", "AVENUE": "AVE", "DRIVE": "DR", "BOULEVARD": "BLVD",
    "ROAD": "RD", "LANE": "LN", "COURT": "CT", "CIRCLE": "CIR",
    "PLACE": "PL", "TRAIL": "TRL", "TERRACE": "TER", "PARKWAY": "PKWY",
    "HIGHWAY": "HWY", "EXPRESSWAY": "EXPY", "FREEWAY": "FWY",
}
_DIRECTIONAL_MAP = {
    "NORTH": "N", "SOUTH": "S", "EAST": "E", "WEST": "W",
    "NORTHEAST": "NE", "NORTHWEST": "NW", "SOUTHEAST": "SE", "SOUTHWEST": "SW",
}
_NAME_NOISE = (
    "/TRUSTEE", "/TR", " ET AL", " ET UX", " ET VIR",
    " A/K/A", " F/K/A", " N/K/A", " D/B/A",
    " AS TRUSTEE", " LLC", " INC", " CORP", " LP", " LLP",
    " TRUST", " REVOCABLE", " IRREVOCABLE", " LIVING",
)
_NAME_FILLER = {"AND", "THE", "FOR", "MR", "MRS", "MS", "JR", "SR"}


def normalize_address(addr: str | None) -> str:
    """Uppercase, strip punctuation, collapse whitespace, and canonicalize
    street suffixes (STREET→ST) and directionals (WEST→W).

    City/state/zip are kept so the result can be compared against a full
    mailing address by containment.
    """
    if not addr:
        return ""
    text = addr.strip().upper()
    text = re.sub(r"[.,#]", " ", text)
    words = text.split()
    return " ".join(_STREET_SUFFIX_MAP.get(w, _DIRECTIONAL_MAP.get(w, w)) for w in words)


def street_line(addr: str | None) -> str:
    """Return the normalized street portion (text before the first comma)."""
    if not addr:
        return ""
    return normalize_address(addr.split(",")[0])


def address_contains(haystack: str | None, needle: str | None) -> bool:
    """True when the normalized street of ``needle`` appears in ``haystack``."""
    target = street_line(needle)
    if not target:
        return False
    return target in normalize_address(haystack)


def extract_street_number(address: str | None) -> str:
    if not address:
        return ""
    match = re.match(r"^\s*(\d+)", address)
    return match.group(1) if match else ""


def extract_street_name(address: str | None) -> str:
    if not address:
        return ""
    match = re.match(r"^\s*\d+\s+(.*?)(?:,|$)", address)
    return match.group(1).strip() if match else ""


def normalize_name(name: str | None) -> set[str]:
    """Normalize a person/entity name to a set of significant words."""
    if not name:
        return set()
    upper = name.upper()
    for noise in _NAME_NOISE:
        upper = upper.replace(noise, "")
    return {w for w in re.split(r"[^A-Z0-9]+", upper) if len(w) >= 2 and w not in _NAME_FILLER}


def owner_matches(lead_owner: str | None, record_owner: str | None) -> bool:
    """Case-insensitive containment, tolerant of "LAST FIRST" ordering."""
    if not lead_owner or not record_owner:
        return False
    if lead_owner.strip().lower() in record_owner.lower():
        return True
    wanted = normalize_name(lead_owner)
    return bool(wanted) and wanted <= normalize_name(record_owner)


def parse_money(value: str | float | int | None) -> float | None:
    """Parse "$1,234.56" style amounts; ``None`` when unparseable."""
    if value is None:
        return None
    if isinstance(value, (int, float)):
        return float(value)
    cleaned = re.sub(r"[$,\s]", "", value)
    if cleaned.startswith("(") and cleaned.endswith(")"):
        cleaned = "-" + cleaned[1:-1]
    try:
        return float(cleaned)
    except ValueError:
        return None


def parse_int(value: str | int | None) -> int | None:
    """Parse the leading integer of a value such as "1,850 SF" or "1965"."""
    if value is None:
        return None
    if isinstance(value, int):
        return value
    match = re.search(r"-?\d[\d,]*", value)
    if not match:
        return None
    return int(match.group(0).replace(",", ""))
