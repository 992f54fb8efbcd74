"""Map a raw lead address to a registered jurisdiction id."""

from __future__ import annotations

from leadverify.jurisdictions.registry import JurisdictionRegistry, default_registry

US_STATES: dict[str, str] = {
    "alabama": "al", "alaska": "ak", "arizona": "az", "arkansas": "ar",
    "california": "ca", "colorado": "co", "connecticut": "ct", "delaware": "de",
    "district of columbia": "dc", "florida": "fl", "georgia": "ga", "hawaii": "hi",
    "idaho": "id", "illinois": "il", "indiana": "in", "iowa": "ia",
    "kansas": "ks", "kentucky": "ky", "louisiana": "la", "maine": "me",
    "maryland": "md", "massachusetts": "ma", "michigan": "mi", "minnesota": "mn",
    "mississippi": "ms", "missouri": "mo", "montana": "mt", "nebraska": "ne",
    "nevada": "nv", "new hampshire": "nh", "new jersey": "nj", "new mexico": "nm",
    "new york": "ny", "north carolina": "nc", "north dakota": "nd", "ohio": "oh",
    "oklahoma": "ok", "oregon": "or", "pennsylvania": "pa", "rhode island": "ri",
    "south carolina": "sc", "south dakota": "sd", "tennessee": "tn", "texas": "tx",
    "utah": "ut", "vermont": "vt", "virginia": "va", "washington": "wa",
    "west virginia": "wv", "wisconsin": "wi", "wyoming": "wy",
}
STATE_NAMES: dict[str, str] = {abbr: name for name, abbr in US_STATES.items()}


def normalize_state(state: str | None) -> str:
    """Lowercase two-letter abbreviation for a state name or abbreviation."""
    if not state:
        return ""
    key = " ".join(state.replace(".", " ").split()).lower()
    return US_STATES.get(key, key)


def _normalize_city(city: str | None) -> str:
    if not city:
        return ""
    return " ".join(city.split()).lower()


class JurisdictionResolver:
    def __init__(self, registry: JurisdictionRegistry | None = None) -> None:
        self.registry = registry or default_registry()

    def resolve(
        self,
        address: str | None = None,
        city: str | None = None,
        state: str | None = None,
        zip_code: str | None = None,
    ) -> str | None:
        """Return the first jurisdiction matching by state+city, then by ZIP prefix.

        ``address`` is accepted for interface symmetry; only city/state/zip
        participate in matching.
        """
        state_key = normalize_state(state)
        city_key = _normalize_city(city)

        if state_key and city_key:
            for jurisdiction in self.registry:
                if normalize_state(jurisdiction.state) != state_key:
                    continue
                if any(c.lower() in city_key for c in jurisdiction.cities):
                    return jurisdiction.id

        zip_key = (zip_code or "").strip()
        if zip_key:
            for jurisdiction in self.registry:
                if any(zip_key.startswith(prefix) for prefix in jurisdiction.zip_prefixes):
                    return jurisdiction.id

        return None


def resolve(
    address: str | None = None,
    city: str | None = None,
    state: str | None = None,
    zip_code: str | None = None,
) -> str | None:
    return JurisdictionResolver().resolve(address, city, state, zip_code)
