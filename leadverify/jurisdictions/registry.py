"""
Static table of supported jurisdictions.

Registration order is significant: the resolver returns the first match.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from leadverify.models import JurisdictionSummary

DEFAULT_RULE_SET = "default"
TEXAS_CAD_RULE_SET = "texas_cad"


@dataclass(frozen=True, slots=True)
class Jurisdiction:
    id: str
    name: str
    state: str
    cities: tuple[str, ...]
    zip_prefixes: tuple[str, ...]
    available: bool = False
    pro_only: bool = False
    coming_soon: bool = False
    base_url: str | None = None
    property_search_url: str | None = None
    tax_search_url: str | None = None
    rule_set: str = DEFAULT_RULE_SET

    def summary(self) -> JurisdictionSummary:
        return JurisdictionSummary(
            id=self.id,
            name=self.name,
            state=self.state,
            cities=list(self.cities),
            zip_prefixes=list(self.zip_prefixes),
            available=self.available,
            pro_only=self.pro_only,
            coming_soon=self.coming_soon,
            base_url=self.base_url,
            property_search_url=self.property_search_url,
        )


DEFAULT_JURISDICTIONS: tuple[Jurisdiction, ...] = (
    # Texas
    Jurisdiction(
        id="harris_county",
        name="Harris County",
        state="TX",
        cities=("Houston",),
        zip_prefixes=("77",),
        available=True,
        base_url="https://hcad.org",
        property_search_url="https://public.hcad.org/records/Real.asp",
        tax_search_url="https://www.hctax.net/Property/PropertyTax",
        rule_set=TEXAS_CAD_RULE_SET,
    ),
    Jurisdiction(
        id="dallas_county",
        name="Dallas County",
        state="TX",
        cities=("Dallas",),
        zip_prefixes=("75",),
        available=True,
        base_url="https://www.dallascad.org",
        property_search_url="https://www.dallascad.org/SearchOwner.aspx",
        tax_search_url="https://www.dallaspropertytax.org/TaxInquirySearch.aspx",
        rule_set=TEXAS_CAD_RULE_SET,
    ),
    # California
    Jurisdiction(
        id="los_angeles_county",
        name="Los Angeles County",
        state="CA",
        cities=("Los Angeles", "Long Beach", "Glendale", "Santa Clarita", "Pasadena"),
        zip_prefixes=("900", "901", "902", "903", "904", "905", "906", "907", "908"),
        pro_only=True,
        coming_soon=True,
        base_url="https://assessor.lacounty.gov",
        property_search_url="https://assessor.lacounty.gov/online-property-search",
    ),
    Jurisdiction(
        id="san_diego_county",
        name="San Diego County",
        state="CA",
        cities=("San Diego", "Chula Vista", "Oceanside", "Escondido", "Carlsbad"),
        zip_prefixes=("919", "920", "921", "922"),
        pro_only=True,
        coming_soon=True,
        base_url="https://www.sandiegocounty.gov/content/sdc/ttc/tax-collection.html",
        property_search_url="https://www.sdttc.com/content/ttc/en/tax-collection/secured-property-taxes/parcel-search.html",
    ),
    # Florida
    Jurisdiction(
        id="miami_dade_county",
        name="Miami-Dade County",
        state="FL",
        cities=("Miami", "Hialeah", "Miami Beach", "Homestead"),
        zip_prefixes=("331", "332", "333", "334"),
        pro_only=True,
        coming_soon=True,
        base_url="https://www.miamidade.gov/pa/",
        property_search_url="https://www.miamidade.gov/Apps/PA/propertysearch/",
    ),
    # Illinois
    Jurisdiction(
        id="cook_county",
        name="Cook County",
        state="IL",
        cities=("Chicago", "Evanston", "Schaumburg", "Skokie"),
        zip_prefixes=("606", "607", "608"),
        pro_only=True,
        coming_soon=True,
        base_url="https://www.cookcountyassessor.com",
        property_search_url="https://www.cookcountyassessor.com/address-search",
    ),
    # New York
    Jurisdiction(
        id="new_york_county",
        name="New York County",
        state="NY",
        cities=("New York", "Manhattan"),
        zip_prefixes=("100", "101", "102"),
        pro_only=True,
        coming_soon=True,
        base_url="https://www.nyc.gov/site/finance/taxes/property.page",
        property_search_url="https://a836-pts-access.nyc.gov/care/search/commonsearch.aspx?mode=persprop",
    ),
    # Washington
    Jurisdiction(
        id="king_county",
        name="King County",
        state="WA",
        cities=("Seattle", "Bellevue", "Kent", "Renton"),
        zip_prefixes=("980", "981", "982"),
        pro_only=True,
        coming_soon=True,
        base_url="https://kingcounty.gov/depts/assessor.aspx",
        property_search_url="https://blue.kingcounty.com/Assessor/eRealProperty/default.aspx",
    ),
    # Arizona
    Jurisdiction(
        id="maricopa_county",
        name="Maricopa County",
        state="AZ",
        cities=("Phoenix", "Mesa", "Chandler", "Scottsdale", "Gilbert", "Glendale", "Tempe"),
        zip_prefixes=("850", "851", "852", "853"),
        pro_only=True,
        coming_soon=True,
        base_url="https://mcassessor.maricopa.gov",
        property_search_url="https://mcassessor.maricopa.gov/property-search/",
    ),
    # Nevada
    Jurisdiction(
        id="clark_county",
        name="Clark County",
        state="NV",
        cities=("Las Vegas", "Henderson", "North Las Vegas"),
        zip_prefixes=("889", "890", "891"),
        pro_only=True,
        coming_soon=True,
        base_url="https://www.clarkcountynv.gov/assessor",
        property_search_url="https://www.clarkcountynv.gov/assessor/Pages/PropertyRecords.aspx",
    ),
    # Colorado
    Jurisdiction(
        id="denver_county",
        name="Denver County",
        state="CO",
        cities=("Denver",),
        zip_prefixes=("802",),
        pro_only=True,
        coming_soon=True,
        base_url="https://www.denvergov.org/assessor",
        property_search_url="https://www.denvergov.org/property",
    ),
)


class JurisdictionRegistry:
    """Read-only, registration-ordered lookup over jurisdictions."""

    def __init__(self, jurisdictions: Iterable[Jurisdiction] = DEFAULT_JURISDICTIONS) -> None:
        ordered = tuple(jurisdictions)
        ids = [j.id for j in ordered]
        if len(ids) != len(set(ids)):
            raise ValueError(f"Duplicate jurisdiction ids: {ids}")
        self._ordered = ordered
        self._by_id = {j.id: j for j in ordered}

    def __iter__(self):
        return iter(self._ordered)

    def __len__(self) -> int:
        return len(self._ordered)

    def __contains__(self, jurisdiction_id: object) -> bool:
        return jurisdiction_id in self._by_id

    def get(self, jurisdiction_id: str | None) -> Jurisdiction | None:
        if not jurisdiction_id:
            return None
        return self._by_id.get(jurisdiction_id)

    def available(self) -> list[Jurisdiction]:
        return [j for j in self._ordered if j.available]

    def coming_soon(self) -> list[Jurisdiction]:
        return [j for j in self._ordered if j.coming_soon]

    def counties(self, include_coming: bool = False) -> list[JurisdictionSummary]:
        selected = self.available()
        if include_coming:
            selected += [j for j in self.coming_soon() if not j.available]
        return [j.summary() for j in selected]

    def counties_by_state(self) -> dict[str, list[JurisdictionSummary]]:
        grouped: dict[str, list[JurisdictionSummary]] = {}
        for jurisdiction in self._ordered:
            grouped.setdefault(jurisdiction.state, []).append(jurisdiction.summary())
        return grouped


_DEFAULT_REGISTRY: JurisdictionRegistry | None = None


def default_registry() -> JurisdictionRegistry:
    global _DEFAULT_REGISTRY
    if _DEFAULT_REGISTRY is None:
        _DEFAULT_REGISTRY = JurisdictionRegistry()
    return _DEFAULT_REGISTRY
