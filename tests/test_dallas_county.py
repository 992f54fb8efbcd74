import asyncio

from leadverify.jurisdictions.registry import default_registry
from leadverify.models import ScrapeStatus
from leadverify.scrapers.dallas_county import (
    DallasCountyScraper,
    parse_property_details,
    parse_search_results,
    parse_tax_info,
)

SEARCH_HTML = """
<table id="SearchResultsTable">
  <tr><th>Account</th><th>Address</th><th>Owner</th><th>Type</th><th>Value</th></tr>
  <tr>
    <td><a href="AcctDetailRes.aspx?ID=00000776533000000">1500 MARILLA ST</a></td>
    <td>1500 MARILLA ST</td><td>CITY OF DALLAS</td><td>COMMERCIAL</td><td>$1,000</td>
  </tr>
  <tr><td>Showing 1 of 1</td></tr>
</table>
"""

DETAILS_HTML = """
<table id="BuildingDescTable">
  <tr><td>Year Built:</td><td>1958</td></tr>
  <tr><td>Living Area:</td><td>1,420 sqft</td></tr>
  <tr><td># Stories:</td><td>ONE</td></tr>
  <tr><td>Style:</td><td>RANCH</td></tr>
</table>
<table id="LandTableRes">
  <tr><th>#</th><th>Use</th><th>Area</th><th>Value</th></tr>
  <tr><td>1</td><td>SINGLE FAMILY</td><td>7,500</td><td>$60,000</td></tr>
</table>
<table id="OwnerTableResMobile">
  <tr><td>Owner Name:</td><td>SMITH JANE</td></tr>
  <tr><td>Mailing Address:</td><td>PO BOX 9</td></tr>
  <tr><td>City, State, Zip:</td><td>DENVER, CO 80202</td></tr>
</table>
<table id="ValueSummaryTableCurrent">
  <tr><td>Improvement:</td><td>$120,000</td></tr>
  <tr><td>Total Market Value:</td><td>$180,000</td></tr>
</table>
"""

TAX_HTML = """
<table id="TaxYearSummaryTable">
  <tr><td>2022</td><td>Delinquent</td><td>$1,200.00</td></tr>
  <tr><td>2023</td><td>Paid</td><td>$0.00</td></tr>
  <tr><td>Total Due:</td><td>$1,200.00</td></tr>
</table>
<a href="#history">Payment History</a>
"""


def test_parse_search_results_takes_id_from_detail_link() -> None:
    candidates = parse_search_results(SEARCH_HTML)

    assert len(candidates) == 1
    hit = candidates[0]
    assert hit.property_id == "00000776533000000"
    assert hit.jurisdiction_id == "dallas_county"
    assert hit.address == "1500 MARILLA ST"
    assert hit.owner_name == "CITY OF DALLAS"
    assert hit.property_type == "COMMERCIAL"


def test_parse_property_details_joins_mailing_lines() -> None:
    parsed = parse_property_details(DETAILS_HTML)

    assert "address" not in parsed
    assert parsed["owner_name"] == "SMITH JANE"
    assert parsed["owner_mailing_address"] == "PO BOX 9 DENVER, CO 80202"
    assert parsed["property_value"] == 180000.0
    chars = parsed["characteristics"]
    assert chars.year_built == 1958
    assert chars.living_area == "1,420 sqft"
    assert chars.stories == "ONE"
    assert chars.style == "RANCH"
    assert chars.land_area == "7,500"


def test_parse_tax_info_flags_delinquent_years() -> None:
    tax = parse_tax_info(TAX_HTML)

    assert tax.amount_due == 1200.0
    assert tax.delinquent is True
    assert tax.has_payment_history is True


def test_parse_tax_info_current_account() -> None:
    tax = parse_tax_info(
        '<table id="TaxYearSummaryTable"><tr><td>2023</td><td>Paid</td></tr>'
        "<tr><td>Total Due:</td><td>$0.00</td></tr></table>"
    )

    assert tax.amount_due == 0.0
    assert tax.delinquent is False
    assert tax.has_payment_history is False


def test_owner_search_without_name_is_invalid_query() -> None:
    scraper = DallasCountyScraper(default_registry().get("dallas_county"))

    result = asyncio.run(scraper.search_by_owner())

    assert result.status is ScrapeStatus.INVALID_QUERY
