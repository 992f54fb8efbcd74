"""
Harris County Appraisal District (HCAD) property search and Harris County
Tax Office status lookup.
"""

from __future__ import annotations

import asyncio
import re
from typing import Any

from bs4 import BeautifulSoup
from loguru import logger
from playwright.async_api import BrowserContext
from playwright.async_api import Error as PlaywrightError

from leadverify.models import (
    PropertyCandidate,
    PropertyCharacteristics,
    PropertyRecord,
    ScrapeResult,
    ScrapeStatus,
    TaxStatus,
)
from leadverify.scrapers.base import (
    CountyScraper,
    clean_text,
    details_boundary,
    is_likely_vacant,
    label_value_pairs,
    leaf_rows,
    row_value,
    search_boundary,
)
from leadverify.utils.address import extract_street_name, extract_street_number, parse_int, parse_money
from leadverify.utils.logging_utils import Timer, log_search
from leadverify.utils.time import parse_date

JURISDICTION_ID = "harris_county"
DETAILS_URL = "https://public.hcad.org/records/details.asp?crypt=%93CRP%94&acct={account}"


def parse_search_results(html: str, jurisdiction_id: str = JURISDICTION_ID) -> list[PropertyCandidate]:
    """Result grid: account, address, owner, legal, valuation (header row skipped)."""
    soup = BeautifulSoup(html, "html.parser")
    candidates = []
    for index, row in enumerate(leaf_rows(soup)):
        if index == 0:
            continue
        cells = row.find_all("td")
        if len(cells) < 5:
            continue
        account = clean_text(cells[0])
        if not account:
            continue
        candidates.append(
            PropertyCandidate(
                jurisdiction_id=jurisdiction_id,
                property_id=account,
                address=clean_text(cells[1]) or None,
                owner_name=clean_text(cells[2]) or None,
                legal=clean_text(cells[3]) or None,
                value=clean_text(cells[4]) or None,
            )
        )
    return candidates


def parse_property_details(html: str) -> dict[str, Any]:
    soup = BeautifulSoup(html, "html.parser")
    rows = leaf_rows(soup)

    characteristics: dict[str, Any] = {}
    for label, value in label_value_pairs(rows):
        if "Land Area" in label:
            characteristics["land_area"] = value
        elif "Building Area" in label:
            characteristics["building_area"] = value
        elif "Year Built" in label:
            characteristics["year_built"] = parse_int(value)
        elif "State Class" in label:
            characteristics["state_class"] = value

    return {
        "address": row_value(rows, "Property Address:"),
        "property_value": parse_money(row_value(rows, "Appraised Value:")),
        "owner_name": row_value(rows, "Owner:") or None,
        "owner_mailing_address": row_value(rows, "Mailing Address:") or None,
        "characteristics": PropertyCharacteristics(**characteristics),
    }


def parse_tax_info(html: str) -> TaxStatus:
    soup = BeautifulSoup(html, "html.parser")
    rows = leaf_rows(soup)
    delinquent = row_value(rows, "Delinquent:")
    return TaxStatus(
        amount_due=parse_money(row_value(rows, "Total Amount Due:")),
        delinquent=(delinquent or "").strip().lower() == "yes",
        last_payment_date=parse_date(row_value(rows, "Last Payment Date:")),
    )


class HarrisCountyScraper(CountyScraper):
    @search_boundary
    async def search_by_address(
        self, address: str, city: str | None = None, zip_code: str | None = None
    ) -> ScrapeResult:
        street_number = extract_street_number(address)
        street_name = extract_street_name(address)
        if not street_number and not street_name:
            return ScrapeResult(
                status=ScrapeStatus.INVALID_QUERY,
                source_name=self.source_name,
                message=f"Cannot split street number/name from {address!r}",
            )

        with Timer() as timer:
            async with self.browser_session() as context:
                page = await context.new_page()
                await page.goto(self.jurisdiction.property_search_url, wait_until="networkidle")
                await page.fill('input[name="stnum"]', street_number)
                await page.fill('input[name="stname"]', street_name)
                if city:
                    await page.fill('input[name="city"]', city)
                if zip_code:
                    await page.fill('input[name="zip"]', zip_code)
                async with page.expect_navigation(wait_until="networkidle"):
                    await page.click('input[type="submit"]')
                html = await page.content()

        candidates = parse_search_results(html, self.jurisdiction.id)
        log_search(self.source_name, "address", address, candidates=len(candidates), duration_ms=timer.elapsed_ms)
        return ScrapeResult.found(self.source_name, candidates)

    @search_boundary
    async def search_by_owner(
        self, owner_name: str | None = None, *, first: str | None = None, last: str | None = None
    ) -> ScrapeResult:
        # HCAD's public real-property form is address/account keyed only
        logger.info("Owner search not offered by {source}", source=self.source_name)
        return ScrapeResult(
            status=ScrapeStatus.NO_RESULTS,
            source_name=self.source_name,
            message="Owner search not offered by HCAD public records",
        )

    @details_boundary
    async def get_property_details(
        self, property_id: str, *, address_hint: str | None = None
    ) -> PropertyRecord:
        with Timer() as timer:
            async with self.browser_session() as context:
                details_html, tax = await asyncio.gather(
                    self._fetch_details_html(context, property_id),
                    self._fetch_tax_status(context, property_id),
                )

        parsed = parse_property_details(details_html)
        address = parsed.pop("address") or address_hint
        logger.info(
            "{source} details for {property_id} loaded in {ms:.0f} ms",
            source=self.source_name, property_id=property_id, ms=timer.elapsed_ms,
        )
        return PropertyRecord(
            jurisdiction_id=self.jurisdiction.id,
            property_id=property_id,
            address=address,
            tax=tax,
            vacant=is_likely_vacant(address, parsed["owner_mailing_address"]),
            source_url=DETAILS_URL.format(account=property_id),
            **parsed,
        )

    async def _fetch_details_html(self, context: BrowserContext, account: str) -> str:
        page = await context.new_page()
        await page.goto(DETAILS_URL.format(account=account), wait_until="networkidle")
        return await page.content()

    async def _fetch_tax_status(self, context: BrowserContext, account: str) -> TaxStatus:
        """Tax failures stay inside the tax block; the property record survives."""
        try:
            page = await context.new_page()
            await page.goto(self.jurisdiction.tax_search_url, wait_until="networkidle")
            await page.fill("input#propertyID", account)
            async with page.expect_navigation(wait_until="networkidle"):
                await page.click('input[type="submit"]')
            return parse_tax_info(await page.content())
        except PlaywrightError as exc:
            logger.warning("Tax lookup failed for {account}: {error}", account=account, error=str(exc))
            return TaxStatus(error=re.sub(r"\s+", " ", str(exc))[:500])
