"""Dallas Central Appraisal District (DCAD) search/detail pages and the
Dallas County tax inquiry."""

from __future__ import annotations

import asyncio
import re
from typing import Any

from bs4 import BeautifulSoup
from loguru import logger
from playwright.async_api import BrowserContext, Page
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
from leadverify.utils.address import parse_int, parse_money
from leadverify.utils.logging_utils import Timer, log_search

JURISDICTION_ID = "dallas_county"
ADDRESS_SEARCH_URL = "https://www.dallascad.org/SearchAddr.aspx"
DETAILS_URL = "https://www.dallascad.org/AcctDetailRes.aspx?ID={property_id}"

_ID_RE = re.compile(r"ID=(\w+)")


def parse_search_results(html: str, jurisdiction_id: str = JURISDICTION_ID) -> list[PropertyCandidate]:
    soup = BeautifulSoup(html, "html.parser")
    candidates = []
    for index, row in enumerate(soup.select("#SearchResultsTable tr")):
        if index == 0:
            continue
        cells = row.find_all("td")
        if len(cells) < 5:
            continue
        property_id = clean_text(cells[0])
        link = cells[0].find("a")
        if link is not None:
            match = _ID_RE.search(link.get("href", ""))
            if match:
                property_id = match.group(1)
        if not property_id:
            continue
        candidates.append(
            PropertyCandidate(
                jurisdiction_id=jurisdiction_id,
                property_id=property_id,
                address=clean_text(cells[1]) or None,
                owner_name=clean_text(cells[2]) or None,
                property_type=clean_text(cells[3]) or None,
                value=clean_text(cells[4]) or None,
            )
        )
    return candidates


def parse_property_details(html: str) -> dict[str, Any]:
    soup = BeautifulSoup(html, "html.parser")

    characteristics: dict[str, Any] = {}
    for label, value in label_value_pairs(leaf_rows(soup, "#BuildingDescTable tr")):
        if "Year Built" in label:
            characteristics["year_built"] = parse_int(value)
        elif "Living Area" in label:
            characteristics["living_area"] = value
        elif "Stories" in label:
            characteristics["stories"] = value
        elif "Style" in label:
            characteristics["style"] = value

    for row in leaf_rows(soup, "#LandTableRes tr"):
        cells = row.find_all("td")
        if len(cells) >= 4:
            square_feet = clean_text(cells[2])
            if square_feet:
                characteristics["land_area"] = square_feet

    owner_rows = leaf_rows(soup, "#OwnerTableResMobile tr")
    mailing_parts = [
        value
        for label, value in label_value_pairs(owner_rows)
        if ("Mailing Address:" in label or "City, State, Zip:" in label) and value
    ]

    return {
        "property_value": parse_money(
            row_value(leaf_rows(soup, "#ValueSummaryTableCurrent tr"), "Total Market Value:")
        ),
        "owner_name": row_value(owner_rows, "Owner Name:") or None,
        "owner_mailing_address": " ".join(mailing_parts) or None,
        "characteristics": PropertyCharacteristics(**characteristics),
    }


def parse_tax_info(html: str) -> TaxStatus:
    soup = BeautifulSoup(html, "html.parser")
    rows = leaf_rows(soup, "#TaxYearSummaryTable tr")
    delinquent_years = [
        row for row in rows
        if "Delinquent" in row.get_text(" ", strip=True) and "Total" not in row.get_text(" ", strip=True)
    ]
    has_history = any("Payment History" in a.get_text(" ", strip=True) for a in soup.find_all("a"))
    return TaxStatus(
        amount_due=parse_money(row_value(rows, "Total Due:")),
        delinquent=bool(delinquent_years),
        has_payment_history=has_history,
    )


class DallasCountyScraper(CountyScraper):
    @search_boundary
    async def search_by_owner(
        self, owner_name: str | None = None, *, first: str | None = None, last: str | None = None
    ) -> ScrapeResult:
        search_name = owner_name
        if not search_name and (first or last):
            search_name = ", ".join(part for part in (last, first) if part)
        if not search_name:
            return ScrapeResult(
                status=ScrapeStatus.INVALID_QUERY,
                source_name=self.source_name,
                message="Owner name is required for Dallas County owner search",
            )

        with Timer() as timer:
            async with self.browser_session() as context:
                page = await context.new_page()
                await page.goto(self.jurisdiction.property_search_url, wait_until="networkidle")
                await page.wait_for_selector("#txtOwnerName")
                await page.fill("#txtOwnerName", search_name)
                html = await self._submit_search(page)

        candidates = parse_search_results(html, self.jurisdiction.id) if html else []
        log_search(self.source_name, "owner", search_name, candidates=len(candidates), duration_ms=timer.elapsed_ms)
        return ScrapeResult.found(self.source_name, candidates)

    @search_boundary
    async def search_by_address(
        self, address: str, city: str | None = None, zip_code: str | None = None
    ) -> ScrapeResult:
        if not address:
            return ScrapeResult(
                status=ScrapeStatus.INVALID_QUERY,
                source_name=self.source_name,
                message="Address is required for Dallas County address search",
            )

        with Timer() as timer:
            async with self.browser_session() as context:
                page = await context.new_page()
                await page.goto(ADDRESS_SEARCH_URL, wait_until="networkidle")
                await page.wait_for_selector("#txtAddrSearch")
                await page.fill("#txtAddrSearch", address)
                html = await self._submit_search(page)

        candidates = parse_search_results(html, self.jurisdiction.id) if html else []
        log_search(self.source_name, "address", address, candidates=len(candidates), duration_ms=timer.elapsed_ms)
        return ScrapeResult.found(self.source_name, candidates)

    async def _submit_search(self, page: Page) -> str | None:
        async with page.expect_navigation(wait_until="networkidle"):
            await page.click("#cmdSearch")
        if await page.query_selector("#SearchResultsTable") is None:
            return None
        return await page.content()

    @details_boundary
    async def get_property_details(
        self, property_id: str, *, address_hint: str | None = None
    ) -> PropertyRecord:
        source_url = DETAILS_URL.format(property_id=property_id)
        with Timer() as timer:
            async with self.browser_session() as context:
                details_html, tax = await asyncio.gather(
                    self._fetch_details_html(context, source_url),
                    self._fetch_tax_status(context, property_id),
                )

        parsed = parse_property_details(details_html)
        # DCAD detail pages do not repeat the situs address; the search hit carries it
        address = address_hint
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
            source_url=source_url,
            **parsed,
        )

    async def _fetch_details_html(self, context: BrowserContext, url: str) -> str:
        page = await context.new_page()
        await page.goto(url, wait_until="networkidle")
        return await page.content()

    async def _fetch_tax_status(self, context: BrowserContext, property_id: str) -> TaxStatus:
        try:
            page = await context.new_page()
            await page.goto(self.jurisdiction.tax_search_url, wait_until="networkidle")
            await page.fill("#txtAccountNo", property_id)
            async with page.expect_navigation(wait_until="networkidle"):
                await page.click("#btnSearch")
            return parse_tax_info(await page.content())
        except PlaywrightError as exc:
            logger.warning("Tax lookup failed for {property_id}: {error}", property_id=property_id, error=str(exc))
            return TaxStatus(error=" ".join(str(exc).split())[:500])
