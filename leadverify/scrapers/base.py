from __future__ import annotations

import asyncio
import functools
import traceback
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from typing import Any, Protocol, runtime_checkable

from bs4 import BeautifulSoup, Tag
from loguru import logger
from playwright.async_api import BrowserContext, async_playwright
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from leadverify.analyzers.weights import clamp_score, evaluate_rules, record_signals, rules_for
from leadverify.config import DEFAULT_ADAPTER_CALL_TIMEOUT, DEFAULT_NAVIGATION_TIMEOUT_MS, USER_AGENT
from leadverify.errors import TIMEOUT_MESSAGE, ErrorKind
from leadverify.jurisdictions.registry import Jurisdiction
from leadverify.models import PropertyRecord, ScrapeResult, ScrapeStatus
from leadverify.utils.address import address_contains


@runtime_checkable
class PropertySource(Protocol):
    """Capability set every county source implements."""

    source_name: str

    async def search_by_address(
        self, address: str, city: str | None = None, zip_code: str | None = None
    ) -> ScrapeResult: ...

    async def search_by_owner(
        self, owner_name: str | None = None, *, first: str | None = None, last: str | None = None
    ) -> ScrapeResult: ...

    async def get_property_details(
        self, property_id: str, *, address_hint: str | None = None
    ) -> PropertyRecord: ...


def classify_exception(exc: BaseException) -> tuple[ScrapeStatus, str]:
    """Map an adapter exception to a status and a human readable message."""
    if isinstance(exc, (TimeoutError, PlaywrightTimeoutError)):
        return ScrapeStatus.TIMEOUT, "Operation timed out"
    if isinstance(exc, PlaywrightError):
        error_msg = str(exc)
        status = ScrapeStatus.UNKNOWN_ERROR
        # Simple heuristics for detection
        if "403" in error_msg or "Access Denied" in error_msg:
            status = ScrapeStatus.BLOCKED
        elif "net::" in error_msg:
            status = ScrapeStatus.NETWORK_ERROR
        return status, f"Playwright Error: {error_msg}"
    if isinstance(exc, (AttributeError, IndexError, KeyError, ValueError)):
        return ScrapeStatus.PARSING_ERROR, f"Parse Error: {exc}"
    return ScrapeStatus.UNKNOWN_ERROR, f"Unexpected Error: {exc}"


def search_boundary(
    func: Callable[..., Awaitable[ScrapeResult]],
) -> Callable[..., Awaitable[ScrapeResult]]:
    """
    Run a search under the adapter's call timeout and turn any failure into
    a failed ScrapeResult. Cancellation still propagates.
    """

    @functools.wraps(func)
    async def wrapper(self: CountyScraper, *args: Any, **kwargs: Any) -> ScrapeResult:
        try:
            async with asyncio.timeout(self.call_timeout):
                return await func(self, *args, **kwargs)
        except Exception as exc:
            status, message = classify_exception(exc)
            logger.error(
                "{source} {op} failed ({status}): {message}",
                source=self.source_name, op=func.__name__, status=status.value, message=message,
            )
            return ScrapeResult(
                status=status,
                source_name=self.source_name,
                message=message,
                error_details=traceback.format_exc(),
            )

    return wrapper


def details_boundary(
    func: Callable[..., Awaitable[PropertyRecord]],
) -> Callable[..., Awaitable[PropertyRecord]]:
    """Same as ``search_boundary`` but yields an error-bearing PropertyRecord."""

    @functools.wraps(func)
    async def wrapper(self: CountyScraper, property_id: str, *args: Any, **kwargs: Any) -> PropertyRecord:
        try:
            async with asyncio.timeout(self.call_timeout):
                return await func(self, property_id, *args, **kwargs)
        except Exception as exc:
            status, message = classify_exception(exc)
            logger.error(
                "{source} details for {property_id} failed ({status}): {message}",
                source=self.source_name, property_id=property_id, status=status.value, message=message,
            )
            timed_out = status is ScrapeStatus.TIMEOUT
            return PropertyRecord.failure(
                TIMEOUT_MESSAGE if timed_out else message,
                ErrorKind.TIMEOUT if timed_out else ErrorKind.ADAPTER_FAILURE,
                jurisdiction_id=self.jurisdiction.id,
                property_id=property_id,
                raw_data={"status": status.value, "error_details": traceback.format_exc()},
            )

    return wrapper


def clean_text(el: Tag | None) -> str:
    if el is None:
        return ""
    return " ".join(el.get_text(" ", strip=True).split())


def leaf_rows(soup: BeautifulSoup | Tag, selector: str = "table tr") -> list[Tag]:
    """Rows matching ``selector`` that do not wrap a nested table."""
    return [row for row in soup.select(selector) if row.find("tr") is None]


def row_value(rows: list[Tag], label: str) -> str | None:
    """Text of the last cell of the first row whose text contains ``label``."""
    for row in rows:
        if label in row.get_text(" ", strip=True):
            cells = row.find_all(["td", "th"])
            if cells:
                return clean_text(cells[-1])
    return None


def label_value_pairs(rows: list[Tag]) -> list[tuple[str, str]]:
    pairs = []
    for row in rows:
        cells = row.find_all("td")
        if cells:
            pairs.append((clean_text(cells[0]), clean_text(cells[-1])))
    return pairs


def is_likely_vacant(property_address: str | None, mailing_address: str | None) -> bool:
    """Owner mails elsewhere ⇒ likely vacant (weak proxy; PO boxes misclassify)."""
    if not property_address or not mailing_address:
        return False
    return not address_contains(mailing_address, property_address)


class CountyScraper:
    """
    Base for Playwright-driven county appraisal-district sources.

    Every public call opens its own browser and closes it on every exit
    path, so one instance is safe to share across concurrent leads.
    """

    def __init__(
        self,
        jurisdiction: Jurisdiction,
        *,
        headless: bool = True,
        navigation_timeout_ms: int = DEFAULT_NAVIGATION_TIMEOUT_MS,
        call_timeout: float | None = DEFAULT_ADAPTER_CALL_TIMEOUT,
    ) -> None:
        self.jurisdiction = jurisdiction
        self.source_name = jurisdiction.id
        self.headless = headless
        self.navigation_timeout_ms = navigation_timeout_ms
        self.call_timeout = call_timeout

    @asynccontextmanager
    async def browser_session(self) -> AsyncIterator[BrowserContext]:
        async with async_playwright() as p:
            browser = await p.chromium.launch(headless=self.headless)
            try:
                context = await browser.new_context(user_agent=USER_AGENT)
                context.set_default_timeout(self.navigation_timeout_ms)
                yield context
            finally:
                await browser.close()

    def calculate_motivation_score(self, record: PropertyRecord) -> int:
        """Score a record with this jurisdiction's weight table."""
        if record.is_error:
            return 0
        components = evaluate_rules(rules_for(self.jurisdiction), record_signals(record, self.jurisdiction))
        return clamp_score(sum(components.values()))
