from __future__ import annotations

import asyncio
from typing import Any

import pytest

from leadverify.config import Settings
from leadverify.jurisdictions.registry import Jurisdiction, JurisdictionRegistry
from leadverify.models import PropertyCandidate, PropertyRecord, ScrapeResult, ScrapeStatus
from leadverify.services.lead_pipeline import LeadPipeline
from leadverify.services.result_cache import ResultCache


class FakeSource:
    """In-memory PropertySource; records every call it receives."""

    def __init__(
        self,
        source_name: str,
        *,
        address_results: dict[str, ScrapeResult] | None = None,
        owner_results: dict[str, ScrapeResult] | None = None,
        details: dict[str, PropertyRecord] | None = None,
        delays: dict[str, float] | None = None,
    ) -> None:
        self.source_name = source_name
        self.address_results = address_results or {}
        self.owner_results = owner_results or {}
        self.details = details or {}
        self.delays = delays or {}
        self.calls: list[tuple[str, Any]] = []

    async def search_by_address(
        self, address: str, city: str | None = None, zip_code: str | None = None
    ) -> ScrapeResult:
        self.calls.append(("address", address))
        if address in self.delays:
            await asyncio.sleep(self.delays[address])
        if address in self.address_results:
            return self.address_results[address]
        return ScrapeResult.found(
            self.source_name,
            [PropertyCandidate(jurisdiction_id=self.source_name, property_id=f"ACCT-{address}", address=address)],
        )

    async def search_by_owner(
        self, owner_name: str | None = None, *, first: str | None = None, last: str | None = None
    ) -> ScrapeResult:
        self.calls.append(("owner", owner_name))
        return self.owner_results.get(owner_name, ScrapeResult.found(self.source_name, []))

    async def get_property_details(
        self, property_id: str, *, address_hint: str | None = None
    ) -> PropertyRecord:
        self.calls.append(("details", property_id))
        if property_id in self.details:
            return self.details[property_id]
        return PropertyRecord(jurisdiction_id=self.source_name, property_id=property_id, address=address_hint)

    def count(self, kind: str) -> int:
        return sum(1 for call, _ in self.calls if call == kind)


def no_results(source_name: str) -> ScrapeResult:
    return ScrapeResult(status=ScrapeStatus.NO_RESULTS, source_name=source_name)


TRAVIS = Jurisdiction(
    id="travis_county",
    name="Travis County",
    state="TX",
    cities=("Austin",),
    zip_prefixes=("787",),
    available=True,
    pro_only=True,
)


@pytest.fixture
def settings() -> Settings:
    return Settings(batch_pause_seconds=0.0, extraction_timeout=5.0)


@pytest.fixture
def harris() -> FakeSource:
    return FakeSource("harris_county")


@pytest.fixture
def dallas() -> FakeSource:
    return FakeSource("dallas_county")


@pytest.fixture
def pipeline(settings: Settings, harris: FakeSource, dallas: FakeSource) -> LeadPipeline:
    return LeadPipeline(
        JurisdictionRegistry(),
        {"harris_county": harris, "dallas_county": dallas},
        ResultCache(),
        settings=settings,
    )


@pytest.fixture
def pro_registry() -> JurisdictionRegistry:
    return JurisdictionRegistry((TRAVIS,))
