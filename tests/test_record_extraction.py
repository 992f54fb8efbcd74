import asyncio

import pytest

from conftest import TRAVIS, FakeSource, no_results
from leadverify.errors import NOT_FOUND_MESSAGE, REQUIRES_PRO_MESSAGE, ErrorKind, InvalidInputError
from leadverify.jurisdictions.registry import JurisdictionRegistry
from leadverify.models import Lead, PropertyCandidate, PropertyRecord, ScrapeResult, ScrapeStatus
from leadverify.services.record_extraction import RecordExtractionOrchestrator
from leadverify.services.result_cache import ResultCache

LEAD = Lead(address="123 Main Street", city="Houston", state="TX", zip="77002", owner="John Doe")


def _candidate(pid: str, address: str, owner: str = "DOE JOHN") -> PropertyCandidate:
    return PropertyCandidate(jurisdiction_id="harris_county", property_id=pid, address=address, owner_name=owner)


def _orchestrator(source: FakeSource, settings, registry: JurisdictionRegistry | None = None) -> RecordExtractionOrchestrator:
    return RecordExtractionOrchestrator(
        registry or JurisdictionRegistry(), {source.source_name: source}, ResultCache(), settings=settings
    )


def test_address_hit_is_verified_and_merged(settings) -> None:
    source = FakeSource(
        "harris_county",
        address_results={"123 Main Street": ScrapeResult.found("harris_county", [_candidate("0011", "123 MAIN ST")])},
        details={"0011": PropertyRecord(jurisdiction_id="harris_county", property_id="0011", property_value=250000)},
    )

    record = asyncio.run(_orchestrator(source, settings).extract(LEAD, "harris_county"))

    assert record.error is None
    assert record.property_id == "0011"
    assert record.property_value == 250000
    assert record.address_verified is True
    assert record.owner_verified is True
    assert record.raw_data["matched_by"] == "address"
    assert source.calls == [("address", "123 Main Street"), ("details", "0011")]


def test_owner_fallback_prefers_candidate_at_lead_address(settings) -> None:
    source = FakeSource(
        "harris_county",
        address_results={"123 Main Street": no_results("harris_county")},
        owner_results={
            "John Doe": ScrapeResult.found(
                "harris_county",
                [_candidate("0099", "9 ELM ST"), _candidate("0011", "123 MAIN ST HOUSTON")],
            )
        },
    )

    record = asyncio.run(_orchestrator(source, settings).extract(LEAD, "harris_county"))

    assert record.property_id == "0011"
    assert record.raw_data["matched_by"] == "owner"
    assert source.count("owner") == 1


def test_failed_address_search_continues_to_owner(settings) -> None:
    failed = ScrapeResult(status=ScrapeStatus.BLOCKED, source_name="harris_county", message="403")
    source = FakeSource(
        "harris_county",
        address_results={"123 Main Street": failed},
        owner_results={"John Doe": ScrapeResult.found("harris_county", [_candidate("0011", "123 MAIN ST")])},
    )

    record = asyncio.run(_orchestrator(source, settings).extract(LEAD, "harris_county"))

    assert record.error is None
    assert record.raw_data["matched_by"] == "owner"


def test_no_candidates_is_not_found(settings) -> None:
    source = FakeSource("harris_county", address_results={"123 Main Street": no_results("harris_county")})

    record = asyncio.run(_orchestrator(source, settings).extract(LEAD, "harris_county"))

    assert record.error == NOT_FOUND_MESSAGE
    assert record.error_kind is ErrorKind.NOT_FOUND
    assert source.count("details") == 0


def test_pro_only_jurisdiction_rejects_before_any_adapter_call(settings, pro_registry) -> None:
    source = FakeSource("travis_county")
    orchestrator = _orchestrator(source, settings, pro_registry)
    lead = Lead(address="1100 Congress Ave", city="Austin", state="TX")

    record = asyncio.run(orchestrator.extract(lead, TRAVIS.id, is_pro=False))

    assert record.error == REQUIRES_PRO_MESSAGE
    assert record.requires_pro is True
    assert record.county_name == "Travis County"
    assert source.calls == []

    elevated = asyncio.run(orchestrator.extract(lead, TRAVIS.id, is_pro=True))
    assert elevated.error is None
    assert source.count("address") == 1


def test_warm_cache_returns_identical_record_without_adapter_calls(settings) -> None:
    source = FakeSource("harris_county")
    orchestrator = _orchestrator(source, settings)

    async def _twice():
        first = await orchestrator.extract(LEAD, "harris_county")
        second = await orchestrator.extract(LEAD, "harris_county")
        return first, second

    first, second = asyncio.run(_twice())

    assert first is second
    assert len(source.calls) == 2  # one search, one details


def test_cached_record_is_verified_against_each_lead(settings) -> None:
    source = FakeSource(
        "harris_county",
        address_results={"123 Main Street": ScrapeResult.found("harris_county", [_candidate("0011", "123 MAIN ST")])},
    )
    orchestrator = _orchestrator(source, settings)
    other_owner = LEAD.model_copy(update={"owner_name": "Jane Smith"})

    async def _both():
        first = await orchestrator.extract(LEAD, "harris_county")
        second = await orchestrator.extract(other_owner, "harris_county")
        return first, second

    first, second = asyncio.run(_both())

    assert first.owner_verified is True
    assert second.owner_verified is False
    assert second.address_verified is True
    assert second.property_id == "0011"
    assert source.count("details") == 1


def test_slow_adapter_times_out_and_is_not_cached(settings) -> None:
    source = FakeSource("harris_county", delays={"123 Main Street": 2.0})
    orchestrator = _orchestrator(source, settings)

    record = asyncio.run(orchestrator.extract(LEAD, "harris_county", timeout=0.05))

    assert record.error_kind is ErrorKind.TIMEOUT
    assert record.jurisdiction_id == "harris_county"
    assert len(orchestrator.cache) == 0


def test_unknown_jurisdiction_is_invalid_input(settings) -> None:
    source = FakeSource("harris_county")

    with pytest.raises(InvalidInputError, match="Unknown jurisdiction"):
        asyncio.run(_orchestrator(source, settings).extract(LEAD, "atlantis"))
    assert source.calls == []
