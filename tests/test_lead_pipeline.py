import asyncio

import pytest

from conftest import TRAVIS, FakeSource
from leadverify.errors import (
    COMING_SOON_MESSAGE,
    REQUIRES_PRO_MESSAGE,
    TIMEOUT_MESSAGE,
    UNSUPPORTED_MESSAGE,
    ErrorKind,
    InvalidInputError,
)
from leadverify.jurisdictions.registry import JurisdictionRegistry
from leadverify.models import DocumentEvidence, DocumentType, PropertyRecord, TaxStatus
from leadverify.services.lead_pipeline import LeadPipeline
from leadverify.services.result_cache import ResultCache

HOUSTON = {"city": "Houston", "state": "TX", "zip": "77002"}


def test_batch_with_one_slow_lead_returns_every_result(pipeline, harris) -> None:
    harris.delays["2 Bayou St"] = 2.0
    leads = [
        {"address": "1 Main St", **HOUSTON},
        {"address": "2 Bayou St", **HOUSTON},
        {"address": "3 Travis St", **HOUSTON},
    ]

    results = asyncio.run(pipeline.validate_leads(leads, timeout=0.1))

    assert [r.address for r in results] == ["1 Main St", "2 Bayou St", "3 Travis St"]
    assert results[1].validation.error == TIMEOUT_MESSAGE
    assert results[1].validation.score == 0
    assert results[1].validation.motivation.error_kind is ErrorKind.TIMEOUT
    for ok in (results[0], results[2]):
        assert ok.validation.error is None
        assert ok.validation.record.property_id == f"ACCT-{ok.address}"
        assert ok.validation.source == "harris_county"


def test_order_is_preserved_across_batches(pipeline, harris, dallas) -> None:
    leads = [
        {"address": f"{n} Elm St", "city": city, "state": "TX"}
        for n, city in enumerate(["Houston", "Dallas", "Houston", "Dallas", "Houston"], start=1)
    ]

    results = asyncio.run(pipeline.validate_leads(leads, batch_size=2))

    assert [r.address for r in results] == [lead["address"] for lead in leads]
    assert [r.validation.source for r in results] == [
        "harris_county", "dallas_county", "harris_county", "dallas_county", "harris_county",
    ]
    assert harris.count("address") == 3
    assert dallas.count("address") == 2


def test_unsupported_lead_scores_zero_without_adapter_calls(pipeline, harris, dallas) -> None:
    leads = [{"address": "1 Capitol Way", "city": "Boise", "state": "ID", "zip": "83702", "phone": "555-0100"}]

    [result] = asyncio.run(pipeline.validate_leads(leads))

    assert result.validation.error == UNSUPPORTED_MESSAGE
    assert result.validation.score == 0
    assert result.validation.record is None
    assert result.phone == "555-0100"
    assert harris.calls == [] and dallas.calls == []


def test_recognized_county_without_adapter_is_coming_soon(pipeline) -> None:
    leads = [{"address": "233 S Wacker Dr", "city": "Chicago", "state": "IL"}]

    [free] = asyncio.run(pipeline.validate_leads(leads))
    [pro] = asyncio.run(pipeline.validate_leads(leads, is_pro=True))

    for result in (free, pro):
        assert result.validation.error == COMING_SOON_MESSAGE
        assert result.validation.coming_soon is True
        assert result.validation.requires_pro is False
        assert result.validation.motivation.county_name == "Cook County"


def test_pro_only_county_requires_pro_with_zero_adapter_calls(settings, pro_registry) -> None:
    source = FakeSource(TRAVIS.id)
    pipeline = LeadPipeline(pro_registry, {TRAVIS.id: source}, ResultCache(), settings=settings)
    leads = [{"address": "1100 Congress Ave", "city": "Austin", "state": "TX"}]

    [result] = asyncio.run(pipeline.validate_leads(leads, is_pro=False))

    assert result.validation.error == REQUIRES_PRO_MESSAGE
    assert result.validation.requires_pro is True
    assert result.validation.score == 0
    assert source.calls == []


@pytest.mark.parametrize("bad", ["not a list", {"address": "1 Main St"}, 42])
def test_non_list_input_is_rejected(pipeline, bad) -> None:
    with pytest.raises(InvalidInputError, match="leads must be a list"):
        asyncio.run(pipeline.validate_leads(bad))


def test_malformed_lead_is_rejected_before_any_adapter_call(pipeline, harris) -> None:
    leads = [{"address": "1 Main St", **HOUSTON}, "garbage"]

    with pytest.raises(InvalidInputError, match=r"leads\[1\] must be an object"):
        asyncio.run(pipeline.validate_leads(leads))
    assert harris.calls == []


def test_adapter_crash_is_isolated_to_its_lead(pipeline, harris) -> None:
    async def _explode(property_id, *, address_hint=None):
        if address_hint == "2 Bayou St":
            raise RuntimeError("renderer crashed")
        return PropertyRecord(jurisdiction_id="harris_county", property_id=property_id, address=address_hint)

    harris.get_property_details = _explode
    leads = [{"address": "1 Main St", **HOUSTON}, {"address": "2 Bayou St", **HOUSTON}]

    first, second = asyncio.run(pipeline.validate_leads(leads))

    assert first.validation.error is None
    assert second.validation.error == "renderer crashed"
    assert second.validation.score == 0


class _FakeDocuments:
    def __init__(self, documents=None, error=None):
        self.documents = documents or []
        self.error = error
        self.calls = []

    async def get_documents(self, property_id, jurisdiction_id, **options):
        self.calls.append((property_id, jurisdiction_id, options))
        if self.error is not None:
            raise self.error
        return self.documents


FORECLOSURE = [
    DocumentEvidence(
        id="d1",
        document_type=DocumentType.FORECLOSURE,
        content="Notice of default recorded. Trustee sale set. Owner is behind on payments.",
    )
]


def test_include_documents_combines_scores(settings, harris, dallas) -> None:
    documents = _FakeDocuments(FORECLOSURE)
    pipeline = LeadPipeline(
        JurisdictionRegistry(),
        {"harris_county": harris, "dallas_county": dallas},
        ResultCache(),
        settings=settings,
        document_source=documents,
    )
    leads = [{"address": "1 Main St", **HOUSTON}]

    [plain] = asyncio.run(pipeline.validate_leads(leads))
    [enriched] = asyncio.run(pipeline.validate_leads(leads, include_documents=True))

    assert plain.validation.analysis is None
    assert enriched.validation.analysis.legal_status["foreclosure"].detected
    assert enriched.validation.score >= max(plain.validation.score, 40)
    assert enriched.validation.source == "harris_county"
    assert documents.calls[0][:2] == ("ACCT-1 Main St", "harris_county")


def test_document_fetch_failure_keeps_property_score(settings, harris, dallas) -> None:
    pipeline = LeadPipeline(
        JurisdictionRegistry(),
        {"harris_county": harris, "dallas_county": dallas},
        ResultCache(),
        settings=settings,
        document_source=_FakeDocuments(error=RuntimeError("503")),
    )

    [result] = asyncio.run(pipeline.validate_leads([{"address": "1 Main St", **HOUSTON}], include_documents=True))

    assert result.validation.error is None
    assert result.validation.analysis is None


def test_analyze_property_documents_report(settings, harris) -> None:
    pipeline = LeadPipeline(
        JurisdictionRegistry(), {"harris_county": harris}, ResultCache(), settings=settings,
        document_source=_FakeDocuments(FORECLOSURE),
    )

    report = asyncio.run(pipeline.analyze_property_documents("0011", "harris_county"))

    assert report.analysis.document_count == 1
    assert report.motivation.score == report.analysis.motivation_score
    assert report.factors[0]["strength"] >= report.factors[-1]["strength"]


def test_analyze_property_documents_without_documents(pipeline) -> None:
    report = asyncio.run(pipeline.analyze_property_documents("0011", "harris_county"))

    assert report.analysis.document_count == 0
    assert report.motivation.score == 0
    assert report.factors == []


def test_search_properties_auto_resolves_and_marks_unavailable(pipeline, harris) -> None:
    hits = asyncio.run(pipeline.search_properties(address="1 Main St", city="Houston", state="TX"))
    assert [h.property_id for h in hits] == ["ACCT-1 Main St"]

    [marker] = asyncio.run(pipeline.search_properties(address="1 Main St", city="Denver", state="CO"))
    assert marker.coming_soon is True
    assert marker.county_name == "Denver County"

    assert asyncio.run(pipeline.search_properties(address="1 Main St", city="Boise", state="ID")) == []

    with pytest.raises(InvalidInputError, match="address or an owner name"):
        asyncio.run(pipeline.search_properties(city="Houston", state="TX"))
    with pytest.raises(InvalidInputError, match="Unknown jurisdiction"):
        asyncio.run(pipeline.search_properties(address="1 Main St", jurisdiction_id="atlantis"))


def test_get_property_details_validates_and_caches(pipeline, harris) -> None:
    with pytest.raises(InvalidInputError, match="Valid county is required"):
        asyncio.run(pipeline.get_property_details(jurisdiction_id="atlantis", property_id="1"))
    with pytest.raises(InvalidInputError, match="Property ID is required"):
        asyncio.run(pipeline.get_property_details(jurisdiction_id="harris_county", property_id=""))

    async def _twice():
        first = await pipeline.get_property_details(jurisdiction_id="harris_county", property_id="0011")
        second = await pipeline.get_property_details(jurisdiction_id="harris_county", property_id="0011")
        return first, second

    first, second = asyncio.run(_twice())

    assert first is second
    assert harris.count("details") == 1

    marker = asyncio.run(pipeline.get_property_details(jurisdiction_id="king_county", property_id="7"))
    assert marker.coming_soon is True
    assert marker.property_id == "7"


def test_batch_validate_properties(pipeline, harris) -> None:
    harris.details["0011"] = PropertyRecord(
        jurisdiction_id="harris_county",
        property_id="0011",
        vacant=True,
        tax=TaxStatus(amount_due=2500, delinquent=True),
    )
    refs = [
        {"id": "a", "county": "harris_county", "accountNumber": "0011"},
        {"id": "b", "county": "atlantis", "accountNumber": "1"},
        {"id": "c", "county": "cook_county", "accountNumber": "2"},
        {"id": "d", "county": "harris_county"},
    ]

    a, b, c, d = asyncio.run(pipeline.batch_validate_properties(refs))

    assert a.error is None
    assert a.score.score == 65
    assert a.details.property_id == "0011"
    assert b.error == "Valid county is required"
    assert c.coming_soon is True and c.error == COMING_SOON_MESSAGE
    assert d.error == "Valid property identifier is required"
    assert harris.count("details") == 1


def test_get_counties(pipeline) -> None:
    assert {c.id for c in pipeline.get_counties()} == {"harris_county", "dallas_county"}
    assert len(pipeline.get_counties(include_coming=True)) == 11
    assert "TX" in pipeline.get_counties_by_state()
