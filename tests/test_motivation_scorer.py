from datetime import date

from leadverify.analyzers.document_analyzer import analyze_locally, motivation_factors
from leadverify.analyzers.motivation_scorer import MotivationScorer
from leadverify.analyzers.weights import (
    WeightRule,
    clamp_score,
    document_components,
    evaluate_rules,
    is_out_of_state,
)
from leadverify.errors import REQUIRES_PRO_MESSAGE, ErrorKind
from leadverify.models import (
    DOCUMENT_ONLY_SOURCE,
    AnalysisResult,
    DocumentEvidence,
    DocumentType,
    LegalStatusMatch,
    MotivationScore,
    PropertyCharacteristics,
    PropertyRecord,
    TaxStatus,
)


def _distressed_record(jurisdiction_id: str = "harris_county") -> PropertyRecord:
    return PropertyRecord(
        jurisdiction_id=jurisdiction_id,
        property_id="0011",
        address="123 MAIN ST HOUSTON TX 77002",
        owner_mailing_address="PO BOX 1, DENVER, CO 80202",
        property_value=350000,
        vacant=True,
        characteristics=PropertyCharacteristics(year_built=1965),
        tax=TaxStatus(amount_due=6000, delinquent=True, last_payment_date=date(2021, 1, 31)),
    )


def test_texas_rules_sum_every_firing_signal() -> None:
    score = MotivationScorer().score_property(_distressed_record())

    assert score.components == {
        "vacant": 30,
        "tax_delinquent": 25,
        "amount_due_over_5000": 15,
        "out_of_state_owner": 10,
        "built_before_1970": 5,
        "high_value_delinquent": 10,
    }
    assert score.score == 95
    assert score.source == "harris_county"
    assert score.error is None


def test_tiered_amount_due_takes_only_first_matching_tier() -> None:
    record = _distressed_record().model_copy(update={"tax": TaxStatus(amount_due=3000)})

    components = MotivationScorer().score_property(record).components

    assert components.get("amount_due_over_2000") == 10
    assert "amount_due_over_5000" not in components
    assert "tax_delinquent" not in components


def test_default_rules_for_jurisdiction_without_rule_set() -> None:
    record = PropertyRecord(
        jurisdiction_id="cook_county",
        property_id="1",
        owner_verified=True,
        address_verified=True,
        property_value=100000,
    )

    score = MotivationScorer().score_property(record)

    assert score.score == 60
    assert set(score.components) == {"owner_verified", "address_verified", "property_value"}


def test_score_is_clamped_to_0_100() -> None:
    rules = (WeightRule("a", "a", 80), WeightRule("b", "b", 80))
    assert sum(evaluate_rules(rules, {"a": True, "b": True}).values()) == 160
    assert clamp_score(160) == 100
    assert clamp_score(-3) == 0

    record = _distressed_record().model_copy(update={"owner_verified": True, "address_verified": True})
    assert MotivationScorer().score_property(record, "cook_county").score == 100


def test_error_record_scores_zero_and_keeps_flags() -> None:
    record = PropertyRecord.failure(
        REQUIRES_PRO_MESSAGE,
        ErrorKind.TIER_REQUIRED,
        jurisdiction_id="cook_county",
        requires_pro=True,
        county_name="Cook County",
    )

    score = MotivationScorer().score_property(record)

    assert score.score == 0
    assert score.error == REQUIRES_PRO_MESSAGE
    assert score.error_kind is ErrorKind.TIER_REQUIRED
    assert score.requires_pro is True
    assert score.county_name == "Cook County"


def test_out_of_state_detection() -> None:
    assert is_out_of_state("PO BOX 1, DENVER, CO 80202", "TX")
    assert not is_out_of_state("123 MAIN ST HOUSTON TX 77002", "TX")
    assert not is_out_of_state("123 Main St, Austin, Texas", "TX")
    assert not is_out_of_state(None, "TX")


def test_document_score_and_combination() -> None:
    docs = [
        DocumentEvidence(
            id="d1",
            document_type=DocumentType.FORECLOSURE,
            content="Notice of default. Trustee sale set. Owner is behind on payments and must sell.",
        )
    ]
    scorer = MotivationScorer()
    document_score = scorer.score_documents(analyze_locally(docs))
    property_score = MotivationScore(score=20, source="harris_county", components={"vacant": 20})

    combined = scorer.combine(property_score, document_score)

    assert document_score.source == DOCUMENT_ONLY_SOURCE
    assert document_score.components["base"] == 40
    assert document_score.score > 40
    assert combined.score == max(20, document_score.score)
    assert combined.source == "harris_county"
    assert combined.components["property.vacant"] == 20
    assert "documents.base" in combined.components


def test_combine_keeps_failed_property_score() -> None:
    failed = MotivationScore.failure("Property not found", ErrorKind.NOT_FOUND)
    scorer = MotivationScorer()

    assert scorer.combine(failed, MotivationScore(score=90)) is failed
    ok = MotivationScore(score=10)
    assert scorer.combine(ok, None) is ok


def test_empty_or_failed_analysis_scores_zero() -> None:
    scorer = MotivationScorer()

    assert scorer.score_documents(AnalysisResult.empty()).score == 0
    failed = scorer.score_documents(AnalysisResult(error="service down"))
    assert failed.score == 0
    assert failed.error_kind is ErrorKind.ANALYSIS_SERVICE_FAILURE


def test_undetected_legal_categories_do_not_add_points() -> None:
    analysis = AnalysisResult(
        legal_status={
            "foreclosure": LegalStatusMatch(detected=True, matches=["trustee sale"], probability=0.5),
            "bankruptcy": LegalStatusMatch(detected=False, probability=0.0),
            "probate": LegalStatusMatch(detected=False, probability=0.0),
        },
        document_count=1,
        source="service",
    )

    assert document_components(analysis)["legal_status"] == 8
    assert [f["category"] for f in motivation_factors(analysis)] == ["foreclosure"]
