from __future__ import annotations

from leadverify.analyzers.weights import (
    DOCUMENT_WEIGHTS,
    DocumentWeights,
    clamp_score,
    document_components,
    evaluate_rules,
    record_signals,
    rules_for,
)
from leadverify.errors import ErrorKind
from leadverify.jurisdictions.registry import JurisdictionRegistry, default_registry
from leadverify.models import DOCUMENT_ONLY_SOURCE, AnalysisResult, MotivationScore, PropertyRecord


class MotivationScorer:
    """Turns property records and/or document analysis into a 0-100 score."""

    def __init__(
        self,
        registry: JurisdictionRegistry | None = None,
        document_weights: DocumentWeights = DOCUMENT_WEIGHTS,
    ) -> None:
        self.registry = registry or default_registry()
        self.document_weights = document_weights

    def score_property(self, record: PropertyRecord, jurisdiction_id: str | None = None) -> MotivationScore:
        source = jurisdiction_id or record.jurisdiction_id
        if record.is_error:
            return MotivationScore.failure(
                record.error,
                record.error_kind or ErrorKind.ADAPTER_FAILURE,
                source=source,
                requires_pro=record.requires_pro,
                coming_soon=record.coming_soon,
                county_name=record.county_name,
            )
        jurisdiction = self.registry.get(source)
        components = evaluate_rules(rules_for(jurisdiction), record_signals(record, jurisdiction))
        return MotivationScore(
            score=clamp_score(sum(components.values())),
            source=source,
            components=components,
        )

    def score_documents(self, analysis: AnalysisResult) -> MotivationScore:
        if analysis.is_error:
            return MotivationScore.failure(
                analysis.error, ErrorKind.ANALYSIS_SERVICE_FAILURE, source=DOCUMENT_ONLY_SOURCE
            )
        if analysis.document_count == 0:
            return MotivationScore(score=0, source=DOCUMENT_ONLY_SOURCE)
        components = document_components(analysis, self.document_weights)
        return MotivationScore(
            score=clamp_score(sum(components.values())),
            source=DOCUMENT_ONLY_SOURCE,
            components=components,
        )

    def combine(self, property_score: MotivationScore, document_score: MotivationScore | None) -> MotivationScore:
        """Larger of the two scores; a failed property score is returned as-is."""
        if property_score.error or document_score is None or document_score.error:
            return property_score
        components = {f"property.{k}": v for k, v in property_score.components.items()}
        components.update({f"documents.{k}": v for k, v in document_score.components.items()})
        return MotivationScore(
            score=max(property_score.score, document_score.score),
            source=property_score.source,
            components=components,
        )
