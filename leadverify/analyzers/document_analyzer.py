"""
Document corpus analysis: legal status, financial distress and motivation
terms, sentiment, and a confidence-weighted motivation sub-score.

The external NLP service is preferred when configured; any service failure
falls back to the local term-table analysis and never raises.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from loguru import logger

from leadverify.analyzers import sentiment
from leadverify.analyzers.term_tables import (
    DEFAULT_LEGAL_WEIGHT,
    DEFAULT_TYPE_WEIGHT,
    DOCUMENT_TYPE_WEIGHTS,
    FINANCIAL_TERMS,
    FULL_CONFIDENCE_LENGTH,
    LEGAL_ISSUE_WEIGHTS,
    LEGAL_STATUS_TERMS,
    MOTIVATION_TERMS,
)
from leadverify.analyzers.weights import clamp_score, document_components
from leadverify.errors import AnalysisServiceError
from leadverify.models import (
    AnalysisResult,
    DocumentEvidence,
    IndicatorMatch,
    LegalStatusMatch,
)
from leadverify.services.analysis_client import NlpAnalysisClient
from leadverify.services.result_cache import ResultCache, document_set_key
from leadverify.utils.logging_utils import Timer


def _matched_terms(text: str, terms: Sequence[str]) -> list[str]:
    return [term for term in terms if term.lower() in text]


def detect_legal_status(text: str) -> dict[str, LegalStatusMatch]:
    lower = text.lower()
    results = {}
    for category, terms in LEGAL_STATUS_TERMS.items():
        matches = _matched_terms(lower, terms)
        if matches:
            results[category] = LegalStatusMatch(
                detected=True, matches=matches, probability=len(matches) / len(terms)
            )
    return results


def detect_indicators(text: str, table: Mapping[str, Sequence[str]]) -> list[IndicatorMatch]:
    lower = text.lower()
    results = []
    for category, terms in table.items():
        matches = _matched_terms(lower, terms)
        if matches:
            results.append(
                IndicatorMatch(category=category, matches=matches, strength=len(matches) / len(terms))
            )
    return results


def calculate_confidence(documents: Sequence[DocumentEvidence]) -> float:
    weighted_sum = 0.0
    total_weight = 0.0
    for doc in documents:
        weight = DOCUMENT_TYPE_WEIGHTS.get(doc.document_type, DEFAULT_TYPE_WEIGHT)
        content_factor = min(1.0, len(doc.content) / FULL_CONFIDENCE_LENGTH)
        weighted_sum += weight * content_factor
        total_weight += weight
    if total_weight <= 0:
        return 0.0
    return round(min(1.0, weighted_sum / total_weight), 2)


def legal_issues_probability(legal_status: Mapping[str, LegalStatusMatch]) -> float:
    total_score = 0.0
    total_weight = 0.0
    for category, match in legal_status.items():
        weight = LEGAL_ISSUE_WEIGHTS.get(category, DEFAULT_LEGAL_WEIGHT)
        total_score += match.probability * weight
        total_weight += weight
    if total_weight <= 0:
        return 0.0
    return round(min(1.0, total_score / total_weight), 2)


def analyze_locally(documents: Sequence[DocumentEvidence]) -> AnalysisResult:
    """Pure term-table analysis; deterministic for a given document set."""
    if not documents:
        return AnalysisResult.empty()

    text = " ".join(doc.content for doc in documents)
    legal_status = detect_legal_status(text)
    partial = AnalysisResult(
        legal_status=legal_status,
        financial_indicators=detect_indicators(text, FINANCIAL_TERMS),
        motivation_terms=detect_indicators(text, MOTIVATION_TERMS),
        sentiment=sentiment.score_text(text),
        legal_issues_probability=legal_issues_probability(legal_status),
        confidence=calculate_confidence(documents),
        document_count=len(documents),
        document_types=sorted({doc.document_type.value for doc in documents}),
        source="local",
    )
    score = clamp_score(sum(document_components(partial).values()))
    return partial.model_copy(update={"motivation_score": score})


def motivation_factors(analysis: AnalysisResult) -> list[dict[str, Any]]:
    """Flatten legal/financial/motivation findings into one strength-sorted list."""
    factors: list[dict[str, Any]] = []
    for category, match in analysis.legal_status.items():
        if not match.detected:
            continue
        factors.append(
            {"type": "legal", "category": category, "strength": match.probability, "terms": match.matches}
        )
    for indicator in analysis.financial_indicators:
        factors.append(
            {"type": "financial", "category": indicator.category, "strength": indicator.strength, "terms": indicator.matches}
        )
    for term in analysis.motivation_terms:
        factors.append(
            {"type": "motivation", "category": term.category, "strength": term.strength, "terms": term.matches}
        )
    return sorted(factors, key=lambda f: f["strength"], reverse=True)


class DocumentCorpusAnalyzer:
    def __init__(self, cache: ResultCache, client: NlpAnalysisClient | None = None) -> None:
        self.cache = cache
        self.client = client

    async def analyze(
        self, documents: Sequence[DocumentEvidence], *, force_refresh: bool = False
    ) -> AnalysisResult:
        if not documents:
            return AnalysisResult.empty()

        key = document_set_key(doc.id for doc in documents)
        if not force_refresh:
            cached = self.cache.get(key)
            if cached is not None:
                logger.debug("Using cached analysis for {count} documents", count=len(documents))
                return cached

        logger.info("Analyzing {count} documents", count=len(documents))
        result = await self._analyze_uncached(documents)
        if not result.is_error:
            self.cache.set(key, result)
        return result

    async def _analyze_uncached(self, documents: Sequence[DocumentEvidence]) -> AnalysisResult:
        if self.client is not None:
            with Timer() as timer:
                try:
                    result = await self.client.analyze(documents)
                except AnalysisServiceError as exc:
                    logger.warning("Analysis service failed, falling back to local analysis: {error}", error=str(exc))
                else:
                    logger.info("Analysis service answered in {ms:.0f} ms", ms=timer.elapsed_ms)
                    return result
        return analyze_locally(documents)
