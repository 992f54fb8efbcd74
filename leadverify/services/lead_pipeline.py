"""
Pipeline surface: batch lead validation, property search/details, batch
property scoring, and county listings.

Batches run in fixed-size groups (``Settings.batch_size``) with a short
pause between groups; leads inside a group run concurrently and one lead's
failure never affects its siblings. Only malformed input raises, and it
does so before any adapter is invoked.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Iterable, Mapping, Sequence
from datetime import date
from typing import Any, TypeVar

from loguru import logger
from pydantic import BaseModel, ValidationError

from leadverify.analyzers.document_analyzer import DocumentCorpusAnalyzer, motivation_factors
from leadverify.analyzers.motivation_scorer import MotivationScorer
from leadverify.config import Settings, load_settings
from leadverify.errors import (
    COMING_SOON_MESSAGE,
    REQUIRES_PRO_MESSAGE,
    TIMEOUT_MESSAGE,
    UNSUPPORTED_MESSAGE,
    ErrorKind,
    InvalidInputError,
)
from leadverify.jurisdictions.registry import Jurisdiction, JurisdictionRegistry, default_registry
from leadverify.jurisdictions.resolver import JurisdictionResolver
from leadverify.models import (
    AnalysisResult,
    BatchValidationResult,
    DocumentAnalysisReport,
    DocumentEvidence,
    DocumentType,
    JurisdictionSummary,
    Lead,
    LeadValidation,
    MotivationScore,
    PropertyCandidate,
    PropertyRecord,
    PropertyRef,
    ValidatedLead,
)
from leadverify.scrapers import build_sources
from leadverify.scrapers.base import PropertySource
from leadverify.services.analysis_client import NlpAnalysisClient
from leadverify.services.document_fetch import DocumentFetchService, DocumentSource
from leadverify.services.record_extraction import RecordExtractionOrchestrator, details_key, gate
from leadverify.services.result_cache import ResultCache

ModelT = TypeVar("ModelT", bound=BaseModel)
ResultT = TypeVar("ResultT")


def _coerce_items(items: Any, model: type[ModelT], label: str) -> list[ModelT]:
    if isinstance(items, (str, bytes, Mapping)) or not isinstance(items, Iterable):
        raise InvalidInputError(f"{label} must be a list, got {type(items).__name__}")
    coerced = []
    for index, item in enumerate(items):
        if isinstance(item, model):
            coerced.append(item)
            continue
        if not isinstance(item, Mapping):
            raise InvalidInputError(f"{label}[{index}] must be an object, got {type(item).__name__}")
        try:
            coerced.append(model.model_validate(dict(item)))
        except ValidationError as exc:
            raise InvalidInputError(f"{label}[{index}] is malformed: {exc.error_count()} errors") from exc
    return coerced


def _validated(lead: Lead, validation: LeadValidation) -> ValidatedLead:
    return ValidatedLead.model_validate({**lead.model_dump(), "validation": validation})


class LeadPipeline:
    def __init__(
        self,
        registry: JurisdictionRegistry | None = None,
        sources: Mapping[str, PropertySource] | None = None,
        cache: ResultCache | None = None,
        *,
        settings: Settings | None = None,
        analyzer: DocumentCorpusAnalyzer | None = None,
        document_source: DocumentSource | None = None,
        scorer: MotivationScorer | None = None,
    ) -> None:
        self.settings = settings or load_settings()
        self.registry = registry or default_registry()
        self.cache = cache or ResultCache(
            capacity=self.settings.cache_capacity,
            default_ttl=self.settings.cache_ttl,
            sweep_interval=self.settings.cache_sweep_interval,
        )
        self.sources = dict(sources) if sources is not None else build_sources(self.registry, self.settings)
        self.resolver = JurisdictionResolver(self.registry)
        self.orchestrator = RecordExtractionOrchestrator(
            self.registry, self.sources, self.cache, settings=self.settings
        )
        self.analyzer = analyzer or DocumentCorpusAnalyzer(self.cache)
        self.document_source = document_source
        self.scorer = scorer or MotivationScorer(self.registry)

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "LeadPipeline":
        """Wire the production collaborators from env settings."""
        settings = settings or load_settings()
        registry = default_registry()
        cache = ResultCache(
            capacity=settings.cache_capacity,
            default_ttl=settings.cache_ttl,
            sweep_interval=settings.cache_sweep_interval,
        )
        return cls(
            registry,
            build_sources(registry, settings),
            cache,
            settings=settings,
            analyzer=DocumentCorpusAnalyzer(cache, NlpAnalysisClient.from_settings(settings)),
            document_source=DocumentFetchService.from_settings(settings),
        )

    # ------------------------------------------------------------------
    # Batch scheduling
    # ------------------------------------------------------------------

    async def _run_batched(
        self,
        items: Sequence[Any],
        worker: Callable[[Any], Awaitable[ResultT]],
        on_error: Callable[[Any, Exception], ResultT],
        batch_size: int | None,
    ) -> list[ResultT]:
        size = batch_size or self.settings.batch_size
        if size < 1:
            raise InvalidInputError(f"batch_size must be >= 1, got {size}")
        results: list[Any] = [None] * len(items)

        async def _run_safe(index: int, item: Any) -> None:
            try:
                results[index] = await worker(item)
            except Exception as exc:
                logger.exception("Batch item {index} failed: {error}", index=index, error=str(exc))
                results[index] = on_error(item, exc)

        for start in range(0, len(items), size):
            if start:
                await asyncio.sleep(self.settings.batch_pause_seconds)
            group = items[start:start + size]
            logger.info(
                "Processing batch {batch} ({count} items)", batch=start // size + 1, count=len(group)
            )
            async with asyncio.TaskGroup() as tg:
                for offset, item in enumerate(group):
                    tg.create_task(_run_safe(start + offset, item))
        return results

    # ------------------------------------------------------------------
    # Lead validation
    # ------------------------------------------------------------------

    async def validate_leads(
        self,
        leads: Any,
        *,
        is_pro: bool | None = False,
        include_documents: bool = False,
        batch_size: int | None = None,
        timeout: float | None = None,
    ) -> list[ValidatedLead]:
        coerced = _coerce_items(leads, Lead, "leads")
        elevated = bool(is_pro)
        logger.info("Validating {count} leads (pro={pro})", count=len(coerced), pro=elevated)

        async def _worker(lead: Lead) -> ValidatedLead:
            return await self._validate_one(lead, elevated, include_documents, timeout)

        def _on_error(lead: Lead, exc: Exception) -> ValidatedLead:
            failure = MotivationScore.failure(str(exc), ErrorKind.ADAPTER_FAILURE)
            return _validated(lead, LeadValidation(motivation=failure))

        return await self._run_batched(coerced, _worker, _on_error, batch_size)

    async def _validate_one(
        self, lead: Lead, is_pro: bool, include_documents: bool, timeout: float | None
    ) -> ValidatedLead:
        jurisdiction_id = self.resolver.resolve(lead.address, lead.city, lead.state, lead.zip_code)
        if jurisdiction_id is None:
            failure = MotivationScore.failure(UNSUPPORTED_MESSAGE, ErrorKind.UNSUPPORTED)
            return _validated(lead, LeadValidation(motivation=failure))

        jurisdiction = self.registry.get(jurisdiction_id)
        unavailable = self._unavailable_record(jurisdiction)
        if unavailable is not None:
            record = unavailable
        else:
            record = await self.orchestrator.extract(lead, jurisdiction_id, is_pro=is_pro, timeout=timeout)

        motivation = self.scorer.score_property(record, jurisdiction_id)
        analysis = None
        if include_documents and not record.is_error and record.property_id:
            documents = await self._fetch_documents(record.property_id, jurisdiction_id)
            if documents:
                analysis = await self.analyzer.analyze(documents)
                motivation = self.scorer.combine(motivation, self.scorer.score_documents(analysis))

        return _validated(lead, LeadValidation(motivation=motivation, record=record, analysis=analysis))

    def _unavailable_record(self, jurisdiction: Jurisdiction) -> PropertyRecord | None:
        """Recognized jurisdiction without an adapter: coming soon, regardless of tier."""
        if jurisdiction.id in self.sources:
            return None
        return PropertyRecord.failure(
            COMING_SOON_MESSAGE,
            ErrorKind.COMING_SOON,
            jurisdiction_id=jurisdiction.id,
            coming_soon=True,
            county_name=jurisdiction.name,
        )

    # ------------------------------------------------------------------
    # Property search and details
    # ------------------------------------------------------------------

    async def search_properties(
        self,
        *,
        address: str | None = None,
        city: str | None = None,
        state: str | None = None,
        zip_code: str | None = None,
        owner_name: str | None = None,
        jurisdiction_id: str | None = None,
        is_pro: bool | None = False,
    ) -> list[PropertyCandidate]:
        if not address and not owner_name:
            raise InvalidInputError("search_properties needs an address or an owner name")

        if jurisdiction_id:
            jurisdiction = self.registry.get(jurisdiction_id)
            if jurisdiction is None:
                raise InvalidInputError(f"Unknown jurisdiction: {jurisdiction_id!r}")
        else:
            resolved = self.resolver.resolve(address, city, state, zip_code)
            if resolved is None:
                return []
            jurisdiction = self.registry.get(resolved)

        marker = self._unavailable_record(jurisdiction) or gate(jurisdiction, self.sources, bool(is_pro))
        if marker is not None:
            return [
                PropertyCandidate(
                    jurisdiction_id=jurisdiction.id,
                    error=marker.error,
                    requires_pro=marker.requires_pro,
                    coming_soon=marker.coming_soon,
                    county_name=jurisdiction.name,
                )
            ]

        source = self.sources[jurisdiction.id]
        if address:
            result = await source.search_by_address(address, city, zip_code)
        else:
            result = await source.search_by_owner(owner_name)
        if result.is_error:
            return [PropertyCandidate(jurisdiction_id=jurisdiction.id, error=result.message or result.status.value)]
        return list(result.candidates)

    async def get_property_details(
        self,
        *,
        jurisdiction_id: str | None,
        property_id: str | None,
        is_pro: bool | None = False,
        address_hint: str | None = None,
    ) -> PropertyRecord:
        jurisdiction = self.registry.get(jurisdiction_id)
        if jurisdiction is None:
            raise InvalidInputError("Valid county is required for property details")
        if not property_id:
            raise InvalidInputError("Property ID is required for property details")

        marker = self._unavailable_record(jurisdiction) or gate(jurisdiction, self.sources, bool(is_pro))
        if marker is not None:
            return marker.model_copy(update={"property_id": property_id})

        key = details_key(jurisdiction.id, property_id)
        cached = self.cache.get(key)
        if cached is not None:
            return cached

        source = self.sources[jurisdiction.id]
        try:
            async with asyncio.timeout(self.settings.extraction_timeout):
                record = await source.get_property_details(property_id, address_hint=address_hint)
        except TimeoutError:
            return PropertyRecord.failure(
                TIMEOUT_MESSAGE, ErrorKind.TIMEOUT, jurisdiction_id=jurisdiction.id, property_id=property_id
            )
        if not record.is_error:
            self.cache.set(key, record)
        return record

    async def batch_validate_properties(
        self,
        properties: Any,
        *,
        is_pro: bool | None = False,
        batch_size: int | None = None,
    ) -> list[BatchValidationResult]:
        refs = _coerce_items(properties, PropertyRef, "properties")

        async def _worker(ref: PropertyRef) -> BatchValidationResult:
            return await self._validate_property(ref, bool(is_pro))

        def _on_error(ref: PropertyRef, exc: Exception) -> BatchValidationResult:
            return BatchValidationResult(id=ref.id, error=str(exc))

        return await self._run_batched(refs, _worker, _on_error, batch_size)

    async def _validate_property(self, ref: PropertyRef, default_pro: bool) -> BatchValidationResult:
        jurisdiction = self.registry.get(ref.jurisdiction_id)
        if jurisdiction is None:
            return BatchValidationResult(id=ref.id, error="Valid county is required")
        if jurisdiction.id not in self.sources:
            return BatchValidationResult(id=ref.id, error=COMING_SOON_MESSAGE, coming_soon=True)
        elevated = default_pro if ref.is_pro is None else ref.is_pro
        if jurisdiction.pro_only and not elevated:
            return BatchValidationResult(id=ref.id, error=REQUIRES_PRO_MESSAGE, requires_pro=True)
        if not ref.external_id:
            return BatchValidationResult(id=ref.id, error="Valid property identifier is required")

        details = await self.get_property_details(
            jurisdiction_id=jurisdiction.id, property_id=ref.external_id, is_pro=elevated
        )
        score = self.scorer.score_property(details, jurisdiction.id)
        return BatchValidationResult(id=ref.id, details=details, score=score, error=details.error)

    # ------------------------------------------------------------------
    # Documents
    # ------------------------------------------------------------------

    async def _fetch_documents(self, property_id: str, jurisdiction_id: str, **options: Any) -> list[DocumentEvidence]:
        if self.document_source is None:
            return []
        try:
            return await self.document_source.get_documents(property_id, jurisdiction_id, **options)
        except Exception as exc:
            logger.warning(
                "Document fetch failed for {property_id} in {jurisdiction}; treating as no documents: {error}",
                property_id=property_id, jurisdiction=jurisdiction_id, error=str(exc),
            )
            return []

    async def analyze_property_documents(
        self,
        property_id: str,
        jurisdiction_id: str,
        *,
        document_types: Sequence[DocumentType | str] | None = None,
        start_date: date | None = None,
        end_date: date | None = None,
        force_refresh: bool = False,
    ) -> DocumentAnalysisReport:
        if not property_id or not jurisdiction_id:
            raise InvalidInputError("property_id and jurisdiction_id are required")
        documents = await self._fetch_documents(
            property_id,
            jurisdiction_id,
            document_types=document_types,
            start_date=start_date,
            end_date=end_date,
        )
        analysis = await self.analyzer.analyze(documents, force_refresh=force_refresh) if documents else AnalysisResult.empty()
        return DocumentAnalysisReport(
            property_id=property_id,
            jurisdiction_id=jurisdiction_id,
            analysis=analysis,
            motivation=self.scorer.score_documents(analysis),
            factors=motivation_factors(analysis),
        )

    # ------------------------------------------------------------------
    # Counties
    # ------------------------------------------------------------------

    def get_counties(self, include_coming: bool = False) -> list[JurisdictionSummary]:
        return self.registry.counties(include_coming)

    def get_counties_by_state(self) -> dict[str, list[JurisdictionSummary]]:
        return self.registry.counties_by_state()
