"""
Record extraction: lead + jurisdiction -> one merged, verified PropertyRecord.

Search strategies run in order and the first non-empty, non-error result
wins; details are fetched only after a candidate is selected. Every failure
mode comes back as an error-bearing record, never an exception (except
``InvalidInputError`` for an unknown jurisdiction id).
"""

from __future__ import annotations

import asyncio
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Protocol

from loguru import logger

from leadverify.config import Settings, load_settings
from leadverify.errors import (
    COMING_SOON_MESSAGE,
    NOT_FOUND_MESSAGE,
    REQUIRES_PRO_MESSAGE,
    TIMEOUT_MESSAGE,
    ErrorKind,
    InvalidInputError,
)
from leadverify.jurisdictions.registry import Jurisdiction, JurisdictionRegistry
from leadverify.models import Lead, PropertyCandidate, PropertyRecord, ScrapeResult
from leadverify.scrapers.base import PropertySource
from leadverify.services.result_cache import ResultCache, fingerprint
from leadverify.utils.address import address_contains, normalize_address, owner_matches
from leadverify.utils.logging_utils import Timer, log_search


class SearchStrategy(Protocol):
    name: str

    def applies(self, lead: Lead) -> bool: ...

    async def search(self, source: PropertySource, lead: Lead) -> ScrapeResult: ...

    def select(self, lead: Lead, candidates: Sequence[PropertyCandidate]) -> PropertyCandidate: ...


class AddressSearchStrategy:
    """Primary lookup; adapters rank results so the first hit is taken."""

    name = "address"

    def applies(self, lead: Lead) -> bool:
        return bool(lead.address)

    async def search(self, source: PropertySource, lead: Lead) -> ScrapeResult:
        return await source.search_by_address(lead.address, lead.city, lead.zip_code)

    def select(self, lead: Lead, candidates: Sequence[PropertyCandidate]) -> PropertyCandidate:
        return candidates[0]


class OwnerSearchStrategy:
    """Fallback by owner name; prefers the hit at the lead's address."""

    name = "owner"

    def applies(self, lead: Lead) -> bool:
        return bool(lead.owner_name)

    async def search(self, source: PropertySource, lead: Lead) -> ScrapeResult:
        return await source.search_by_owner(lead.owner_name)

    def select(self, lead: Lead, candidates: Sequence[PropertyCandidate]) -> PropertyCandidate:
        if lead.address:
            for candidate in candidates:
                if address_contains(candidate.address, lead.address):
                    return candidate
        return candidates[0]


DEFAULT_STRATEGIES: tuple[SearchStrategy, ...] = (AddressSearchStrategy(), OwnerSearchStrategy())


@dataclass(frozen=True, slots=True)
class _Selection:
    strategy: str
    candidate: PropertyCandidate


@dataclass(frozen=True, slots=True)
class _Match:
    """Cached lookup: the merged record plus the candidate it was verified against."""

    record: PropertyRecord
    candidate: PropertyCandidate
    details: PropertyRecord


def verify(record: PropertyRecord, candidate: PropertyCandidate, lead: Lead) -> PropertyRecord:
    """Stamp address/owner verification against this lead; reuses ``record`` when nothing changes."""
    address_verified = address_contains(candidate.address or record.address, lead.address)
    owner_verified = owner_matches(lead.owner_name, candidate.owner_name or record.owner_name)
    if record.address_verified == address_verified and record.owner_verified == owner_verified:
        return record
    return record.model_copy(update={"address_verified": address_verified, "owner_verified": owner_verified})


def lookup_key(jurisdiction_id: str, lead: Lead) -> str:
    """Cache key on (jurisdiction, normalized address or owner)."""
    if lead.address:
        return fingerprint("property", jurisdiction_id, "address", normalize_address(lead.address))
    return fingerprint("property", jurisdiction_id, "owner", " ".join(sorted((lead.owner_name or "").lower().split())))


def details_key(jurisdiction_id: str, property_id: str) -> str:
    return fingerprint("details", jurisdiction_id, property_id)


def gate(jurisdiction: Jurisdiction, sources: Mapping[str, PropertySource], is_pro: bool) -> PropertyRecord | None:
    """Tier and availability gates; returns a terminal record or ``None`` to proceed."""
    if jurisdiction.pro_only and not is_pro:
        return PropertyRecord.failure(
            REQUIRES_PRO_MESSAGE,
            ErrorKind.TIER_REQUIRED,
            jurisdiction_id=jurisdiction.id,
            requires_pro=True,
            county_name=jurisdiction.name,
        )
    if jurisdiction.id not in sources:
        return PropertyRecord.failure(
            COMING_SOON_MESSAGE,
            ErrorKind.COMING_SOON,
            jurisdiction_id=jurisdiction.id,
            coming_soon=True,
            county_name=jurisdiction.name,
        )
    return None


class RecordExtractionOrchestrator:
    def __init__(
        self,
        registry: JurisdictionRegistry,
        sources: Mapping[str, PropertySource],
        cache: ResultCache,
        *,
        settings: Settings | None = None,
        strategies: Sequence[SearchStrategy] = DEFAULT_STRATEGIES,
    ) -> None:
        self.registry = registry
        self.sources = sources
        self.cache = cache
        self.settings = settings or load_settings()
        self.strategies = tuple(strategies)

    async def extract(
        self,
        lead: Lead,
        jurisdiction_id: str,
        *,
        is_pro: bool = False,
        timeout: float | None = None,
    ) -> PropertyRecord:
        jurisdiction = self.registry.get(jurisdiction_id)
        if jurisdiction is None:
            raise InvalidInputError(f"Unknown jurisdiction: {jurisdiction_id!r}")

        gated = gate(jurisdiction, self.sources, is_pro)
        if gated is not None:
            return gated

        key = lookup_key(jurisdiction.id, lead)
        cached = self.cache.get(key)
        if cached is not None:
            logger.debug("Cache hit for {jurisdiction} lead {address}", jurisdiction=jurisdiction.id, address=lead.address)
            return verify(cached.record, cached.candidate, lead)

        deadline = self.settings.extraction_timeout if timeout is None else timeout
        try:
            async with asyncio.timeout(deadline):
                outcome = await self._extract_uncached(lead, jurisdiction)
        except TimeoutError:
            logger.warning(
                "Extraction for {address} in {jurisdiction} exceeded {deadline}s",
                address=lead.address or lead.owner_name, jurisdiction=jurisdiction.id, deadline=deadline,
            )
            return PropertyRecord.failure(TIMEOUT_MESSAGE, ErrorKind.TIMEOUT, jurisdiction_id=jurisdiction.id)

        if isinstance(outcome, PropertyRecord):
            return outcome

        self.cache.set(key, outcome)
        if outcome.candidate.property_id:
            self.cache.set(details_key(jurisdiction.id, outcome.candidate.property_id), outcome.details)
        return outcome.record

    async def _extract_uncached(self, lead: Lead, jurisdiction: Jurisdiction) -> PropertyRecord | _Match:
        source = self.sources[jurisdiction.id]
        selection = await self._select_candidate(source, lead, jurisdiction)
        if selection is None:
            return PropertyRecord.failure(
                NOT_FOUND_MESSAGE, ErrorKind.NOT_FOUND, jurisdiction_id=jurisdiction.id
            )

        candidate = selection.candidate
        record = await source.get_property_details(candidate.property_id, address_hint=candidate.address)
        if record.is_error:
            # Adapter failures score like "not found" but keep their cause
            return record

        merged = record.model_copy(update={"raw_data": {**record.raw_data, "matched_by": selection.strategy}})
        return _Match(verify(merged, candidate, lead), candidate, record)

    async def _select_candidate(
        self, source: PropertySource, lead: Lead, jurisdiction: Jurisdiction
    ) -> _Selection | None:
        for strategy in self.strategies:
            if not strategy.applies(lead):
                continue
            with Timer() as timer:
                result = await strategy.search(source, lead)
            if result.is_error:
                logger.warning(
                    "{strategy} search failed in {jurisdiction}: {message}",
                    strategy=strategy.name, jurisdiction=jurisdiction.id, message=result.message,
                )
                continue
            if not result.candidates:
                continue
            candidate = strategy.select(lead, result.candidates)
            log_search(
                jurisdiction.id,
                strategy.name,
                lead.address if strategy.name == "address" else lead.owner_name,
                candidates=len(result.candidates),
                duration_ms=timer.elapsed_ms,
                selected=candidate.property_id,
            )
            return _Selection(strategy.name, candidate)
        return None
