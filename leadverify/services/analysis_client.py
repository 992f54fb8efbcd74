"""
Client for the external NLP document-analysis service.

POST ``{NLP_API_URL}/analyze`` with bearer auth. Every failure mode
(transport error, timeout, non-2xx, an error or empty body, a body that
does not validate as an AnalysisResult) raises ``AnalysisServiceError``
so the caller can fall back to local analysis.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

import httpx
from loguru import logger
from pydantic import ValidationError
from pydantic.alias_generators import to_camel

from leadverify.config import DEFAULT_NLP_API_TIMEOUT, Settings
from leadverify.errors import AnalysisServiceError
from leadverify.models import AnalysisResult, DocumentEvidence

DEFAULT_ANALYSIS_TYPES = ("entities", "sentiment", "classification")

# A 2xx body must carry at least one of these (snake or camel case)
ANALYSIS_FIELDS = ("legal_status", "financial_indicators", "motivation_terms", "sentiment", "legal_issues_probability", "motivation_score")


class NlpAnalysisClient:
    def __init__(
        self,
        base_url: str,
        api_key: str,
        *,
        timeout: float = DEFAULT_NLP_API_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._timeout = httpx.Timeout(timeout, connect=min(10.0, timeout))
        self._transport = transport

    @classmethod
    def from_settings(cls, settings: Settings) -> "NlpAnalysisClient | None":
        if not settings.analysis_service_enabled:
            return None
        return cls(settings.nlp_api_url, settings.nlp_api_key, timeout=settings.nlp_api_timeout)

    async def analyze(
        self,
        documents: Sequence[DocumentEvidence],
        *,
        analysis_types: Sequence[str] = DEFAULT_ANALYSIS_TYPES,
    ) -> AnalysisResult:
        payload: dict[str, Any] = {
            "documents": [
                {
                    "id": doc.id,
                    "text": doc.content,
                    "type": doc.document_type.value,
                    "metadata": doc.metadata,
                }
                for doc in documents
            ],
            "analysisTypes": list(analysis_types),
        }
        headers = {"Authorization": f"Bearer {self._api_key}", "Content-Type": "application/json"}

        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                resp = await client.post(f"{self.base_url}/analyze", json=payload, headers=headers)
        except httpx.TimeoutException as exc:
            raise AnalysisServiceError(f"Analysis service timed out: {exc}") from exc
        except httpx.HTTPError as exc:
            raise AnalysisServiceError(f"Analysis service HTTP error: {exc}") from exc

        if resp.status_code // 100 != 2:
            raise AnalysisServiceError(f"Analysis service returned HTTP {resp.status_code}")

        try:
            body = resp.json()
        except ValueError as exc:
            raise AnalysisServiceError("Analysis service returned non-JSON body") from exc
        if not isinstance(body, dict):
            raise AnalysisServiceError("Analysis service returned non-object body")

        if body.get("error"):
            raise AnalysisServiceError(f"Analysis service reported an error: {body['error']}")
        if not any(field in body or to_camel(field) in body for field in ANALYSIS_FIELDS):
            raise AnalysisServiceError("Analysis service returned no analysis fields")

        try:
            result = AnalysisResult.model_validate({**body, "source": "service"})
        except ValidationError as exc:
            raise AnalysisServiceError(f"Malformed analysis response: {exc.error_count()} errors") from exc

        if result.document_count == 0 and documents:
            result = result.model_copy(update={"document_count": len(documents)})
        logger.debug("Analysis service scored {count} documents", count=len(documents))
        return result
