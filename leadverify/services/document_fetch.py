"""
Document-fetch collaborator: recorded documents (deeds, liens, foreclosure
notices, ...) for one property.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import date
from typing import Any, Protocol

import httpx
from loguru import logger
from pydantic import ValidationError
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from leadverify.config import DEFAULT_DOCUMENT_API_TIMEOUT, Settings
from leadverify.errors import DocumentFetchError
from leadverify.models import DocumentEvidence, DocumentType


class DocumentSource(Protocol):
    async def get_documents(
        self,
        property_id: str,
        jurisdiction_id: str,
        *,
        document_types: Sequence[DocumentType | str] | None = None,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> list[DocumentEvidence]: ...


def _type_code(value: DocumentType | str) -> str:
    doc_type = value if isinstance(value, DocumentType) else DocumentType(value)
    return "FORE" if doc_type is DocumentType.FORECLOSURE else doc_type.value.upper()


class DocumentFetchService:
    """HTTP client for ``GET {DOCUMENT_API_URL}/property/{id}``."""

    def __init__(
        self,
        base_url: str,
        api_key: str | None = None,
        *,
        timeout: float = DEFAULT_DOCUMENT_API_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._timeout = httpx.Timeout(timeout, connect=min(10.0, timeout))
        self._transport = transport

    @classmethod
    def from_settings(cls, settings: Settings) -> "DocumentFetchService | None":
        if not settings.document_service_enabled:
            return None
        return cls(
            settings.document_api_url,
            settings.document_api_key,
            timeout=settings.document_api_timeout,
        )

    async def get_documents(
        self,
        property_id: str,
        jurisdiction_id: str,
        *,
        document_types: Sequence[DocumentType | str] | None = None,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> list[DocumentEvidence]:
        params: dict[str, Any] = {"countyId": jurisdiction_id}
        if document_types:
            params["docTypes"] = ",".join(_type_code(t) for t in document_types)
        if start_date:
            params["startDate"] = start_date.isoformat()
        if end_date:
            params["endDate"] = end_date.isoformat()

        logger.info(
            "Fetching documents for property {property_id} in {jurisdiction}",
            property_id=property_id, jurisdiction=jurisdiction_id,
        )
        try:
            body = await self._fetch(property_id, params)
        except httpx.HTTPError as exc:
            raise DocumentFetchError(f"Document fetch failed for {property_id}: {exc}") from exc

        raw_documents = body.get("documents") if isinstance(body, dict) else None
        if not isinstance(raw_documents, list):
            raise DocumentFetchError(f"Document fetch for {property_id} returned no document list")

        documents = []
        for raw in raw_documents:
            try:
                documents.append(DocumentEvidence.model_validate(raw))
            except ValidationError as exc:
                logger.warning(
                    "Skipping malformed document for {property_id}: {errors} errors",
                    property_id=property_id, errors=exc.error_count(),
                )
        return documents

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.5, min=0.5, max=4),
        retry=retry_if_exception_type((httpx.TransportError,)),
        reraise=True,
    )
    async def _fetch(self, property_id: str, params: dict[str, Any]) -> Any:
        headers = {"Content-Type": "application/json"}
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"
        async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
            resp = await client.get(f"{self.base_url}/property/{property_id}", params=params, headers=headers)
            resp.raise_for_status()
            try:
                return resp.json()
            except ValueError as exc:
                raise DocumentFetchError(f"Document fetch for {property_id} returned non-JSON body") from exc
