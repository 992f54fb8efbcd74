import asyncio
from datetime import date

import httpx
import pytest

from leadverify.errors import DocumentFetchError
from leadverify.models import DocumentType
from leadverify.services.document_fetch import DocumentFetchService


def _service(handler) -> DocumentFetchService:
    return DocumentFetchService("https://docs.example.com", "k", transport=httpx.MockTransport(handler))


def test_get_documents_sends_filters_and_skips_malformed_entries() -> None:
    seen: dict = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["params"] = dict(request.url.params)
        return httpx.Response(
            200,
            json={
                "documents": [
                    {
                        "id": 101,
                        "documentType": "FORE",
                        "propertyId": "0011",
                        "content": "Notice of default",
                        "recordingDate": "03/15/2024",
                    },
                    {"id": "102"},
                ]
            },
        )

    documents = asyncio.run(
        _service(handler).get_documents(
            "0011",
            "harris_county",
            document_types=[DocumentType.FORECLOSURE, "lien"],
            start_date=date(2024, 1, 1),
        )
    )

    assert seen["path"] == "/property/0011"
    assert seen["params"] == {"countyId": "harris_county", "docTypes": "FORE,LIEN", "startDate": "2024-01-01"}
    assert len(documents) == 1
    doc = documents[0]
    assert doc.id == "101"
    assert doc.document_type is DocumentType.FORECLOSURE
    assert doc.recording_date == date(2024, 3, 15)


def test_http_error_status_raises_fetch_error() -> None:
    service = _service(lambda request: httpx.Response(404, json={"error": "not found"}))

    with pytest.raises(DocumentFetchError, match="Document fetch failed for 0011"):
        asyncio.run(service.get_documents("0011", "harris_county"))


def test_body_without_document_list_raises_fetch_error() -> None:
    service = _service(lambda request: httpx.Response(200, json={"items": []}))

    with pytest.raises(DocumentFetchError, match="no document list"):
        asyncio.run(service.get_documents("0011", "harris_county"))
