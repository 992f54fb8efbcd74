"""Error taxonomy shared by the extraction and scoring pipeline."""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    UNSUPPORTED = "unsupported"
    TIER_REQUIRED = "tier_required"
    COMING_SOON = "coming_soon"
    NOT_FOUND = "not_found"
    ADAPTER_FAILURE = "adapter_failure"
    ANALYSIS_SERVICE_FAILURE = "analysis_service_failure"
    TIMEOUT = "timeout"


UNSUPPORTED_MESSAGE = "Unsupported county or location"
REQUIRES_PRO_MESSAGE = "This county requires a Pro subscription"
COMING_SOON_MESSAGE = "County identified but data extraction not yet available"
NOT_FOUND_MESSAGE = "Property not found"
TIMEOUT_MESSAGE = "Property lookup timed out"


class LeadVerifyError(Exception):
    """Base class for pipeline errors."""


class InvalidInputError(LeadVerifyError, ValueError):
    """Caller passed a malformed request; raised before any adapter runs."""


class AnalysisServiceError(LeadVerifyError):
    """The external document analysis service failed or returned garbage."""


class DocumentFetchError(LeadVerifyError):
    """The document-fetch service could not return documents."""
