"""
Pydantic models for leads, property records, documents, and scores.
"""
from .documents import (
    AnalysisResult,
    DocumentEvidence,
    DocumentType,
    IndicatorMatch,
    LegalStatusMatch,
)
from .property import (
    Lead,
    PropertyCandidate,
    PropertyCharacteristics,
    PropertyRecord,
    TaxStatus,
)
from .scoring import (
    DOCUMENT_ONLY_SOURCE,
    BatchValidationResult,
    DocumentAnalysisReport,
    JurisdictionSummary,
    LeadValidation,
    MotivationScore,
    PropertyRef,
    ValidatedLead,
)
from .scrape import ScrapeResult, ScrapeStatus

__all__ = [
    'AnalysisResult',
    'BatchValidationResult',
    'DOCUMENT_ONLY_SOURCE',
    'DocumentAnalysisReport',
    'DocumentEvidence',
    'DocumentType',
    'IndicatorMatch',
    'JurisdictionSummary',
    'Lead',
    'LeadValidation',
    'LegalStatusMatch',
    'MotivationScore',
    'PropertyCandidate',
    'PropertyCharacteristics',
    'PropertyRecord',
    'PropertyRef',
    'ScrapeResult',
    'ScrapeStatus',
    'TaxStatus',
    'ValidatedLead',
]
