from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from leadverify.utils.time import now_utc, parse_date


class DocumentType(str, Enum):
    DEED = "deed"
    TAX = "tax"
    LIEN = "lien"
    FORECLOSURE = "foreclosure"
    PROBATE = "probate"
    PERMIT = "permit"
    LISTING = "listing"
    BANKRUPTCY = "bankruptcy"
    DIVORCE = "divorce"
    AUCTION = "auction"

    @classmethod
    def _missing_(cls, value: object) -> Optional["DocumentType"]:
        if not isinstance(value, str):
            return None
        key = value.strip().lower()
        key = _TYPE_CODES.get(key, key)
        for member in cls:
            if member.value == key:
                return member
        return None


# Wire codes used by the document-fetch service
_TYPE_CODES = {"fore": "foreclosure", "liens": "lien", "bk": "bankruptcy"}


class DocumentEvidence(BaseModel):
    """A recorded document tied to one property; read-only analyzer input."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    document_type: DocumentType = Field(
        validation_alias=AliasChoices("document_type", "documentType", "type")
    )
    property_id: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("property_id", "propertyId")
    )
    jurisdiction_id: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("jurisdiction_id", "countyId", "county")
    )
    title: Optional[str] = None
    content: str = ""
    recording_date: Optional[date] = Field(
        default=None, validation_alias=AliasChoices("recording_date", "recordingDate")
    )
    document_url: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("document_url", "documentUrl")
    )
    metadata: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("id", "property_id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> Any:
        return str(value) if isinstance(value, int) else value

    @field_validator("document_type", mode="before")
    @classmethod
    def _coerce_type(cls, value: Any) -> Any:
        return DocumentType(value) if isinstance(value, str) else value

    @field_validator("content", mode="before")
    @classmethod
    def _coerce_content(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("recording_date", mode="before")
    @classmethod
    def _coerce_date(cls, value: Any) -> Any:
        if isinstance(value, str):
            return parse_date(value)
        return value


class _Wire(BaseModel):
    # The analysis service speaks camelCase
    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)


class LegalStatusMatch(_Wire):
    detected: bool = True
    matches: List[str] = Field(default_factory=list)
    probability: float = Field(ge=0.0, le=1.0)


class IndicatorMatch(_Wire):
    category: str
    matches: List[str] = Field(default_factory=list)
    strength: float = Field(ge=0.0, le=1.0)


class AnalysisResult(_Wire):
    legal_status: Dict[str, LegalStatusMatch] = Field(default_factory=dict)
    financial_indicators: List[IndicatorMatch] = Field(default_factory=list)
    motivation_terms: List[IndicatorMatch] = Field(default_factory=list)
    sentiment: float = Field(default=0.0, ge=-5.0, le=5.0)
    legal_issues_probability: float = Field(default=0.0, ge=0.0, le=1.0)
    motivation_score: int = Field(default=0, ge=0, le=100)
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)
    document_count: int = 0
    document_types: List[str] = Field(default_factory=list)
    analysis_date: datetime = Field(default_factory=now_utc)
    source: str = "local"
    error: Optional[str] = None

    @field_validator("legal_status", mode="before")
    @classmethod
    def _none_is_empty(cls, value: Any) -> Any:
        return {} if value is None else value

    @field_validator("financial_indicators", "motivation_terms", mode="before")
    @classmethod
    def _none_is_empty_list(cls, value: Any) -> Any:
        return [] if value is None else value

    @field_validator("motivation_score", mode="before")
    @classmethod
    def _round_score(cls, value: Any) -> Any:
        return round(value) if isinstance(value, float) else value

    @property
    def is_error(self) -> bool:
        return self.error is not None

    @classmethod
    def empty(cls) -> "AnalysisResult":
        return cls(document_count=0)
