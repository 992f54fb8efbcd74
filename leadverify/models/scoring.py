from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from leadverify.errors import ErrorKind
from leadverify.models.documents import AnalysisResult
from leadverify.models.property import Lead, PropertyRecord
from leadverify.utils.time import now_utc

DOCUMENT_ONLY_SOURCE = "document-only"


class MotivationScore(BaseModel):
    """Externally visible 0-100 score plus the rules that produced it."""
    model_config = ConfigDict(frozen=True)

    score: int = Field(default=0, ge=0, le=100)
    source: Optional[str] = None
    components: Dict[str, float] = Field(default_factory=dict)
    timestamp: datetime = Field(default_factory=now_utc)
    error: Optional[str] = None
    error_kind: Optional[ErrorKind] = None
    requires_pro: bool = False
    coming_soon: bool = False
    county_name: Optional[str] = None

    @classmethod
    def failure(
        cls,
        message: str,
        kind: ErrorKind,
        *,
        source: Optional[str] = None,
        **flags: Any,
    ) -> "MotivationScore":
        return cls(score=0, source=source, error=message, error_kind=kind, **flags)


class LeadValidation(BaseModel):
    model_config = ConfigDict(frozen=True)

    motivation: MotivationScore
    record: Optional[PropertyRecord] = None
    analysis: Optional[AnalysisResult] = None

    @property
    def score(self) -> int:
        return self.motivation.score

    @property
    def error(self) -> Optional[str]:
        return self.motivation.error

    @property
    def requires_pro(self) -> bool:
        return self.motivation.requires_pro

    @property
    def coming_soon(self) -> bool:
        return self.motivation.coming_soon

    @property
    def source(self) -> Optional[str]:
        return self.motivation.source


class ValidatedLead(Lead):
    validation: LeadValidation


class JurisdictionSummary(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    state: str
    cities: List[str]
    zip_prefixes: List[str]
    available: bool
    pro_only: bool
    coming_soon: bool
    base_url: Optional[str] = None
    property_search_url: Optional[str] = None


class PropertyRef(BaseModel):
    """Batch input item: an already-known property id in one jurisdiction."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: Optional[str] = None
    external_id: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices(
            "external_id", "externalId", "property_id", "propertyId", "accountNumber"
        ),
    )
    jurisdiction_id: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("jurisdiction_id", "jurisdictionId", "county")
    )
    is_pro: Optional[bool] = Field(default=None, validation_alias=AliasChoices("is_pro", "isPro"))

    @field_validator("id", "external_id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> Any:
        return str(value) if isinstance(value, int) else value


class BatchValidationResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: Optional[str] = None
    details: Optional[PropertyRecord] = None
    score: Optional[MotivationScore] = None
    error: Optional[str] = None
    requires_pro: bool = False
    coming_soon: bool = False


class DocumentAnalysisReport(BaseModel):
    model_config = ConfigDict(frozen=True)

    property_id: str
    jurisdiction_id: str
    analysis: AnalysisResult
    motivation: MotivationScore
    factors: List[Dict[str, Any]] = Field(default_factory=list)
