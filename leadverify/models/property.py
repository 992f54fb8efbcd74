from datetime import date, datetime
from typing import Any, Dict, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from leadverify.errors import ErrorKind
from leadverify.utils.time import now_utc


def _stringify(value: Any) -> Any:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return value


class Lead(BaseModel):
    """
    Caller-supplied lead. Unknown columns (phone, notes, ...) are preserved
    and echoed back on the validated lead.
    """
    model_config = ConfigDict(frozen=True, extra="allow", populate_by_name=True)

    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("zip_code", "zip", "zipCode")
    )
    owner_name: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("owner_name", "ownerName", "owner")
    )

    @field_validator("address", "city", "state", "zip_code", "owner_name", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> Any:
        value = _stringify(value)
        if isinstance(value, str):
            value = value.strip()
            return value or None
        return value


class PropertyCandidate(BaseModel):
    """Search hit: just enough identity to pick a best match."""
    model_config = ConfigDict(frozen=True)

    jurisdiction_id: Optional[str] = None
    property_id: Optional[str] = None
    address: Optional[str] = None
    owner_name: Optional[str] = None
    value: Optional[str] = None  # raw text as printed by the source
    legal: Optional[str] = None
    property_type: Optional[str] = None

    # Marker fields for degraded search responses
    error: Optional[str] = None
    requires_pro: bool = False
    coming_soon: bool = False
    county_name: Optional[str] = None


class PropertyCharacteristics(BaseModel):
    model_config = ConfigDict(frozen=True)

    year_built: Optional[int] = None
    living_area: Optional[str] = None
    land_area: Optional[str] = None
    building_area: Optional[str] = None
    stories: Optional[str] = None
    style: Optional[str] = None
    state_class: Optional[str] = None


class TaxStatus(BaseModel):
    model_config = ConfigDict(frozen=True)

    amount_due: Optional[float] = None
    delinquent: bool = False
    last_payment_date: Optional[date] = None
    has_payment_history: bool = False
    error: Optional[str] = None


class PropertyRecord(BaseModel):
    """
    Normalized property + tax record from one jurisdiction's source.
    A record with ``error`` set carries no usable evidence.
    """
    model_config = ConfigDict(frozen=True)

    jurisdiction_id: Optional[str] = None
    property_id: Optional[str] = None
    address: Optional[str] = None
    owner_name: Optional[str] = None
    owner_mailing_address: Optional[str] = None
    property_value: Optional[float] = None
    characteristics: PropertyCharacteristics = Field(default_factory=PropertyCharacteristics)
    tax: TaxStatus = Field(default_factory=TaxStatus)

    address_verified: bool = False
    owner_verified: bool = False
    vacant: bool = False

    error: Optional[str] = None
    error_kind: Optional[ErrorKind] = None
    requires_pro: bool = False
    coming_soon: bool = False
    county_name: Optional[str] = None

    source_url: Optional[str] = None
    fetched_at: datetime = Field(default_factory=now_utc)
    raw_data: Dict[str, Any] = Field(default_factory=dict)

    @property
    def is_error(self) -> bool:
        return self.error is not None

    @classmethod
    def failure(
        cls,
        message: str,
        kind: ErrorKind,
        *,
        jurisdiction_id: Optional[str] = None,
        property_id: Optional[str] = None,
        **flags: Any,
    ) -> "PropertyRecord":
        return cls(
            jurisdiction_id=jurisdiction_id,
            property_id=property_id,
            error=message,
            error_kind=kind,
            **flags,
        )
