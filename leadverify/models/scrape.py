from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field

from leadverify.models.property import PropertyCandidate
from leadverify.utils.time import now_utc


class ScrapeStatus(Enum):
    SUCCESS = "SUCCESS"             # Data found and parsed
    NO_RESULTS = "NO_RESULTS"       # Page loaded, search ran, but returned 0 items
    NETWORK_ERROR = "NETWORK_ERROR" # DNS, connection refused, net:: errors
    TIMEOUT = "TIMEOUT"             # Navigation or caller deadline expired
    BLOCKED = "BLOCKED"             # 403, Cloudflare, Captcha detected
    PARSING_ERROR = "PARSING_ERROR" # HTML structure changed
    INVALID_QUERY = "INVALID_QUERY" # Not enough input to run the search
    UNKNOWN_ERROR = "UNKNOWN_ERROR"


class ScrapeResult(BaseModel):
    status: ScrapeStatus
    candidates: List[PropertyCandidate] = Field(default_factory=list)
    message: str = "" # Human readable explanation
    error_details: Optional[str] = None # Stack trace or error code
    timestamp: datetime = Field(default_factory=now_utc)
    source_name: str

    @property
    def is_error(self) -> bool:
        return self.status not in (ScrapeStatus.SUCCESS, ScrapeStatus.NO_RESULTS)

    @classmethod
    def found(cls, source_name: str, candidates: List[PropertyCandidate]) -> "ScrapeResult":
        status = ScrapeStatus.SUCCESS if candidates else ScrapeStatus.NO_RESULTS
        return cls(status=status, source_name=source_name, candidates=candidates)
