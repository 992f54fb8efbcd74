"""Runtime settings resolved from the environment (``.env`` honored)."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from dotenv import load_dotenv

# Batch scheduling
DEFAULT_BATCH_SIZE = 10
DEFAULT_BATCH_PAUSE_SECONDS = 0.5

# Timeouts (seconds unless noted)
DEFAULT_EXTRACTION_TIMEOUT = 120.0
DEFAULT_NAVIGATION_TIMEOUT_MS = 30000
DEFAULT_ADAPTER_CALL_TIMEOUT = 90.0
DEFAULT_NLP_API_TIMEOUT = 15.0
DEFAULT_DOCUMENT_API_TIMEOUT = 30.0

# Result cache
DEFAULT_CACHE_TTL = 86400.0
DEFAULT_CACHE_CAPACITY = 2048
DEFAULT_CACHE_SWEEP_INTERVAL = 300.0

USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)

_TRUTHY = {"1", "true", "yes", "on"}


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in _TRUTHY


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return float(raw)


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return int(raw)


@dataclass(frozen=True, slots=True)
class Settings:
    env: str = "production"
    batch_size: int = DEFAULT_BATCH_SIZE
    batch_pause_seconds: float = DEFAULT_BATCH_PAUSE_SECONDS
    extraction_timeout: float = DEFAULT_EXTRACTION_TIMEOUT
    navigation_timeout_ms: int = DEFAULT_NAVIGATION_TIMEOUT_MS
    adapter_call_timeout: float = DEFAULT_ADAPTER_CALL_TIMEOUT
    headless: bool = True
    cache_ttl: float = DEFAULT_CACHE_TTL
    cache_capacity: int = DEFAULT_CACHE_CAPACITY
    cache_sweep_interval: float = DEFAULT_CACHE_SWEEP_INTERVAL
    nlp_api_url: str | None = None
    nlp_api_key: str | None = None
    nlp_api_timeout: float = DEFAULT_NLP_API_TIMEOUT
    document_api_url: str | None = None
    document_api_key: str | None = None
    document_api_timeout: float = DEFAULT_DOCUMENT_API_TIMEOUT
    allow_pro_override: bool = False
    log_level: str = "INFO"
    log_debug_file: str | None = None
    log_json: bool = False

    @property
    def is_production(self) -> bool:
        return self.env.lower() == "production"

    @property
    def analysis_service_enabled(self) -> bool:
        return bool(self.nlp_api_url and self.nlp_api_key)

    @property
    def document_service_enabled(self) -> bool:
        return bool(self.document_api_url)

    def resolve_pro(self, is_pro: bool | None, override: bool | None = None) -> bool:
        """Return the effective tier flag for one request.

        ``override`` is a non-production test affordance (query-parameter
        style bypass); it is ignored in production.
        """
        if override and self.allow_pro_override and not self.is_production:
            return True
        return bool(is_pro)


@lru_cache(maxsize=1)
def load_settings() -> Settings:
    """Build settings from env vars; cached for the process lifetime."""
    load_dotenv()
    return Settings(
        env=os.getenv("LEADVERIFY_ENV", "production"),
        batch_size=max(1, _env_int("LEADVERIFY_BATCH_SIZE", DEFAULT_BATCH_SIZE)),
        batch_pause_seconds=_env_float("LEADVERIFY_BATCH_PAUSE", DEFAULT_BATCH_PAUSE_SECONDS),
        extraction_timeout=_env_float("LEADVERIFY_EXTRACTION_TIMEOUT", DEFAULT_EXTRACTION_TIMEOUT),
        navigation_timeout_ms=_env_int("LEADVERIFY_NAVIGATION_TIMEOUT_MS", DEFAULT_NAVIGATION_TIMEOUT_MS),
        adapter_call_timeout=_env_float("LEADVERIFY_ADAPTER_TIMEOUT", DEFAULT_ADAPTER_CALL_TIMEOUT),
        headless=_env_bool("LEADVERIFY_HEADLESS", True),
        cache_ttl=_env_float("LEADVERIFY_CACHE_TTL", DEFAULT_CACHE_TTL),
        cache_capacity=_env_int("LEADVERIFY_CACHE_CAPACITY", DEFAULT_CACHE_CAPACITY),
        cache_sweep_interval=_env_float("LEADVERIFY_CACHE_SWEEP_INTERVAL", DEFAULT_CACHE_SWEEP_INTERVAL),
        nlp_api_url=os.getenv("NLP_API_URL") or None,
        nlp_api_key=os.getenv("NLP_API_KEY") or None,
        nlp_api_timeout=_env_float("NLP_API_TIMEOUT", DEFAULT_NLP_API_TIMEOUT),
        document_api_url=os.getenv("DOCUMENT_API_URL") or None,
        document_api_key=os.getenv("DOCUMENT_API_KEY") or None,
        document_api_timeout=_env_float("DOCUMENT_API_TIMEOUT", DEFAULT_DOCUMENT_API_TIMEOUT),
        allow_pro_override=_env_bool("LEADVERIFY_ALLOW_PRO_OVERRIDE", False),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        log_debug_file=os.getenv("LOG_DEBUG_FILE") or None,
        log_json=_env_bool("LOG_JSON", False),
    )
