"""
County source adapters and the static {jurisdiction id: adapter} binding.
"""
from leadverify.config import Settings
from leadverify.jurisdictions.registry import JurisdictionRegistry

from .base import CountyScraper, PropertySource
from .dallas_county import DallasCountyScraper
from .harris_county import HarrisCountyScraper

SOURCE_ADAPTERS: dict[str, type[CountyScraper]] = {
    "harris_county": HarrisCountyScraper,
    "dallas_county": DallasCountyScraper,
}


def build_sources(registry: JurisdictionRegistry, settings: Settings) -> dict[str, PropertySource]:
    """Instantiate one adapter per registered jurisdiction that has a binding."""
    sources: dict[str, PropertySource] = {}
    for jurisdiction in registry:
        adapter_cls = SOURCE_ADAPTERS.get(jurisdiction.id)
        if adapter_cls is None:
            continue
        sources[jurisdiction.id] = adapter_cls(
            jurisdiction,
            headless=settings.headless,
            navigation_timeout_ms=settings.navigation_timeout_ms,
            call_timeout=settings.adapter_call_timeout,
        )
    return sources


__all__ = [
    'CountyScraper',
    'DallasCountyScraper',
    'HarrisCountyScraper',
    'PropertySource',
    'SOURCE_ADAPTERS',
    'build_sources',
]
