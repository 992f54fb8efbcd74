from .registry import (
    DEFAULT_JURISDICTIONS,
    DEFAULT_RULE_SET,
    TEXAS_CAD_RULE_SET,
    Jurisdiction,
    JurisdictionRegistry,
    default_registry,
)
from .resolver import JurisdictionResolver, normalize_state, resolve

__all__ = [
    'DEFAULT_JURISDICTIONS',
    'DEFAULT_RULE_SET',
    'TEXAS_CAD_RULE_SET',
    'Jurisdiction',
    'JurisdictionRegistry',
    'JurisdictionResolver',
    'default_registry',
    'normalize_state',
    'resolve',
]
