"""
Declarative weight tables for motivation scoring.

A rule set is an ordered tuple of ``WeightRule``. Every rule whose signal
matches contributes its points; within a ``group`` only the first matching
rule counts (tiered thresholds). New jurisdictions register a table here
rather than new scoring code.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any

from leadverify.jurisdictions.registry import (
    DEFAULT_RULE_SET,
    TEXAS_CAD_RULE_SET,
    Jurisdiction,
)
from leadverify.jurisdictions.resolver import STATE_NAMES, normalize_state
from leadverify.models import AnalysisResult, PropertyRecord


@dataclass(frozen=True, slots=True)
class WeightRule:
    name: str
    signal: str
    points: int
    op: str = "truthy"  # truthy | present | gt | lt
    threshold: float | None = None
    group: str | None = None

    def matches(self, value: Any) -> bool:
        if self.op == "truthy":
            return bool(value)
        if self.op == "present":
            return value is not None and value != ""
        if value is None:
            return False
        if self.op == "gt":
            return value > self.threshold
        if self.op == "lt":
            return value < self.threshold
        raise ValueError(f"Unknown weight rule op: {self.op}")


DEFAULT_RULES: tuple[WeightRule, ...] = (
    WeightRule("owner_verified", "owner_verified", 30),
    WeightRule("address_verified", "address_verified", 20),
    WeightRule("vacant", "vacant", 25),
    WeightRule("tax_delinquent", "tax_delinquent", 15),
    WeightRule("property_value", "property_value", 10, op="present"),
)

TEXAS_CAD_RULES: tuple[WeightRule, ...] = (
    WeightRule("vacant", "vacant", 30),
    WeightRule("tax_delinquent", "tax_delinquent", 25),
    WeightRule("amount_due_over_5000", "amount_due", 15, op="gt", threshold=5000, group="amount_due"),
    WeightRule("amount_due_over_2000", "amount_due", 10, op="gt", threshold=2000, group="amount_due"),
    WeightRule("out_of_state_owner", "out_of_state_owner", 10),
    WeightRule("built_before_1970", "year_built", 5, op="lt", threshold=1970),
    WeightRule("high_value_delinquent", "delinquent_value", 10, op="gt", threshold=300000),
)

RULE_SETS: dict[str, tuple[WeightRule, ...]] = {
    DEFAULT_RULE_SET: DEFAULT_RULES,
    TEXAS_CAD_RULE_SET: TEXAS_CAD_RULES,
}


@dataclass(frozen=True, slots=True)
class DocumentWeights:
    base: float = 40
    per_legal_category: float = 8
    legal_cap: float = 25
    financial_multiplier: float = 10
    financial_cap: float = 20
    motivation_multiplier: float = 5
    motivation_cap: float = 15
    sentiment_multiplier: float = 2
    sentiment_cap: float = 10


DOCUMENT_WEIGHTS = DocumentWeights()


def rules_for(jurisdiction: Jurisdiction | None) -> tuple[WeightRule, ...]:
    if jurisdiction is None:
        return DEFAULT_RULES
    return RULE_SETS.get(jurisdiction.rule_set, DEFAULT_RULES)


def is_out_of_state(mailing_address: str | None, state: str | None) -> bool:
    """Mailing address present and mentions neither the state code nor its name."""
    if not mailing_address or not state:
        return False
    abbr = normalize_state(state)
    text = mailing_address.lower()
    if re.search(rf"\b{re.escape(abbr)}\b", text):
        return False
    name = STATE_NAMES.get(abbr)
    return not (name and name in text)


def record_signals(record: PropertyRecord, jurisdiction: Jurisdiction | None = None) -> dict[str, Any]:
    delinquent = record.tax.delinquent
    return {
        "owner_verified": record.owner_verified,
        "address_verified": record.address_verified,
        "vacant": record.vacant,
        "tax_delinquent": delinquent,
        "amount_due": record.tax.amount_due,
        "property_value": record.property_value,
        "year_built": record.characteristics.year_built,
        "out_of_state_owner": is_out_of_state(
            record.owner_mailing_address, jurisdiction.state if jurisdiction else None
        ),
        "delinquent_value": record.property_value if delinquent else None,
    }


def evaluate_rules(rules: tuple[WeightRule, ...], signals: dict[str, Any]) -> dict[str, float]:
    """Return ``{rule name: points}`` for every rule that fires."""
    components: dict[str, float] = {}
    taken_groups: set[str] = set()
    for rule in rules:
        if rule.group and rule.group in taken_groups:
            continue
        if rule.matches(signals.get(rule.signal)):
            components[rule.name] = rule.points
            if rule.group:
                taken_groups.add(rule.group)
    return components


def document_components(
    analysis: AnalysisResult, weights: DocumentWeights = DOCUMENT_WEIGHTS
) -> dict[str, float]:
    components = {"base": weights.base}
    detected = sum(1 for match in analysis.legal_status.values() if match.detected)
    legal = min(weights.legal_cap, weights.per_legal_category * detected)
    if legal:
        components["legal_status"] = legal
    financial = min(
        weights.financial_cap,
        sum(i.strength for i in analysis.financial_indicators) * weights.financial_multiplier,
    )
    if financial:
        components["financial_indicators"] = round(financial, 2)
    motivation = min(
        weights.motivation_cap,
        sum(t.strength for t in analysis.motivation_terms) * weights.motivation_multiplier,
    )
    if motivation:
        components["motivation_terms"] = round(motivation, 2)
    if analysis.sentiment < 0:
        components["negative_sentiment"] = round(
            min(weights.sentiment_cap, abs(analysis.sentiment) * weights.sentiment_multiplier), 2
        )
    return components


def clamp_score(total: float) -> int:
    return min(100, max(0, round(total)))
