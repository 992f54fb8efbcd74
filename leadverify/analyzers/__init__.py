"""
Analyzers for document evidence and motivation scoring.
"""
from .document_analyzer import (
    DocumentCorpusAnalyzer,
    analyze_locally,
    motivation_factors,
)
from .motivation_scorer import MotivationScorer
from .weights import (
    DEFAULT_RULES,
    RULE_SETS,
    TEXAS_CAD_RULES,
    DocumentWeights,
    WeightRule,
)

__all__ = [
    'DEFAULT_RULES',
    'DocumentCorpusAnalyzer',
    'DocumentWeights',
    'MotivationScorer',
    'RULE_SETS',
    'TEXAS_CAD_RULES',
    'WeightRule',
    'analyze_locally',
    'motivation_factors',
]
