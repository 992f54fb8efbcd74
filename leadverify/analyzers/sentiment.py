"""
Lexicon sentiment for recorded-document text.

Each sentence scores the mean of its token scores (AFINN-style integer
weights in [-5, 5]); a negation word flips the next scored token. The
corpus score is the sum over sentences clamped to [-5, 5].
"""

from __future__ import annotations

import re

SENTIMENT_MIN = -5.0
SENTIMENT_MAX = 5.0

LEXICON: dict[str, int] = {
    # distress / legal
    "abandon": -2, "abandoned": -2, "arrears": -2, "auction": -1, "bankrupt": -3,
    "bankruptcy": -3, "behind": -1, "broke": -3, "burden": -2, "collapse": -2,
    "collections": -2, "condemned": -3, "crisis": -3, "damage": -3, "damaged": -3,
    "deceased": -2, "default": -2, "defaulted": -2, "deficiency": -2, "delinquent": -2,
    "desperate": -3, "destroyed": -3, "difficult": -1, "difficulty": -2, "distress": -2,
    "distressed": -2, "divorce": -2, "eviction": -2, "evicted": -2, "fail": -2,
    "failed": -2, "failure": -2, "fines": -2, "foreclose": -2,
    "foreclosed": -2, "foreclosure": -2, "garnishment": -2, "hardship": -2, "illegal": -3,
    "insolvent": -3, "judgment": -1, "lawsuit": -2, "lien": -1, "liens": -1,
    "lose": -3, "losing": -3, "loss": -3, "lost": -3, "neglect": -2,
    "neglected": -2, "overdue": -2, "owed": -1, "owing": -1, "penalty": -2,
    "penalties": -2, "poor": -2, "problem": -2, "problems": -2, "repossession": -2,
    "risk": -2, "sad": -2, "seized": -2, "seizure": -2, "struggle": -2,
    "struggling": -2, "sued": -2, "trouble": -2, "unable": -2, "unpaid": -2,
    "unsafe": -2, "urgent": -1, "violation": -2, "violations": -2, "worse": -3,
    "worst": -3, "bad": -3, "death": -2, "died": -3, "dispute": -2,
    "disputed": -2, "vacant": -1, "dilapidated": -3, "hazard": -2, "infested": -3,
    # neutral-to-positive
    "approved": 2, "benefit": 2, "clean": 2, "clear": 1, "excellent": 3,
    "good": 3, "great": 3, "happy": 3, "improved": 2, "improvement": 2,
    "nice": 3, "paid": 1, "positive": 2, "resolved": 2, "satisfied": 2,
    "satisfaction": 2, "secure": 2, "stable": 2, "success": 2, "successful": 3,
    "updated": 1, "renovated": 2, "beautiful": 3, "well": 1, "current": 1,
}

NEGATIONS = frozenset({"not", "no", "never", "without", "cannot", "nor", "don", "isn", "wasn"})

_SENTENCE_RE = re.compile(r"[^.!?]+[.!?]+")
_TOKEN_RE = re.compile(r"[a-z0-9]+")


def tokenize(text: str) -> list[str]:
    return _TOKEN_RE.findall(text.lower())


def split_sentences(text: str) -> list[str]:
    sentences = _SENTENCE_RE.findall(text)
    return sentences or [text]


def sentence_score(tokens: list[str]) -> float:
    if not tokens:
        return 0.0
    total = 0
    negate = False
    for token in tokens:
        if token in NEGATIONS:
            negate = True
            continue
        weight = LEXICON.get(token)
        if weight is None:
            continue
        total += -weight if negate else weight
        negate = False
    return total / len(tokens)


def score_text(text: str) -> float:
    if not text or not text.strip():
        return 0.0
    total = sum(sentence_score(tokenize(s)) for s in split_sentences(text))
    return round(max(SENTIMENT_MIN, min(SENTIMENT_MAX, total)), 2)
