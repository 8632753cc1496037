"""Keyword classification of trending topics.

Political detection uses plain substring matching over the lower-cased topic,
so short keywords also match inside longer words ("poll" in "pollution").
Categorization walks an ordered list of keyword groups and the first group
with a hit wins. Sentiment adds up every keyword hit.
"""

import re

from trend_monitor.core.entities import Category, Sentiment, SentimentLabel

POLITICAL_KEYWORDS: tuple[str, ...] = (
    "election", "vote", "voting", "ballot", "poll",
    "congress", "senate", "house", "representative",
    "president", "biden", "trump", "potus", "white house",
    "governor", "mayor", "legislation", "bill",
    "supreme court", "scotus", "justice", "court",
    "policy", "executive order", "veto",
    "democrat", "republican", "gop", "dnc", "rnc",
    "campaign", "debate", "primary", "caucus",
    "impeach", "filibuster", "partisan",
    "constitutional", "amendment", "federal",
    "government", "capitol", "washington",
    "hearing", "testimony",
    "state department", "secretary", "cabinet",
    "nato", "foreign policy", "sanctions",
    "budget", "spending", "deficit", "fiscal",
    "immigration", "border", "visa", "asylum",
)

# Priority order matters: a topic matching several groups gets the first one.
CATEGORY_PATTERNS: tuple[tuple[Category, re.Pattern], ...] = (
    (Category.ELECTIONS, re.compile(r"election|vote|ballot|poll|campaign")),
    (Category.CONGRESS, re.compile(r"congress|senate|house|representative|filibuster")),
    (Category.WHITE_HOUSE, re.compile(r"president|white house|potus|executive order")),
    (Category.JUDICIAL, re.compile(r"supreme court|scotus|justice|ruling|court")),
    (Category.STATE_LOCAL, re.compile(r"governor|state|local|mayor")),
    (Category.FOREIGN_POLICY, re.compile(r"foreign|nato|sanctions|diplomat|embassy")),
    (Category.ECONOMY, re.compile(r"budget|spending|deficit|fiscal|economy")),
)

POSITIVE_WORDS: tuple[str, ...] = (
    "win", "victory", "success", "improve", "growth", "peace", "unity",
)
NEGATIVE_WORDS: tuple[str, ...] = (
    "scandal", "crisis", "fail", "attack", "war", "crime", "death",
)

SENTIMENT_STEP = 0.3


def is_political_topic(topic: str) -> bool:
    """Check whether a topic contains any political keyword (case-insensitive)."""
    lower = topic.lower()
    return any(keyword in lower for keyword in POLITICAL_KEYWORDS)


def categorize(topic: str) -> Category:
    """Assign the first matching category, falling back to General Politics."""
    lower = topic.lower()
    for category, pattern in CATEGORY_PATTERNS:
        if pattern.search(lower):
            return category
    return Category.GENERAL


def score_sentiment(topic: str) -> Sentiment:
    """Score a topic in [-1, 1] from positive and negative keyword hits."""
    lower = topic.lower()
    score = 0.0

    for word in POSITIVE_WORDS:
        if word in lower:
            score += SENTIMENT_STEP

    for word in NEGATIVE_WORDS:
        if word in lower:
            score -= SENTIMENT_STEP

    score = round(max(-1.0, min(1.0, score)), 2)
    return Sentiment(score=score, label=sentiment_label(score))


def sentiment_label(score: float) -> SentimentLabel:
    """Map a sentiment score to its label."""
    if score > 0.3:
        return SentimentLabel.POSITIVE
    if score < -0.3:
        return SentimentLabel.NEGATIVE
    if score > 0.1:
        return SentimentLabel.SLIGHTLY_POSITIVE
    if score < -0.1:
        return SentimentLabel.SLIGHTLY_NEGATIVE
    return SentimentLabel.NEUTRAL
