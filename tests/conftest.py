"""Shared fixtures."""

from datetime import datetime, timezone

import pytest

from trend_monitor.core import Category, SentimentLabel, TrackedEntity

T0 = datetime(2025, 11, 3, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def make_entity():
    """Factory for tracked entities with sensible defaults."""
    def _make(topic: str = "Election Results", **overrides) -> TrackedEntity:
        fields = dict(
            id=f"id-{topic.lower().replace(' ', '-')}",
            topic=topic,
            category=Category.ELECTIONS,
            first_seen=T0,
            last_seen=T0,
            duration_minutes=0,
            check_count=1,
            current_rank=5,
            lowest_rank=5,
            highest_rank=5,
            sentiment_score=0.0,
            sentiment_label=SentimentLabel.NEUTRAL,
            is_active=True,
        )
        fields.update(overrides)
        return TrackedEntity(**fields)

    return _make
