"""Source adapters for fetching trend rankings."""

from trend_monitor.adapters.sources.trend_calendar_source import (
    TrendCalendarSource,
    parse_ranked_topics,
)

__all__ = ["TrendCalendarSource", "parse_ranked_topics"]
