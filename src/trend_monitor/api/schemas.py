"""API response/request schemas."""

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from trend_monitor.core import (
    AlertRecord,
    AlertSettings,
    Category,
    FrequencyMode,
    TimelineStats,
    TrackedEntity,
)


# -- Trends --

class TrendResponse(BaseModel):
    id: str
    topic: str
    category: Category
    first_seen: datetime
    last_seen: datetime
    duration_minutes: int
    check_count: int
    current_rank: int
    lowest_rank: int
    highest_rank: int
    sentiment: float
    sentiment_label: str
    is_active: bool
    source: str

    @classmethod
    def from_entity(cls, entity: TrackedEntity) -> "TrendResponse":
        return cls(
            id=entity.id,
            topic=entity.topic,
            category=entity.category,
            first_seen=entity.first_seen,
            last_seen=entity.last_seen,
            duration_minutes=entity.duration_minutes,
            check_count=entity.check_count,
            current_rank=entity.current_rank,
            lowest_rank=entity.lowest_rank,
            highest_rank=entity.highest_rank,
            sentiment=entity.sentiment_score,
            sentiment_label=entity.sentiment_label.value,
            is_active=entity.is_active,
            source=entity.source,
        )


class UpdateStats(BaseModel):
    total: int
    new: int
    active: int


class UpdateResponse(BaseModel):
    success: bool
    message: str
    stats: UpdateStats


# -- Alerts --

class AlertResponse(BaseModel):
    timestamp: datetime
    topic: str
    category: Category
    rank: int
    status: str
    delivery_id: Optional[str] = None
    error: Optional[str] = None

    @classmethod
    def from_record(cls, record: AlertRecord) -> "AlertResponse":
        return cls(
            timestamp=record.timestamp,
            topic=record.topic,
            category=record.category,
            rank=record.rank,
            status=record.status.value,
            delivery_id=record.delivery_id,
            error=record.error,
        )


# -- Settings --

class SettingsResponse(BaseModel):
    email: str
    min_rank: int
    enabled_categories: List[Category]
    frequency: FrequencyMode

    @classmethod
    def from_settings(cls, settings: AlertSettings) -> "SettingsResponse":
        data = settings.to_dict()
        return cls(**data)


class SettingsUpdate(BaseModel):
    """Partial settings update; omitted fields keep their current value."""
    email: Optional[str] = None
    min_rank: Optional[int] = Field(default=None, ge=1)
    enabled_categories: Optional[List[Category]] = None
    frequency: Optional[FrequencyMode] = None


# -- Stats --

class LongestTrend(BaseModel):
    topic: str
    duration: int


class StatsResponse(BaseModel):
    total_trends: int
    active_trends: int
    inactive_trends: int
    total_alerts: int
    categories: Dict[str, int] = Field(default_factory=dict)
    average_duration: int
    longest_trend: Optional[LongestTrend] = None

    @classmethod
    def from_stats(cls, stats: TimelineStats) -> "StatsResponse":
        return cls(
            total_trends=stats.total_trends,
            active_trends=stats.active_trends,
            inactive_trends=stats.inactive_trends,
            total_alerts=stats.total_alerts,
            categories=stats.categories,
            average_duration=stats.average_duration,
            longest_trend=LongestTrend(**stats.longest_trend) if stats.longest_trend else None,
        )
