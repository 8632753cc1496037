"""Core domain layer."""

from trend_monitor.core.alert_policy import should_alert
from trend_monitor.core.classifier import categorize, is_political_topic, score_sentiment
from trend_monitor.core.entities import (
    AlertRecord,
    AlertSettings,
    AlertStatus,
    Category,
    DeliveryResult,
    FrequencyMode,
    RankedTopic,
    ReconcileResult,
    Sentiment,
    SentimentLabel,
    SortKey,
    TimelineStats,
    TrackedEntity,
    UpdateSummary,
    normalize_topic,
)
from trend_monitor.core.errors import (
    DeliveryError,
    EntityNotFoundError,
    PersistenceError,
    ScrapeError,
    TrendMonitorError,
)
from trend_monitor.core.interfaces import Notifier, TimelineStore, TrendSource
from trend_monitor.core.reconciler import reconcile

__all__ = [
    "AlertRecord",
    "AlertSettings",
    "AlertStatus",
    "Category",
    "DeliveryResult",
    "FrequencyMode",
    "RankedTopic",
    "ReconcileResult",
    "Sentiment",
    "SentimentLabel",
    "SortKey",
    "TimelineStats",
    "TrackedEntity",
    "UpdateSummary",
    "normalize_topic",
    "TrendMonitorError",
    "ScrapeError",
    "PersistenceError",
    "DeliveryError",
    "EntityNotFoundError",
    "TrendSource",
    "TimelineStore",
    "Notifier",
    "is_political_topic",
    "categorize",
    "score_sentiment",
    "reconcile",
    "should_alert",
]
