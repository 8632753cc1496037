"""Core domain entities."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional


class Category(str, Enum):
    """Political category assigned to a tracked topic."""

    ELECTIONS = "Elections"
    CONGRESS = "Congress"
    WHITE_HOUSE = "White House"
    JUDICIAL = "Judicial"
    STATE_LOCAL = "State & Local"
    FOREIGN_POLICY = "Foreign Policy"
    ECONOMY = "Economy"
    GENERAL = "General Politics"


class SentimentLabel(str, Enum):
    """Categorical sentiment derived from the sentiment score."""

    POSITIVE = "Positive"
    SLIGHTLY_POSITIVE = "Slightly Positive"
    NEUTRAL = "Neutral"
    SLIGHTLY_NEGATIVE = "Slightly Negative"
    NEGATIVE = "Negative"


class AlertStatus(str, Enum):
    """Outcome of an alert dispatch."""

    SENT = "Sent"
    FAILED = "Failed"
    WOULD_SEND = "WouldSend"


class FrequencyMode(str, Enum):
    """Notification frequency preference."""

    IMMEDIATE = "Immediate"
    HOURLY = "Hourly"
    DAILY = "Daily"


class SortKey(str, Enum):
    """Ordering of timeline queries."""

    DURATION = "duration"
    RANK = "rank"
    FIRST_SEEN = "first_seen"


def normalize_topic(topic: str) -> str:
    """Lookup key for a topic: trimmed and lower-cased."""
    return topic.strip().lower()


@dataclass
class RankedTopic:
    """One ranked entry scraped from the trends page."""

    rank: int
    topic: str
    source: str = "X (Twitter)"

    def __post_init__(self) -> None:
        if self.rank < 1:
            raise ValueError("Rank must be a positive integer")
        if not self.topic or not self.topic.strip():
            raise ValueError("Topic cannot be empty")

    @property
    def key(self) -> str:
        return normalize_topic(self.topic)


@dataclass
class Sentiment:
    """Keyword sentiment of a topic."""

    score: float
    label: SentimentLabel


@dataclass
class TrackedEntity:
    """Timeline entry for one distinct topic."""

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
    sentiment_score: float
    sentiment_label: SentimentLabel
    is_active: bool
    source: str = "Trend Calendar"

    @property
    def key(self) -> str:
        return normalize_topic(self.topic)

    def to_dict(self) -> dict:
        """Serialize to plain types (used by the store and the API)."""
        return {
            "id": self.id,
            "topic": self.topic,
            "category": self.category.value,
            "first_seen": self.first_seen.isoformat(),
            "last_seen": self.last_seen.isoformat(),
            "duration_minutes": self.duration_minutes,
            "check_count": self.check_count,
            "current_rank": self.current_rank,
            "lowest_rank": self.lowest_rank,
            "highest_rank": self.highest_rank,
            "sentiment_score": self.sentiment_score,
            "sentiment_label": self.sentiment_label.value,
            "is_active": self.is_active,
            "source": self.source,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "TrackedEntity":
        return cls(
            id=str(data["id"]),
            topic=data["topic"],
            category=Category(data["category"]),
            first_seen=_parse_datetime(data["first_seen"]),
            last_seen=_parse_datetime(data["last_seen"]),
            duration_minutes=int(data["duration_minutes"]),
            check_count=int(data["check_count"]),
            current_rank=int(data["current_rank"]),
            lowest_rank=int(data["lowest_rank"]),
            highest_rank=int(data["highest_rank"]),
            sentiment_score=float(data["sentiment_score"]),
            sentiment_label=SentimentLabel(data["sentiment_label"]),
            is_active=bool(data["is_active"]),
            source=data.get("source", "Trend Calendar"),
        )


@dataclass(frozen=True)
class AlertRecord:
    """Append-only alert log entry."""

    timestamp: datetime
    topic: str
    category: Category
    rank: int
    status: AlertStatus
    delivery_id: Optional[str] = None
    error: Optional[str] = None

    def to_dict(self) -> dict:
        data = {
            "timestamp": self.timestamp.isoformat(),
            "topic": self.topic,
            "category": self.category.value,
            "rank": self.rank,
            "status": self.status.value,
        }
        if self.delivery_id is not None:
            data["delivery_id"] = self.delivery_id
        if self.error is not None:
            data["error"] = self.error
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "AlertRecord":
        return cls(
            timestamp=_parse_datetime(data["timestamp"]),
            topic=data["topic"],
            category=Category(data["category"]),
            rank=int(data["rank"]),
            status=AlertStatus(data["status"]),
            delivery_id=data.get("delivery_id"),
            error=data.get("error"),
        )


DEFAULT_ALERT_CATEGORIES = frozenset({
    Category.ELECTIONS,
    Category.CONGRESS,
    Category.WHITE_HOUSE,
    Category.JUDICIAL,
    Category.FOREIGN_POLICY,
})


@dataclass
class AlertSettings:
    """User-adjustable alert settings."""

    email: str = ""
    min_rank: int = 50
    enabled_categories: frozenset[Category] = field(
        default_factory=lambda: DEFAULT_ALERT_CATEGORIES
    )
    frequency: FrequencyMode = FrequencyMode.IMMEDIATE

    def __post_init__(self) -> None:
        if self.min_rank < 1:
            raise ValueError("min_rank must be a positive integer")
        self.enabled_categories = frozenset(Category(c) for c in self.enabled_categories)
        self.frequency = FrequencyMode(self.frequency)

    def to_dict(self) -> dict:
        return {
            "email": self.email,
            "min_rank": self.min_rank,
            # Keep the enumeration order for stable output
            "enabled_categories": [c.value for c in Category if c in self.enabled_categories],
            "frequency": self.frequency.value,
        }


@dataclass
class DeliveryResult:
    """Result returned by a notifier."""

    delivered: bool
    id: Optional[str] = None


@dataclass
class ReconcileResult:
    """Outcome of one reconciliation pass."""

    entities: dict[str, TrackedEntity]
    created: list[TrackedEntity]
    deactivated: list[TrackedEntity]


@dataclass
class UpdateSummary:
    """Counts reported after an update cycle."""

    total: int
    new: int
    active: int


@dataclass
class TimelineStats:
    """Aggregate statistics over the timeline."""

    total_trends: int
    active_trends: int
    inactive_trends: int
    total_alerts: int
    categories: dict[str, int]
    average_duration: int
    longest_trend: Optional[dict]


def _parse_datetime(value) -> datetime:
    # PyYAML already yields datetime objects for unquoted ISO timestamps
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value))
