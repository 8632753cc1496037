"""Core interfaces for adapters."""

from abc import ABC, abstractmethod

from trend_monitor.core.entities import (
    AlertRecord,
    AlertSettings,
    DeliveryResult,
    RankedTopic,
    TrackedEntity,
)


class TrendSource(ABC):
    """Interface for fetching ranked trending topics."""

    @abstractmethod
    async def fetch_ranked_topics(self) -> list[RankedTopic]:
        """Fetch the current ranking. Returns an empty list on any failure."""
        pass


class TimelineStore(ABC):
    """Interface for persisting tracked entities and the alert log."""

    @abstractmethod
    def load_entities(self) -> dict[str, TrackedEntity]:
        """Load the mapping of normalized topic key to entity."""
        pass

    @abstractmethod
    def save_entities(self, entities: dict[str, TrackedEntity]) -> None:
        """Replace the persisted mapping."""
        pass

    @abstractmethod
    def load_alert_log(self) -> list[AlertRecord]:
        """Load all alert records, oldest first."""
        pass

    @abstractmethod
    def append_alert(self, record: AlertRecord) -> None:
        """Append one record to the alert log."""
        pass


class Notifier(ABC):
    """Interface for delivering trend alerts."""

    @property
    @abstractmethod
    def is_configured(self) -> bool:
        """Whether the transport has the credentials it needs."""
        pass

    @abstractmethod
    async def deliver(self, entity: TrackedEntity, settings: AlertSettings) -> DeliveryResult:
        """Deliver an alert for the entity. Raises DeliveryError on failure."""
        pass
