"""Error taxonomy for the timeline service."""


class TrendMonitorError(Exception):
    """Base class for all trend monitor errors."""


class ScrapeError(TrendMonitorError):
    """Upstream page could not be fetched or parsed."""


class PersistenceError(TrendMonitorError):
    """Timeline or alert log could not be read or written."""


class DeliveryError(TrendMonitorError):
    """Notification transport rejected or failed to send an alert."""


class EntityNotFoundError(TrendMonitorError):
    """No tracked entity has the requested id."""

    def __init__(self, entity_id: str) -> None:
        super().__init__(f"Trend not found: {entity_id}")
        self.entity_id = entity_id
