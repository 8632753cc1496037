"""Business logic use cases."""

import asyncio
import logging
from dataclasses import replace
from datetime import datetime, timezone
from typing import Any, Optional

from trend_monitor.core import (
    AlertRecord,
    AlertSettings,
    AlertStatus,
    DeliveryError,
    EntityNotFoundError,
    Notifier,
    PersistenceError,
    SortKey,
    TimelineStats,
    TimelineStore,
    TrackedEntity,
    TrendSource,
    UpdateSummary,
    is_political_topic,
    reconcile,
    should_alert,
)

logger = logging.getLogger(__name__)

EXPORT_SOURCE = "Trend Calendar US (us.trend-calendar.com)"
ALL_CATEGORIES = "All"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TimelineService:
    """Run update cycles and answer timeline queries.

    Update cycles and settings changes share one lock, so a manual trigger
    arriving during a scheduled cycle waits for it instead of racing it on
    the same persisted timeline.
    """

    def __init__(
        self,
        source: TrendSource,
        store: TimelineStore,
        notifier: Optional[Notifier] = None,
        alert_settings: Optional[AlertSettings] = None,
    ) -> None:
        self.source = source
        self.store = store
        self.notifier = notifier
        self._alert_settings = alert_settings or AlertSettings()
        self._lock = asyncio.Lock()

    @property
    def is_updating(self) -> bool:
        return self._lock.locked()

    async def run_update(self, now: Optional[datetime] = None) -> UpdateSummary:
        """Scrape, reconcile, persist and alert once.

        Raises:
            PersistenceError: If the updated timeline could not be saved.
        """
        async with self._lock:
            return await self._run_update(now or _utcnow())

    async def _run_update(self, now: datetime) -> UpdateSummary:
        try:
            scraped = await self.source.fetch_ranked_topics()
        except Exception:
            logger.exception("Stage scrape: unexpected failure, continuing with an empty scrape")
            scraped = []

        political = [t for t in scraped if is_political_topic(t.topic)]
        logger.info("Found %d political trends out of %d total", len(political), len(scraped))

        try:
            prior = self.store.load_entities()
        except PersistenceError as e:
            logger.error("Stage load: %s; starting from an empty timeline", e)
            prior = {}

        result = reconcile(political, prior, now)

        for entity in result.created:
            logger.info("New political trend: %s (%s)", entity.topic, entity.category.value)
        for entity in result.deactivated:
            logger.info("Trend ended: %s (lasted %d minutes)", entity.topic, entity.duration_minutes)

        self.store.save_entities(result.entities)

        settings = self._alert_settings
        for entity in result.created:
            if should_alert(entity, settings):
                await self._dispatch_alert(entity, settings, now)

        return UpdateSummary(
            total=len(result.entities),
            new=len(result.created),
            active=len(political),
        )

    async def _dispatch_alert(
        self, entity: TrackedEntity, settings: AlertSettings, now: datetime
    ) -> AlertRecord:
        """Deliver one alert and record the outcome."""
        delivery_id = None
        error = None

        if self.notifier is None or not self.notifier.is_configured or not settings.email:
            logger.warning("Email not configured. Alert would be sent for: %s", entity.topic)
            status = AlertStatus.WOULD_SEND
        else:
            try:
                delivery = await self.notifier.deliver(entity, settings)
                status = AlertStatus.SENT if delivery.delivered else AlertStatus.FAILED
                delivery_id = delivery.id
            except DeliveryError as e:
                logger.error("Stage notify: alert for '%s' failed: %s", entity.topic, e)
                status = AlertStatus.FAILED
                error = str(e)
            except Exception as e:
                logger.exception("Stage notify: unexpected error alerting for '%s'", entity.topic)
                status = AlertStatus.FAILED
                error = f"{type(e).__name__}: {e}"

        record = AlertRecord(
            timestamp=now,
            topic=entity.topic,
            category=entity.category,
            rank=entity.current_rank,
            status=status,
            delivery_id=delivery_id,
            error=error,
        )

        try:
            self.store.append_alert(record)
        except PersistenceError as e:
            logger.error("Stage alert log: could not record alert for '%s': %s", entity.topic, e)

        return record

    def list_entities(
        self,
        category: Optional[str] = None,
        active_only: bool = False,
        sort_by: SortKey = SortKey.FIRST_SEEN,
    ) -> list[TrackedEntity]:
        """List tracked entities with optional filters.

        Args:
            category: Category name to match; None or "All" for every category
            active_only: Only return entities in the latest scrape
            sort_by: duration (longest first), rank (best first) or
                first_seen (newest first)
        """
        entities = list(self.store.load_entities().values())

        if category and category != ALL_CATEGORIES:
            entities = [e for e in entities if e.category.value == category]

        if active_only:
            entities = [e for e in entities if e.is_active]

        if sort_by == SortKey.DURATION:
            entities.sort(key=lambda e: e.duration_minutes, reverse=True)
        elif sort_by == SortKey.RANK:
            entities.sort(key=lambda e: e.current_rank)
        else:
            entities.sort(key=lambda e: e.first_seen, reverse=True)

        return entities

    def get_entity(self, entity_id: str) -> TrackedEntity:
        """Fetch one entity by id.

        Raises:
            EntityNotFoundError: If no entity has this id.
        """
        for entity in self.store.load_entities().values():
            if entity.id == entity_id:
                return entity
        raise EntityNotFoundError(entity_id)

    def list_alerts(self) -> list[AlertRecord]:
        return self.store.load_alert_log()

    def get_settings(self) -> AlertSettings:
        return replace(self._alert_settings)

    async def update_settings(self, changes: dict[str, Any]) -> AlertSettings:
        """Merge changes into the alert settings; missing fields keep their value.

        Raises:
            ValueError: If a field is unknown or a value is invalid.
        """
        unknown = set(changes) - {"email", "min_rank", "enabled_categories", "frequency"}
        if unknown:
            raise ValueError(f"Unknown settings fields: {', '.join(sorted(unknown))}")

        async with self._lock:
            merged = {
                "email": self._alert_settings.email,
                "min_rank": self._alert_settings.min_rank,
                "enabled_categories": self._alert_settings.enabled_categories,
                "frequency": self._alert_settings.frequency,
                **changes,
            }
            # AlertSettings validates and coerces; the old value survives a failure
            self._alert_settings = AlertSettings(**merged)
            logger.info("Alert settings updated: %s", ", ".join(sorted(changes)) or "no changes")
            return replace(self._alert_settings)

    def compute_stats(self) -> TimelineStats:
        """Aggregate counts and durations over the whole timeline."""
        entities = list(self.store.load_entities().values())
        alerts = self.store.load_alert_log()

        active = [e for e in entities if e.is_active]

        categories: dict[str, int] = {}
        for entity in entities:
            categories[entity.category.value] = categories.get(entity.category.value, 0) + 1

        average_duration = 0
        if active:
            average_duration = int(sum(e.duration_minutes for e in active) / len(active) + 0.5)

        longest_trend = None
        if entities:
            longest = max(entities, key=lambda e: e.duration_minutes)
            longest_trend = {"topic": longest.topic, "duration": longest.duration_minutes}

        return TimelineStats(
            total_trends=len(entities),
            active_trends=len(active),
            inactive_trends=len(entities) - len(active),
            total_alerts=len(alerts),
            categories=categories,
            average_duration=average_duration,
            longest_trend=longest_trend,
        )

    def export_snapshot(self, now: Optional[datetime] = None) -> dict[str, Any]:
        """Full dump of entities, alerts and settings."""
        return {
            "trends": [e.to_dict() for e in self.list_entities()],
            "alerts": [a.to_dict() for a in self.list_alerts()],
            "settings": self._alert_settings.to_dict(),
            "exported_at": (now or _utcnow()).isoformat(),
            "source": EXPORT_SOURCE,
        }
