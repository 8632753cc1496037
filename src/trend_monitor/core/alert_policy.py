"""Decide whether a newly detected trend warrants an alert."""

from trend_monitor.core.entities import AlertSettings, TrackedEntity


def should_alert(entity: TrackedEntity, settings: AlertSettings) -> bool:
    """Check rank threshold and category filter.

    Only evaluated for entities created in the current pass, so a topic
    alerts at most once however long it keeps trending.
    """
    if entity.current_rank > settings.min_rank:
        return False
    return entity.category in settings.enabled_categories
