"""Storage adapters."""

from trend_monitor.adapters.storage.yaml_store import YamlTimelineStore

__all__ = ["YamlTimelineStore"]
