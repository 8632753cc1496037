"""YAML file persistence for the timeline and the alert log."""

import logging
import os
from contextlib import suppress
from pathlib import Path
from typing import Any

import yaml

from trend_monitor.core import AlertRecord, PersistenceError, TimelineStore, TrackedEntity

logger = logging.getLogger(__name__)


class YamlTimelineStore(TimelineStore):
    """Keep tracked entities and alert records as two YAML documents."""

    def __init__(self, timeline_path: Path, alerts_path: Path) -> None:
        self.timeline_path = timeline_path
        self.alerts_path = alerts_path

    def load_entities(self) -> dict[str, TrackedEntity]:
        """Load entities keyed by normalized topic. Missing file means empty."""
        rows = self._read_list(self.timeline_path)
        entities: dict[str, TrackedEntity] = {}

        for row in rows:
            try:
                entity = TrackedEntity.from_dict(row)
            except (KeyError, TypeError, ValueError) as e:
                raise PersistenceError(f"Malformed entry in {self.timeline_path}: {e}") from e
            entities[entity.key] = entity

        return entities

    def save_entities(self, entities: dict[str, TrackedEntity]) -> None:
        rows = [entity.to_dict() for entity in entities.values()]
        self._write_list(self.timeline_path, rows)
        logger.debug("Saved %d entities to %s", len(rows), self.timeline_path)

    def load_alert_log(self) -> list[AlertRecord]:
        rows = self._read_list(self.alerts_path)
        try:
            return [AlertRecord.from_dict(row) for row in rows]
        except (KeyError, TypeError, ValueError) as e:
            raise PersistenceError(f"Malformed entry in {self.alerts_path}: {e}") from e

    def append_alert(self, record: AlertRecord) -> None:
        rows = self._read_list(self.alerts_path)
        rows.append(record.to_dict())
        self._write_list(self.alerts_path, rows)

    def _read_list(self, path: Path) -> list[dict[str, Any]]:
        if not path.exists():
            return []

        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            raise PersistenceError(f"Could not read {path}: {e}") from e

        if data is None:
            return []
        if not isinstance(data, list):
            raise PersistenceError(f"Expected a list in {path}, got {type(data).__name__}")
        return data

    def _write_list(self, path: Path, rows: list[dict[str, Any]]) -> None:
        # Write next to the target and swap, so a crash never leaves half a file
        tmp_path = path.with_name(path.name + ".tmp")
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, "w", encoding="utf-8") as f:
                yaml.safe_dump(rows, f, allow_unicode=True, default_flow_style=False, sort_keys=False)
            os.replace(tmp_path, path)
        except (OSError, yaml.YAMLError) as e:
            with suppress(OSError):
                tmp_path.unlink()
            raise PersistenceError(f"Could not write {path}: {e}") from e
