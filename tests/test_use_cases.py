"""Tests for use cases."""

import asyncio
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, Mock

import pytest

from trend_monitor.adapters.storage import YamlTimelineStore
from trend_monitor.core import (
    AlertSettings,
    AlertStatus,
    Category,
    DeliveryError,
    DeliveryResult,
    EntityNotFoundError,
    FrequencyMode,
    PersistenceError,
    RankedTopic,
    SortKey,
    UpdateSummary,
)
from trend_monitor.use_cases import EXPORT_SOURCE, TimelineService

T0 = datetime(2025, 11, 3, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def store(tmp_path):
    return YamlTimelineStore(tmp_path / "timeline.yaml", tmp_path / "alerts.yaml")


@pytest.fixture
def source():
    mock_source = AsyncMock()
    mock_source.fetch_ranked_topics.return_value = [RankedTopic(rank=1, topic="Election Results")]
    return mock_source


def make_notifier(configured: bool = True) -> Mock:
    notifier = Mock()
    notifier.is_configured = configured
    notifier.deliver = AsyncMock(return_value=DeliveryResult(delivered=True, id="msg-1"))
    return notifier


def settings(**overrides) -> AlertSettings:
    fields = dict(email="alerts@example.com", min_rank=50, enabled_categories={Category.ELECTIONS})
    fields.update(overrides)
    return AlertSettings(**fields)


@pytest.mark.asyncio
async def test_run_update_end_to_end(source, store) -> None:
    """Test one cycle on an empty store creates, persists and alerts."""
    notifier = make_notifier()
    service = TimelineService(source, store, notifier, settings())

    summary = await service.run_update(now=T0)

    assert summary == UpdateSummary(total=1, new=1, active=1)
    assert list(store.load_entities()) == ["election results"]

    alerts = store.load_alert_log()
    assert len(alerts) == 1
    assert alerts[0].status == AlertStatus.SENT
    assert alerts[0].delivery_id == "msg-1"
    assert alerts[0].rank == 1
    notifier.deliver.assert_called_once()


@pytest.mark.asyncio
async def test_run_update_without_transport_records_would_send(source, store) -> None:
    """Test unconfigured email is not an error."""
    notifier = make_notifier(configured=False)
    service = TimelineService(source, store, notifier, settings())

    summary = await service.run_update(now=T0)

    assert summary.new == 1
    alerts = store.load_alert_log()
    assert [a.status for a in alerts] == [AlertStatus.WOULD_SEND]
    notifier.deliver.assert_not_called()


@pytest.mark.asyncio
async def test_run_update_without_recipient_records_would_send(source, store) -> None:
    """Test a missing recipient is treated like missing credentials."""
    notifier = make_notifier()
    service = TimelineService(source, store, notifier, settings(email=""))

    await service.run_update(now=T0)

    assert [a.status for a in store.load_alert_log()] == [AlertStatus.WOULD_SEND]
    notifier.deliver.assert_not_called()


@pytest.mark.asyncio
async def test_delivery_failure_is_recorded_not_raised(source, store) -> None:
    """Test delivery errors do not fail the cycle."""
    notifier = make_notifier()
    notifier.deliver.side_effect = DeliveryError("smtp down")
    service = TimelineService(source, store, notifier, settings())

    summary = await service.run_update(now=T0)

    assert summary.total == 1
    alerts = store.load_alert_log()
    assert alerts[0].status == AlertStatus.FAILED
    assert alerts[0].error == "smtp down"


@pytest.mark.asyncio
async def test_unexpected_notifier_error_is_recorded_not_raised(source, store) -> None:
    """Test any notifier exception is logged as Failed and later alerts still run."""
    source.fetch_ranked_topics.return_value = [
        RankedTopic(rank=1, topic="Election Results"),
        RankedTopic(rank=2, topic="Ballot Count"),
    ]
    notifier = make_notifier()
    notifier.deliver.side_effect = RuntimeError("boom")
    service = TimelineService(source, store, notifier, settings())

    summary = await service.run_update(now=T0)

    assert summary == UpdateSummary(total=2, new=2, active=2)
    assert notifier.deliver.call_count == 2

    alerts = store.load_alert_log()
    assert [a.topic for a in alerts] == ["Election Results", "Ballot Count"]
    assert all(a.status == AlertStatus.FAILED for a in alerts)
    assert alerts[0].error == "RuntimeError: boom"


@pytest.mark.asyncio
async def test_alert_fires_once_per_entity_lifetime(source, store) -> None:
    """Test continuing and reappearing topics never alert again."""
    notifier = make_notifier()
    service = TimelineService(source, store, notifier, settings())
    present = [RankedTopic(rank=1, topic="Election Results")]

    for minutes, scrape in enumerate([present, present, [], present, present]):
        source.fetch_ranked_topics.return_value = scrape
        await service.run_update(now=T0 + timedelta(minutes=15 * minutes))

    assert len(store.load_alert_log()) == 1
    assert notifier.deliver.call_count == 1
    assert store.load_entities()["election results"].check_count == 4


@pytest.mark.asyncio
async def test_non_political_topics_are_ignored(source, store) -> None:
    """Test filtering happens before reconciliation."""
    source.fetch_ranked_topics.return_value = [
        RankedTopic(rank=1, topic="Taylor Swift"),
        RankedTopic(rank=2, topic="Senate Hearing"),
    ]
    service = TimelineService(source, store, None, settings())

    summary = await service.run_update(now=T0)

    assert summary == UpdateSummary(total=1, new=1, active=1)
    # Congress is not enabled in these settings
    assert store.load_alert_log() == []


@pytest.mark.asyncio
async def test_below_threshold_does_not_alert(source, store) -> None:
    """Test rank threshold applies to new entities."""
    source.fetch_ranked_topics.return_value = [RankedTopic(rank=80, topic="Election Results")]
    service = TimelineService(source, store, make_notifier(), settings(min_rank=50))

    await service.run_update(now=T0)

    assert store.load_alert_log() == []


@pytest.mark.asyncio
async def test_scrape_exception_degrades_to_empty(source, store) -> None:
    """Test an exploding source deactivates existing trends instead of crashing."""
    service = TimelineService(source, store, None, settings())
    await service.run_update(now=T0)

    source.fetch_ranked_topics.side_effect = RuntimeError("boom")
    summary = await service.run_update(now=T0 + timedelta(minutes=15))

    assert summary == UpdateSummary(total=1, new=0, active=0)
    assert not store.load_entities()["election results"].is_active


@pytest.mark.asyncio
async def test_load_failure_starts_from_empty(source) -> None:
    """Test a corrupt timeline is treated as empty."""
    broken = Mock()
    broken.load_entities.side_effect = PersistenceError("corrupt")
    service = TimelineService(source, broken, None, settings())

    summary = await service.run_update(now=T0)

    assert summary.new == 1
    broken.save_entities.assert_called_once()


@pytest.mark.asyncio
async def test_save_failure_fails_the_cycle(source) -> None:
    """Test save errors propagate and no alerts are sent."""
    broken = Mock()
    broken.load_entities.return_value = {}
    broken.save_entities.side_effect = PersistenceError("disk full")
    notifier = make_notifier()
    service = TimelineService(source, broken, notifier, settings())

    with pytest.raises(PersistenceError):
        await service.run_update(now=T0)

    notifier.deliver.assert_not_called()
    broken.append_alert.assert_not_called()


@pytest.mark.asyncio
async def test_alert_log_failure_does_not_fail_cycle(source) -> None:
    """Test alert log write errors are logged only."""
    flaky = Mock()
    flaky.load_entities.return_value = {}
    flaky.append_alert.side_effect = PersistenceError("read-only")
    service = TimelineService(source, flaky, None, settings())

    summary = await service.run_update(now=T0)

    assert summary.new == 1


@pytest.mark.asyncio
async def test_concurrent_updates_are_serialized(store) -> None:
    """Test overlapping triggers never create duplicate entities."""
    in_flight = 0
    max_in_flight = 0

    async def slow_fetch():
        nonlocal in_flight, max_in_flight
        in_flight += 1
        max_in_flight = max(max_in_flight, in_flight)
        await asyncio.sleep(0.01)
        in_flight -= 1
        return [RankedTopic(rank=1, topic="Election Results")]

    source = AsyncMock()
    source.fetch_ranked_topics.side_effect = slow_fetch
    service = TimelineService(source, store, None, settings())

    summaries = await asyncio.gather(*(service.run_update(now=T0) for _ in range(3)))

    assert max_in_flight == 1
    assert [s.new for s in summaries] == [1, 0, 0]
    assert len(store.load_entities()) == 1
    assert store.load_entities()["election results"].check_count == 3


@pytest.mark.asyncio
async def test_list_entities_filters_and_sorts(source, store) -> None:
    """Test query filters and sort keys."""
    source.fetch_ranked_topics.return_value = [
        RankedTopic(rank=4, topic="Election Results"),
        RankedTopic(rank=2, topic="Senate Hearing"),
    ]
    service = TimelineService(source, store, None, settings())
    await service.run_update(now=T0)

    source.fetch_ranked_topics.return_value = [
        RankedTopic(rank=4, topic="Election Results"),
        RankedTopic(rank=9, topic="NATO Summit"),
    ]
    await service.run_update(now=T0 + timedelta(minutes=30))

    by_first_seen = [e.topic for e in service.list_entities()]
    assert by_first_seen[0] == "NATO Summit"

    by_duration = [e.topic for e in service.list_entities(sort_by=SortKey.DURATION)]
    assert by_duration[0] == "Election Results"

    by_rank = [e.topic for e in service.list_entities(sort_by=SortKey.RANK)]
    assert by_rank == ["Senate Hearing", "Election Results", "NATO Summit"]

    active = {e.topic for e in service.list_entities(active_only=True)}
    assert active == {"Election Results", "NATO Summit"}

    assert [e.topic for e in service.list_entities(category="Congress")] == ["Senate Hearing"]
    assert len(service.list_entities(category="All")) == 3
    assert service.list_entities(category="Economy") == []


@pytest.mark.asyncio
async def test_get_entity_by_id(source, store) -> None:
    """Test lookup by id and the not-found outcome."""
    service = TimelineService(source, store, None, settings())
    await service.run_update(now=T0)
    entity_id = store.load_entities()["election results"].id

    assert service.get_entity(entity_id).topic == "Election Results"

    with pytest.raises(EntityNotFoundError):
        service.get_entity("missing")


@pytest.mark.asyncio
async def test_update_settings_partial_merge(source, store) -> None:
    """Test omitted fields keep their previous value."""
    service = TimelineService(source, store, None, settings())

    updated = await service.update_settings({"min_rank": 10})

    assert updated.min_rank == 10
    assert updated.email == "alerts@example.com"
    assert updated.enabled_categories == frozenset({Category.ELECTIONS})

    updated = await service.update_settings({"enabled_categories": ["Congress"], "frequency": "Daily"})
    assert updated.min_rank == 10
    assert updated.enabled_categories == frozenset({Category.CONGRESS})
    assert updated.frequency == FrequencyMode.DAILY
    assert service.get_settings() == updated


@pytest.mark.asyncio
async def test_update_settings_rejects_invalid(source, store) -> None:
    """Test invalid changes leave settings untouched."""
    service = TimelineService(source, store, None, settings())

    with pytest.raises(ValueError):
        await service.update_settings({"min_rank": 0})
    with pytest.raises(ValueError):
        await service.update_settings({"colour": "red"})

    assert service.get_settings().min_rank == 50


@pytest.mark.asyncio
async def test_settings_changes_apply_to_next_cycle(source, store) -> None:
    """Test the alert policy reads the current settings."""
    service = TimelineService(source, store, None, settings())
    await service.update_settings({"enabled_categories": ["Congress"]})

    await service.run_update(now=T0)

    assert store.load_alert_log() == []


@pytest.mark.asyncio
async def test_compute_stats(source, store) -> None:
    """Test aggregate statistics."""
    service = TimelineService(source, store, None, settings())
    empty = service.compute_stats()
    assert empty.total_trends == 0
    assert empty.longest_trend is None
    assert empty.average_duration == 0

    source.fetch_ranked_topics.return_value = [
        RankedTopic(rank=1, topic="Election Results"),
        RankedTopic(rank=2, topic="Senate Hearing"),
    ]
    await service.run_update(now=T0)
    source.fetch_ranked_topics.return_value = [
        RankedTopic(rank=1, topic="Election Results"),
        RankedTopic(rank=3, topic="Budget Deficit"),
    ]
    await service.run_update(now=T0 + timedelta(minutes=45))

    stats = service.compute_stats()
    assert stats.total_trends == 3
    assert stats.active_trends == 2
    assert stats.inactive_trends == 1
    assert stats.total_alerts == 1
    assert stats.categories == {"Elections": 1, "Congress": 1, "Economy": 1}
    # Active durations: 45 and 0
    assert stats.average_duration == 23
    assert stats.longest_trend == {"topic": "Election Results", "duration": 45}


@pytest.mark.asyncio
async def test_export_snapshot(source, store) -> None:
    """Test export contains everything."""
    service = TimelineService(source, store, None, settings())
    await service.run_update(now=T0)

    snapshot = service.export_snapshot(now=T0)

    assert snapshot["source"] == EXPORT_SOURCE
    assert snapshot["exported_at"] == T0.isoformat()
    assert [t["topic"] for t in snapshot["trends"]] == ["Election Results"]
    assert snapshot["alerts"][0]["status"] == "WouldSend"
    assert snapshot["settings"]["email"] == "alerts@example.com"
