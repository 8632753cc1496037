"""Reconciliation of a scraped ranking against the tracked timeline."""

import uuid
from dataclasses import replace
from datetime import datetime
from typing import Iterable

from trend_monitor.core.classifier import categorize, score_sentiment
from trend_monitor.core.entities import RankedTopic, ReconcileResult, TrackedEntity


def elapsed_minutes(start: datetime, end: datetime) -> int:
    """Whole minutes between two timestamps, never negative."""
    return max(0, int((end - start).total_seconds() // 60))


def create_entity(scraped: RankedTopic, now: datetime) -> TrackedEntity:
    """Build a new timeline entry for a topic seen for the first time."""
    topic = scraped.topic.strip()
    sentiment = score_sentiment(topic)

    return TrackedEntity(
        id=uuid.uuid4().hex,
        topic=topic,
        category=categorize(topic),
        first_seen=now,
        last_seen=now,
        duration_minutes=0,
        check_count=1,
        current_rank=scraped.rank,
        lowest_rank=scraped.rank,
        highest_rank=scraped.rank,
        sentiment_score=sentiment.score,
        sentiment_label=sentiment.label,
        is_active=True,
    )


def continue_entity(entity: TrackedEntity, rank: int, now: datetime) -> TrackedEntity:
    """Return a copy of an entity updated for another sighting."""
    return replace(
        entity,
        last_seen=now,
        duration_minutes=elapsed_minutes(entity.first_seen, now),
        check_count=entity.check_count + 1,
        current_rank=rank,
        lowest_rank=min(entity.lowest_rank, rank),
        highest_rank=max(entity.highest_rank, rank),
        is_active=True,
    )


def reconcile(
    scraped_topics: Iterable[RankedTopic],
    prior_entities: dict[str, TrackedEntity],
    now: datetime,
) -> ReconcileResult:
    """Merge one scrape into the timeline.

    Args:
        scraped_topics: Ranked topics from this pass, already filtered to
            political ones, in page order.
        prior_entities: Persisted mapping of normalized topic key to entity.
            Not modified.
        now: Timestamp of this pass.

    Returns:
        ReconcileResult with the full updated mapping, the entities created in
        this pass and the entities that were active but are now gone.
    """
    entities = dict(prior_entities)
    created: list[TrackedEntity] = []
    present: set[str] = set()

    for scraped in scraped_topics:
        key = scraped.key
        if key in present:
            # Same topic listed twice on the page; keep the first (best) rank
            continue
        present.add(key)

        existing = entities.get(key)
        if existing is not None:
            entities[key] = continue_entity(existing, scraped.rank, now)
        else:
            entity = create_entity(scraped, now)
            entities[key] = entity
            created.append(entity)

    deactivated: list[TrackedEntity] = []
    for key, entity in prior_entities.items():
        if key in present:
            continue
        if entity.is_active:
            ended = replace(entity, is_active=False)
            entities[key] = ended
            deactivated.append(ended)

    return ReconcileResult(entities=entities, created=created, deactivated=deactivated)
