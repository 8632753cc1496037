"""Timeline API router."""

import logging
from datetime import datetime, timezone
from typing import Annotated, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from trend_monitor.api.schemas import (
    AlertResponse,
    SettingsResponse,
    SettingsUpdate,
    StatsResponse,
    TrendResponse,
    UpdateResponse,
    UpdateStats,
)
from trend_monitor.core import EntityNotFoundError, SortKey, TrendMonitorError
from trend_monitor.use_cases import TimelineService

logger = logging.getLogger(__name__)

router = APIRouter()


def get_service(request: Request) -> TimelineService:
    return request.app.state.service


Service = Annotated[TimelineService, Depends(get_service)]


@router.get("/health")
async def health(request: Request, service: Service):
    scheduler = getattr(request.app.state, "scheduler", None)
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "updating": service.is_updating,
        "email_configured": bool(service.notifier and service.notifier.is_configured),
        "scheduler": {
            "running": bool(scheduler and scheduler.running),
            "interval_minutes": scheduler.interval_minutes if scheduler else None,
            "last_run": scheduler.last_run.isoformat() if scheduler and scheduler.last_run else None,
        },
    }


@router.get("/api/trends", response_model=List[TrendResponse])
async def list_trends(
    service: Service,
    category: Optional[str] = Query(default=None),
    active: bool = Query(default=False),
    sort_by: SortKey = Query(default=SortKey.FIRST_SEEN),
):
    entities = service.list_entities(category=category, active_only=active, sort_by=sort_by)
    return [TrendResponse.from_entity(e) for e in entities]


@router.post("/api/trends/update", response_model=UpdateResponse)
async def update_trends(service: Service):
    try:
        summary = await service.run_update()
    except TrendMonitorError as e:
        logger.error("Manual update failed: %s", e)
        raise HTTPException(status_code=500, detail=str(e))

    return UpdateResponse(
        success=True,
        message="Timeline updated",
        stats=UpdateStats(total=summary.total, new=summary.new, active=summary.active),
    )


@router.get("/api/trends/{trend_id}", response_model=TrendResponse)
async def get_trend(trend_id: str, service: Service):
    try:
        entity = service.get_entity(trend_id)
    except EntityNotFoundError:
        raise HTTPException(status_code=404, detail="Trend not found")
    return TrendResponse.from_entity(entity)


@router.get("/api/alerts", response_model=List[AlertResponse])
async def list_alerts(service: Service):
    return [AlertResponse.from_record(r) for r in service.list_alerts()]


@router.get("/api/settings", response_model=SettingsResponse)
async def get_settings(service: Service):
    return SettingsResponse.from_settings(service.get_settings())


@router.put("/api/settings", response_model=SettingsResponse)
async def update_settings(body: SettingsUpdate, service: Service):
    changes = {k: v for k, v in body.model_dump(exclude_unset=True).items() if v is not None}
    try:
        settings = await service.update_settings(changes)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return SettingsResponse.from_settings(settings)


@router.get("/api/stats", response_model=StatsResponse)
async def get_stats(service: Service):
    return StatsResponse.from_stats(service.compute_stats())


@router.get("/api/export")
async def export_data(service: Service):
    return service.export_snapshot()
