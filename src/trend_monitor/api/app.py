"""FastAPI application factory."""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from trend_monitor.adapters.notifications import EmailNotifier
from trend_monitor.adapters.sources import TrendCalendarSource
from trend_monitor.adapters.storage import YamlTimelineStore
from trend_monitor.api.routes import router
from trend_monitor.config import Settings, get_settings
from trend_monitor.core import TrendMonitorError
from trend_monitor.scheduler import TrendScheduler
from trend_monitor.use_cases import TimelineService

logger = logging.getLogger(__name__)


def build_service(settings: Settings) -> TimelineService:
    """Wire the production adapters into a TimelineService."""
    source = TrendCalendarSource(
        url=settings.scraper.url,
        timeout=settings.scraper.timeout,
        user_agent=settings.scraper.user_agent,
        section_heading=settings.scraper.section_heading,
    )
    store = YamlTimelineStore(settings.timeline_path, settings.alerts_path)
    notifier = EmailNotifier(
        api_key=settings.resend_api_key,
        sender=settings.email_from,
        api_url=settings.email.api_url,
        timeout=settings.email.timeout,
    )
    return TimelineService(
        source=source,
        store=store,
        notifier=notifier,
        alert_settings=settings.initial_alert_settings(),
    )


def create_app(
    settings: Optional[Settings] = None,
    service: Optional[TimelineService] = None,
    enable_scheduler: Optional[bool] = None,
) -> FastAPI:
    """Create the API application.

    Args:
        settings: Application settings (loaded from config.yaml if None)
        service: Prebuilt service, mainly for tests (built from settings if None)
        enable_scheduler: Override settings.scheduler.enabled
    """
    settings = settings or get_settings()
    service = service or build_service(settings)
    if enable_scheduler is None:
        enable_scheduler = settings.scheduler.enabled

    scheduler = TrendScheduler(
        service,
        interval_minutes=settings.scheduler.interval_minutes,
        run_on_start=settings.scheduler.run_on_start,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if enable_scheduler:
            scheduler.start()
        else:
            logger.info("Scheduler disabled; updates run on demand only")
        try:
            yield
        finally:
            scheduler.shutdown()

    app = FastAPI(
        title="Political Trends Tracker",
        description="Timeline of politically relevant trending topics on X (Twitter) in the US",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.settings = settings
    app.state.service = service
    app.state.scheduler = scheduler

    @app.exception_handler(TrendMonitorError)
    async def trend_monitor_error_handler(request: Request, exc: TrendMonitorError):
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
        return JSONResponse(status_code=500, content={"detail": str(exc)})

    app.include_router(router)
    return app
