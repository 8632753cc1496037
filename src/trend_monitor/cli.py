"""CLI entry point for the political trends tracker."""

import asyncio
import json
import logging
from pathlib import Path
from typing import Optional

import typer

from trend_monitor.api import build_service, create_app
from trend_monitor.config import Settings, get_settings

app = typer.Typer(help="Track politically relevant trending topics on X (Twitter).")

CONFIG_OPTION = typer.Option(Path("config.yaml"), "--config", "-c", help="Path to config.yaml")


def setup_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    # Suppress noisy loggers
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def _load(config: Path) -> Settings:
    settings = get_settings(config)
    setup_logging(settings.logging.level)
    return settings


def _print_header(settings: Settings) -> None:
    print("\n" + "=" * 60)
    print("🗳️  POLITICAL TRENDS TRACKER")
    print("=" * 60)
    print(f"Data source: {settings.scraper.url}")
    print(f"Timeline: {settings.timeline_path}")
    print(f"Update interval: every {settings.scheduler.interval_minutes} minutes")
    if settings.email_configured:
        print(f"✓ Email alerts via Resend -> {settings.alerts.email or '(no recipient)'}")
    else:
        print("⚠️  RESEND_API_KEY / ALERT_EMAIL_FROM not set (alerts are logged as WouldSend)")
    print("=" * 60 + "\n")


@app.command()
def serve(
    config: Path = CONFIG_OPTION,
    host: Optional[str] = typer.Option(None, help="Bind address (default from config)"),
    port: Optional[int] = typer.Option(None, help="Port (default from config)"),
    no_scheduler: bool = typer.Option(False, "--no-scheduler", help="Only update on demand"),
) -> None:
    """Run the HTTP API with the periodic updater."""
    import uvicorn

    settings = _load(config)
    _print_header(settings)

    api = create_app(settings, enable_scheduler=False if no_scheduler else None)
    uvicorn.run(api, host=host or settings.api.host, port=port or settings.api.port)


@app.command()
def update(config: Path = CONFIG_OPTION) -> None:
    """Run a single update cycle and print the summary."""
    settings = _load(config)
    service = build_service(settings)

    summary = asyncio.run(service.run_update())
    print(f"✅ Update complete: {summary.active} active, {summary.new} new, {summary.total} total tracked")


@app.command()
def stats(config: Path = CONFIG_OPTION) -> None:
    """Print timeline statistics."""
    settings = _load(config)
    result = build_service(settings).compute_stats()

    print(f"\n📊 Trends: {result.total_trends} total, {result.active_trends} active, "
          f"{result.inactive_trends} ended")
    print(f"🔔 Alerts logged: {result.total_alerts}")
    print(f"⏱️  Average active duration: {result.average_duration} min")
    if result.longest_trend:
        print(f"🏆 Longest: {result.longest_trend['topic']} ({result.longest_trend['duration']} min)")
    if result.categories:
        print("\nBy category:")
        for name, count in sorted(result.categories.items(), key=lambda kv: kv[1], reverse=True):
            print(f"  • {name}: {count}")
    print()


@app.command()
def export(
    config: Path = CONFIG_OPTION,
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write JSON here instead of stdout"),
) -> None:
    """Export trends, alerts and settings as JSON."""
    settings = _load(config)
    snapshot = build_service(settings).export_snapshot()
    text = json.dumps(snapshot, indent=2, ensure_ascii=False)

    if output is None:
        print(text)
        return

    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(text, encoding="utf-8")
    print(f"📁 Export saved to {output}")


if __name__ == "__main__":
    app()
