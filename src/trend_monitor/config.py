"""Configuration management."""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml

from trend_monitor.core.entities import (
    DEFAULT_ALERT_CATEGORIES,
    AlertSettings,
    Category,
    FrequencyMode,
)


@dataclass
class ScraperConfig:
    """Upstream trends page settings."""
    url: str = "https://us.trend-calendar.com"
    timeout: float = 10.0
    user_agent: str = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"
    section_heading: str = "X (Twitter)"


@dataclass
class StorageConfig:
    """Timeline persistence settings."""
    data_dir: Path = Path("data")
    timeline_file: str = "trends_timeline.yaml"
    alerts_file: str = "alerts_log.yaml"


@dataclass
class SchedulerConfig:
    """Periodic update settings."""
    enabled: bool = True
    interval_minutes: int = 15
    run_on_start: bool = True


@dataclass
class AlertsConfig:
    """Initial alert settings (adjustable at runtime through the API)."""
    email: str = ""
    min_rank: int = 50
    enabled_categories: list[str] = field(
        default_factory=lambda: [c.value for c in Category if c in DEFAULT_ALERT_CATEGORIES]
    )
    frequency: str = FrequencyMode.IMMEDIATE.value


@dataclass
class EmailConfig:
    """Email transport settings."""
    api_url: str = "https://api.resend.com/emails"
    timeout: float = 30.0


@dataclass
class ApiConfig:
    """HTTP server settings."""
    host: str = "0.0.0.0"
    port: int = 3000


@dataclass
class LoggingConfig:
    """Logging settings."""
    level: str = "INFO"


@dataclass
class Settings:
    """Application settings."""

    # Secrets (from environment only)
    resend_api_key: Optional[str] = None
    email_from: Optional[str] = None

    # Config sections
    scraper: ScraperConfig = field(default_factory=ScraperConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    scheduler: SchedulerConfig = field(default_factory=SchedulerConfig)
    alerts: AlertsConfig = field(default_factory=AlertsConfig)
    email: EmailConfig = field(default_factory=EmailConfig)
    api: ApiConfig = field(default_factory=ApiConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @property
    def timeline_path(self) -> Path:
        return self.storage.data_dir / self.storage.timeline_file

    @property
    def alerts_path(self) -> Path:
        return self.storage.data_dir / self.storage.alerts_file

    @property
    def email_configured(self) -> bool:
        return bool(self.resend_api_key and self.email_from)

    def initial_alert_settings(self) -> AlertSettings:
        """Build runtime alert settings from the configured defaults."""
        return AlertSettings(
            email=self.alerts.email,
            min_rank=self.alerts.min_rank,
            enabled_categories=frozenset(Category(c) for c in self.alerts.enabled_categories),
            frequency=FrequencyMode(self.alerts.frequency),
        )


def load_config(config_path: Path = Path("config.yaml")) -> dict:
    """Load configuration from YAML file."""
    if not config_path.exists():
        return {}

    with open(config_path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def get_settings(config_path: Path = Path("config.yaml")) -> Settings:
    """Get application settings from YAML config and environment."""
    config = load_config(config_path)

    settings = Settings(
        resend_api_key=os.getenv("RESEND_API_KEY") or None,
        email_from=os.getenv("ALERT_EMAIL_FROM") or None,
    )

    for section in ("scraper", "scheduler", "alerts", "email", "api", "logging"):
        for key, value in (config.get(section) or {}).items():
            setattr(getattr(settings, section), key, value)

    if "storage" in config:
        for key, value in (config["storage"] or {}).items():
            setattr(settings.storage, key, Path(value) if key == "data_dir" else value)

    # Recipient may come from the environment so it stays out of committed config
    alert_email = os.getenv("ALERT_EMAIL_TO")
    if alert_email:
        settings.alerts.email = alert_email

    return settings
