"""Email alert adapter (Resend HTTP API)."""

import logging
from html import escape
from typing import Optional

import httpx

from trend_monitor.core import AlertSettings, DeliveryError, DeliveryResult, Notifier, TrackedEntity

logger = logging.getLogger(__name__)


class EmailNotifier(Notifier):
    """Send new-trend alerts by email through the Resend API."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        sender: Optional[str] = None,
        api_url: str = "https://api.resend.com/emails",
        timeout: float = 30.0,
    ) -> None:
        """Initialize email notifier.

        Args:
            api_key: Resend API key. If None, the notifier reports itself as
                not configured and is never asked to deliver.
            sender: From address, must belong to a verified Resend domain.
            api_url: Resend emails endpoint.
            timeout: Request timeout in seconds.
        """
        self.api_key = api_key
        self.sender = sender
        self.api_url = api_url
        self.timeout = timeout

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key and self.sender)

    def build_subject(self, entity: TrackedEntity) -> str:
        return f"🚨 New Political Trend: {entity.topic} (Rank #{entity.current_rank})"

    def build_html(self, entity: TrackedEntity) -> str:
        """Render the alert body.

        Args:
            entity: Newly detected trend

        Returns:
            HTML email body
        """
        first_seen = entity.first_seen.strftime("%Y-%m-%d %H:%M %Z").strip()
        return (
            "<h2>🗳️ New Political Trend Detected</h2>\n"
            "<hr>\n"
            f"<p><strong>Topic:</strong> {escape(entity.topic)}</p>\n"
            f"<p><strong>Category:</strong> {escape(entity.category.value)}</p>\n"
            f"<p><strong>Current Rank:</strong> #{entity.current_rank}</p>\n"
            f"<p><strong>First Detected:</strong> {first_seen}</p>\n"
            f"<p><strong>Sentiment:</strong> {entity.sentiment_label.value} "
            f"({entity.sentiment_score:.2f})</p>\n"
            "<hr>\n"
            "<p><em>This trend is currently active on X (Twitter) in the United States.</em></p>\n"
            "<p><small>Source: Trend Calendar US | Political Trends Tracker</small></p>\n"
        )

    async def deliver(self, entity: TrackedEntity, settings: AlertSettings) -> DeliveryResult:
        """Send the alert to the configured recipient.

        Raises:
            DeliveryError: If the transport is unconfigured or the API call fails.
        """
        if not self.is_configured:
            raise DeliveryError("Email transport is not configured")
        if not settings.email:
            raise DeliveryError("No alert recipient configured")

        payload = {
            "from": self.sender,
            "to": [settings.email],
            "subject": self.build_subject(entity),
            "html": self.build_html(entity),
        }
        headers = {"Authorization": f"Bearer {self.api_key}"}

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            try:
                response = await client.post(self.api_url, json=payload, headers=headers)
                response.raise_for_status()
            except httpx.HTTPError as e:
                raise DeliveryError(f"Email delivery failed for '{entity.topic}': {e}") from e

        try:
            data = response.json()
        except ValueError:
            data = None
        message_id = data.get("id") if isinstance(data, dict) else None

        logger.info("Email alert sent for '%s' (id=%s)", entity.topic, message_id)
        return DeliveryResult(delivered=True, id=message_id)
