"""
Email delivery through the Resend HTTP API.

Used for tracked-term match alerts and weekly digests.
"""

from __future__ import annotations

import logging
from html import escape
from typing import List, Optional

import httpx

from ..config import AlertConfig, settings
from ..exceptions import NotificationError

logger = logging.getLogger(__name__)


def render_alert_html(
    term_name: str,
    item_type: str,
    item_id: int,
    title: str,
    jurisdiction_slug: str,
    matched_keywords: List[str],
    ai_summary: Optional[str],
    frontend_url: str,
) -> str:
    """Build the body of a tracked-term match email."""
    path = "legislation" if item_type == "legislation" else "meetings"
    item_url = f"{frontend_url.rstrip('/')}/{path}/{item_id}"
    summary_html = (
        f'<p style="margin: 12px 0 0 0; color: #374151;"><strong>Summary:</strong> {escape(ai_summary)}</p>'
        if ai_summary
        else ""
    )
    label = "Legislation" if item_type == "legislation" else "Meeting"

    return f"""
    <div style="font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif; max-width: 600px; margin: 0 auto;">
      <h2 style="color: #1f2937;">Alert: New Match Found</h2>
      <p style="color: #374151; font-size: 16px;">Your tracked term "<strong>{escape(term_name)}</strong>" has a new match:</p>
      <div style="border: 1px solid #e5e7eb; border-radius: 8px; padding: 20px; margin: 20px 0; background: #f9fafb;">
        <h3 style="margin-top: 0; color: #111827;">{escape(title)}</h3>
        <p style="margin: 8px 0; color: #6b7280;"><strong>Type:</strong> {label}</p>
        <p style="margin: 8px 0; color: #6b7280;"><strong>Location:</strong> {escape(jurisdiction_slug)}</p>
        <p style="margin: 8px 0; color: #6b7280;"><strong>Keywords matched:</strong> {escape(', '.join(matched_keywords))}</p>
        {summary_html}
      </div>
      <p style="text-align: center; margin: 24px 0;">
        <a href="{escape(item_url)}" style="background: #2563eb; color: white; padding: 12px 24px; text-decoration: none; border-radius: 6px; display: inline-block;">View Full Document</a>
      </p>
      <hr style="margin: 32px 0; border: none; border-top: 1px solid #e5e7eb;">
      <p style="color: #6b7280; font-size: 14px; text-align: center;">
        You're receiving this because you have alerts enabled for "{escape(term_name)}".
        <br>
        <a href="{escape(frontend_url.rstrip('/'))}/tracked-terms" style="color: #2563eb; text-decoration: none;">Manage your tracked terms</a>
      </p>
    </div>
    """


class AlertNotifier:
    """Send HTML emails via Resend."""

    def __init__(
        self,
        config: Optional[AlertConfig] = None,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = 15.0,
    ) -> None:
        self.config = config or settings.alerts
        self.timeout = timeout
        self._client = client

    @property
    def enabled(self) -> bool:
        return bool(self.config.resend_api_key)

    async def _client_instance(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self._client

    async def close(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    async def send(self, to: str, subject: str, html: str) -> dict:
        """
        Deliver one message.

        Raises:
            NotificationError: When no API key is configured or Resend
                rejects the request
        """
        if not self.enabled:
            raise NotificationError("ALERT_RESEND_API_KEY not configured")

        client = await self._client_instance()
        try:
            response = await client.post(
                self.config.api_url,
                json={
                    "from": self.config.from_address,
                    "to": [to],
                    "subject": subject,
                    "html": html,
                },
                headers={
                    "Authorization": f"Bearer {self.config.resend_api_key}",
                    "Content-Type": "application/json",
                },
            )
        except httpx.HTTPError as exc:
            raise NotificationError(f"Resend request failed: {exc}") from exc

        if response.status_code >= 400:
            raise NotificationError(f"Resend API error {response.status_code}: {response.text[:200]}")

        logger.info("Sent email to %s: %s", to, subject)
        return response.json()
