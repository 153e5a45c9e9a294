import logging
from datetime import datetime, timezone
from typing import Any

import httpx

from app.core.config import settings

logger = logging.getLogger(__name__)


class NotifyError(Exception):
    """The mail relay could not be reached or refused the message."""


async def post_to_relay(payload: dict[str, Any]) -> None:
    """POST a JSON payload to the mail-relay webhook (Google Apps Script)."""
    if not settings.MAIL_RELAY_URL:
        raise NotifyError("MAIL_RELAY_URL is not configured")

    try:
        async with httpx.AsyncClient(timeout=settings.MAIL_RELAY_TIMEOUT_SECONDS) as client:
            resp = await client.post(settings.MAIL_RELAY_URL, json=payload)
    except httpx.HTTPError as e:
        logger.error("[MailRelay] Request failed: %s", e)
        raise NotifyError("Failed to reach mail relay") from e

    if resp.is_error:
        logger.error("[MailRelay] Error: HTTP %s", resp.status_code)
        raise NotifyError(f"Mail relay responded with HTTP {resp.status_code}")


class MailRelayNotifier:
    """Delivers one-time codes by email through the mail relay."""

    async def send(self, recipient: str, code: str, expiry_description: str) -> None:
        payload = {
            "identifier": "SYSTEM_VERIFICATION",
            "email": settings.OTP_SENDER_LABEL,
            "targetEmail": recipient,
            "message": (
                f"Your authorization code for blog deletion is: {code}\n\n"
                f"This code {expiry_description}."
            ),
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        await post_to_relay(payload)
