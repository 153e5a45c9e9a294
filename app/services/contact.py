from datetime import datetime, timezone

from app.schemas.contact import ContactRequest
from app.services.notifier import post_to_relay


def build_handshake_message(body: ContactRequest, timestamp: str) -> str:
    return "\n".join(
        [
            "[NEW_HANDSHAKE_INITIALIZED]",
            "---------------------------",
            f"CLIENT_IDENTIFIER : {body.identifier}",
            f"CLIENT_ENDPOINT   : {body.email}",
            f"TIMESTAMP         : {timestamp}",
            f"SYSTEM_AGENT      : {body.user_agent or 'unknown'}",
            "",
            "PAYLOAD_MESSAGE:",
            body.message,
            "---------------------------",
            "[END_TRANSMISSION]",
        ]
    )


async def relay_contact_message(body: ContactRequest) -> None:
    """Forward a contact-form submission to the mail relay. Raises NotifyError on failure."""
    timestamp = body.timestamp or datetime.now(timezone.utc).isoformat()
    await post_to_relay(
        {
            "identifier": f"Portfolio Handshake: {body.identifier}",
            "email": body.email,
            "message": build_handshake_message(body, timestamp),
            "timestamp": timestamp,
        }
    )
