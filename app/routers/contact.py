import logging

from fastapi import APIRouter, HTTPException, status

from app.schemas.contact import ContactRequest, ContactResponse
from app.schemas.otp import ErrorResponse
from app.services.contact import relay_contact_message
from app.services.notifier import NotifyError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/contact", tags=["Contact"])


@router.post(
    "",
    response_model=ContactResponse,
    responses={500: {"model": ErrorResponse, "description": "Mail relay unavailable"}},
    summary="Send a contact message",
    description="Forwards a contact-form submission to the site owner's mailbox through the mail relay.",
)
async def send_contact(body: ContactRequest):
    try:
        await relay_contact_message(body)
    except NotifyError as e:
        logger.error("[Contact] Relay failed for %s: %s", body.email, e)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="RELAY_UNAVAILABLE")
    return ContactResponse()
