from fastapi import APIRouter, Depends, HTTPException, status

from app.core.config import settings
from app.core.deps import get_code_issuer
from app.schemas.otp import ErrorResponse, SendOTPResponse
from app.services.otp import CodeIssuer, NotifierUnavailable, StoreUnavailable

router = APIRouter(prefix="/otp", tags=["OTP"])


@router.post(
    "",
    response_model=SendOTPResponse,
    responses={
        500: {"model": ErrorResponse, "description": "Relay not configured or delivery failed"},
        503: {"model": ErrorResponse, "description": "OTP store unavailable"},
    },
    summary="Request a deletion code",
    description="Emails a 6-digit code to the configured recipient. The code lives 5 minutes and replaces any earlier one.",
)
async def send_otp(issuer: CodeIssuer = Depends(get_code_issuer)):
    if not settings.OTP_RECIPIENT_EMAIL or not settings.MAIL_RELAY_URL:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="SERVER_CONFIGURATION_MISSING")

    try:
        await issuer.issue_code(settings.OTP_RECIPIENT_EMAIL)
    except StoreUnavailable as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=e.code)
    except NotifierUnavailable as e:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=e.code)

    return SendOTPResponse()
