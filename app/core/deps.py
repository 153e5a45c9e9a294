from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.security import is_valid_admin_key
from app.services.notifier import MailRelayNotifier
from app.services.otp import CodeIssuer, CodeVerifier
from app.services.otp_store import OTPStore


async def require_admin_key(x_admin_key: str | None = Header(None)) -> None:
    if not is_valid_admin_key(x_admin_key):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid or missing admin key")


def get_notifier() -> MailRelayNotifier:
    return MailRelayNotifier()


def get_otp_store(db: AsyncSession = Depends(get_db)) -> OTPStore:
    return OTPStore(db)


def get_code_issuer(
    store: OTPStore = Depends(get_otp_store),
    notifier: MailRelayNotifier = Depends(get_notifier),
) -> CodeIssuer:
    return CodeIssuer(store, notifier)


def get_code_verifier(store: OTPStore = Depends(get_otp_store)) -> CodeVerifier:
    return CodeVerifier(store)
