"""One-time codes that gate privileged mutations (blog deletion).

A code is issued for an identity, delivered out-of-band, and redeemed at most
once within five minutes. Expiry is checked lazily on redemption;
there is no background sweep.
"""
import logging
from datetime import datetime, timedelta, timezone

from sqlalchemy.exc import SQLAlchemyError

from app.core.config import OTP_TTL_MINUTES, settings
from app.core.security import codes_match, generate_otp, mask_identity
from app.models.otp import OTPCode
from app.services.notifier import MailRelayNotifier, NotifyError
from app.services.otp_store import OTPStore

logger = logging.getLogger(__name__)


class OTPError(Exception):
    code = "OTP_ERROR"


class StoreUnavailable(OTPError):
    code = "STORE_UNAVAILABLE"


class NotifierUnavailable(OTPError):
    """The code was stored but could not be delivered. Request a fresh one."""

    code = "NOTIFIER_UNAVAILABLE"


class NotFoundOrMismatch(OTPError):
    code = "INVALID_OR_EXPIRED_OTP"


class Expired(OTPError):
    code = "OTP_EXPIRED"


def code_ttl() -> timedelta:
    return timedelta(minutes=OTP_TTL_MINUTES)


class CodeIssuer:
    def __init__(self, store: OTPStore, notifier: MailRelayNotifier):
        self.store = store
        self.notifier = notifier

    async def issue_code(self, identity: str, now: datetime | None = None) -> OTPCode:
        """Store a fresh code for ``identity``, replacing any live one, and deliver it.

        The code is persisted before delivery and is not rolled back if delivery
        fails; re-issuing replaces it.
        """
        if not identity:
            raise ValueError("identity must not be empty")
        now = now or datetime.now(timezone.utc)
        code = generate_otp()

        try:
            record = await self.store.replace(identity, code, issued_at=now)
        except SQLAlchemyError as e:
            logger.error("[OTP] Store failed while issuing for %s: %s", mask_identity(identity), e)
            raise StoreUnavailable("OTP store is unavailable") from e

        try:
            await self.notifier.send(identity, code, settings.otp_expiry_description)
        except NotifyError as e:
            logger.warning("[OTP] Code stored for %s but delivery failed: %s", mask_identity(identity), e)
            raise NotifierUnavailable("OTP could not be delivered") from e

        logger.info("[OTP] Issued code for %s", mask_identity(identity))
        return record


class CodeVerifier:
    def __init__(self, store: OTPStore):
        self.store = store

    async def verify_and_consume(self, identity: str, presented_code: str, now: datetime | None = None) -> None:
        """Return normally only if ``presented_code`` is the live, unexpired code for ``identity``.

        Raises NotFoundOrMismatch (no stored mutation), Expired (stale row deleted)
        or StoreUnavailable. On success the code is gone; of two concurrent
        redemptions of the same code only one returns.
        """
        now = now or datetime.now(timezone.utc)

        try:
            record = await self.store.find_by_identity(identity)
            if record is None or not codes_match(record.code, presented_code):
                raise NotFoundOrMismatch("Invalid or expired OTP")

            if now > record.expires_at(code_ttl()):
                await self.store.delete_if_match(record)
                logger.info("[OTP] Expired code for %s discarded", mask_identity(identity))
                raise Expired("OTP expired")

            consumed = await self.store.delete_if_match(record)
        except SQLAlchemyError as e:
            logger.error("[OTP] Store failed while verifying for %s: %s", mask_identity(identity), e)
            raise StoreUnavailable("OTP store is unavailable") from e

        if not consumed:
            # Another request redeemed it between our read and our delete.
            raise NotFoundOrMismatch("Invalid or expired OTP")
        logger.info("[OTP] Code consumed for %s", mask_identity(identity))
