import logging
from datetime import datetime

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.security import mask_identity
from app.models.otp import OTPCode

logger = logging.getLogger(__name__)

REPLACE_ATTEMPTS = 3


class OTPStore:
    """Persistent one-time-code rows, one per identity.

    Every write commits on its own so that a verifier's conditional delete is
    visible to concurrent requests as soon as it returns.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_by_identity(self, identity: str) -> OTPCode | None:
        result = await self.db.execute(
            select(OTPCode)
            .where(OTPCode.identity == identity)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def delete_if_match(self, record: OTPCode) -> bool:
        """Delete ``record`` only if it is still stored unchanged. Returns whether a row was removed."""
        try:
            result = await self.db.execute(
                delete(OTPCode)
                .where(
                    OTPCode.id == record.id,
                    OTPCode.identity == record.identity,
                    OTPCode.code == record.code,
                )
                .execution_options(synchronize_session=False)
            )
            await self.db.commit()
        except SQLAlchemyError:
            await self.db.rollback()
            raise

        if record in self.db:
            self.db.expunge(record)
        return result.rowcount == 1

    async def replace(self, identity: str, code: str, issued_at: datetime) -> OTPCode:
        """Atomically drop any code stored for ``identity`` and store ``code`` in its place.

        Two concurrent replaces for the same identity collide on the unique
        constraint; the loser rolls back and runs again, so the last writer wins
        and exactly one row remains.
        """
        for attempt in range(1, REPLACE_ATTEMPTS + 1):
            try:
                await self.db.execute(
                    delete(OTPCode)
                    .where(OTPCode.identity == identity)
                    .execution_options(synchronize_session=False)
                )
                record = OTPCode(identity=identity, code=code, issued_at=issued_at)
                self.db.add(record)
                await self.db.commit()
                return record
            except IntegrityError:
                await self.db.rollback()
                if attempt == REPLACE_ATTEMPTS:
                    raise
                logger.info("Concurrent OTP issuance for %s, retrying replace (attempt %d)", mask_identity(identity), attempt)
            except SQLAlchemyError:
                await self.db.rollback()
                raise
