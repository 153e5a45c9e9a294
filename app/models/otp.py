import uuid
from datetime import datetime, timedelta, timezone

from sqlalchemy import DateTime, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from app.core.database import Base


class OTPCode(Base):
    __tablename__ = "otp_codes"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    # Unique: at most one live code per identity.
    identity: Mapped[str] = mapped_column(String(320), unique=True, nullable=False)
    code: Mapped[str] = mapped_column(String(12), nullable=False)
    issued_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    def expires_at(self, ttl: timedelta) -> datetime:
        issued = self.issued_at
        # SQLite hands back naive datetimes even for timezone-aware columns.
        if issued.tzinfo is None:
            issued = issued.replace(tzinfo=timezone.utc)
        return issued + ttl
