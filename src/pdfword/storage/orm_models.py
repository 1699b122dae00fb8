"""SQLAlchemy ORM models for the credential store."""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import Boolean, DateTime, Enum, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from pdfword.models.base import RotationStrategy

from .database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ApiKeyORM(Base):
    """API key table - one row per stored credential."""

    __tablename__ = "api_keys"

    # Insertion order; rotation indexes eligible keys in this order
    seq: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    id: Mapped[str] = mapped_column(String(32), nullable=False, unique=True)

    provider: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
    key: Mapped[str] = mapped_column(String(512), nullable=False)
    label: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow
    )

    enabled: Mapped[bool] = mapped_column(Boolean, default=True)
    flagged: Mapped[bool] = mapped_column(
        Boolean, default=False, doc="Flagged keys are excluded from rotation"
    )


class RotationORM(Base):
    """Rotation settings table - one row per provider."""

    __tablename__ = "rotation_settings"

    provider: Mapped[str] = mapped_column(String(32), primary_key=True)
    enabled: Mapped[bool] = mapped_column(Boolean, default=True)
    strategy: Mapped[RotationStrategy] = mapped_column(
        Enum(RotationStrategy), default=RotationStrategy.HOURLY
    )
