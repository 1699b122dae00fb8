"""Repository layer for credential store CRUD operations."""

import secrets
from datetime import datetime, timezone
from typing import Optional, Sequence

from sqlalchemy import select
from sqlalchemy.orm import Session

from pdfword.models import ApiKeyRecord, RotationConfig, RotationStrategy

from .orm_models import ApiKeyORM, RotationORM


def generate_key_id() -> str:
    """Short random identifier for a stored key."""
    return "key_" + secrets.token_hex(4)


class ApiKeyRepository:
    """Repository for API key and rotation settings operations.

    All methods work inside the caller's session; the caller owns the
    transaction boundary.
    """

    def __init__(self, session: Session):
        self.session = session

    def list(self, provider: str) -> Sequence[ApiKeyORM]:
        """All keys of a provider in insertion order."""
        result = self.session.execute(
            select(ApiKeyORM)
            .where(ApiKeyORM.provider == provider)
            .order_by(ApiKeyORM.seq)
        )
        return result.scalars().all()

    def list_eligible(self, provider: str) -> Sequence[ApiKeyORM]:
        """Enabled, non-flagged keys of a provider in insertion order."""
        result = self.session.execute(
            select(ApiKeyORM)
            .where(
                ApiKeyORM.provider == provider,
                ApiKeyORM.enabled.is_(True),
                ApiKeyORM.flagged.is_(False),
            )
            .order_by(ApiKeyORM.seq)
        )
        return result.scalars().all()

    def get_by_id(self, key_id: str) -> Optional[ApiKeyORM]:
        result = self.session.execute(select(ApiKeyORM).where(ApiKeyORM.id == key_id))
        return result.scalar_one_or_none()

    def find_by_key(self, provider: str, key: str) -> Optional[ApiKeyORM]:
        """Find a key record by its raw value."""
        result = self.session.execute(
            select(ApiKeyORM)
            .where(ApiKeyORM.provider == provider, ApiKeyORM.key == key)
            .order_by(ApiKeyORM.seq)
            .limit(1)
        )
        return result.scalar_one_or_none()

    def add(self, provider: str, key: str, label: Optional[str] = None) -> ApiKeyORM:
        """Store a new enabled key."""
        orm_key = ApiKeyORM(
            id=generate_key_id(),
            provider=provider,
            key=key,
            label=label,
            created_at=datetime.now(timezone.utc),
            enabled=True,
            flagged=False,
        )
        self.session.add(orm_key)
        self.session.flush()
        return orm_key

    def delete(self, key_id: str) -> bool:
        """Delete a key. Returns False when it did not exist."""
        orm_key = self.get_by_id(key_id)
        if orm_key is None:
            return False
        self.session.delete(orm_key)
        self.session.flush()
        return True

    def set_enabled(self, key_id: str, enabled: bool) -> Optional[ApiKeyORM]:
        orm_key = self.get_by_id(key_id)
        if orm_key is None:
            return None
        orm_key.enabled = enabled
        self.session.flush()
        return orm_key

    def set_flagged(self, key_id: str, flagged: bool) -> Optional[ApiKeyORM]:
        """(Un)flag a key without touching its enabled state."""
        orm_key = self.get_by_id(key_id)
        if orm_key is None:
            return None
        orm_key.flagged = bool(flagged)
        self.session.flush()
        return orm_key

    def disable_by_value(self, provider: str, key: str) -> Optional[ApiKeyORM]:
        """Disable and flag a key by its raw value (e.g. reported as leaked)."""
        orm_key = self.find_by_key(provider, key)
        if orm_key is None:
            return None
        orm_key.enabled = False
        orm_key.flagged = True
        self.session.flush()
        return orm_key

    def get_rotation(self, provider: str) -> RotationORM:
        """Rotation settings of a provider, created with defaults if missing."""
        rotation = self.session.get(RotationORM, provider)
        if rotation is None:
            rotation = RotationORM(
                provider=provider, enabled=True, strategy=RotationStrategy.HOURLY
            )
            self.session.add(rotation)
            self.session.flush()
        return rotation

    def set_rotation_enabled(self, provider: str, enabled: bool) -> RotationORM:
        rotation = self.get_rotation(provider)
        rotation.enabled = enabled
        self.session.flush()
        return rotation

    def set_rotation_strategy(
        self, provider: str, strategy: RotationStrategy
    ) -> RotationORM:
        rotation = self.get_rotation(provider)
        rotation.strategy = RotationStrategy(strategy)
        self.session.flush()
        return rotation


def to_record(orm_key: ApiKeyORM) -> ApiKeyRecord:
    return ApiKeyRecord.model_validate(orm_key)


def to_rotation(orm_rotation: RotationORM) -> RotationConfig:
    return RotationConfig.model_validate(orm_rotation)
