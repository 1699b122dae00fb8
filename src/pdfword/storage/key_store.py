"""Credential rotation store.

Serves the API key to present for each model request. Every public
operation runs in its own transaction, so concurrent requests that flag or
disable keys while others read them cannot lose updates.
"""

import logging
from datetime import datetime, timezone
from typing import Optional, Protocol

from sqlalchemy import Engine

from pdfword.models import ApiKeyRecord, RotationConfig, RotationStrategy, mask_key

from .database import get_engine, get_session
from .repositories import ApiKeyRepository, to_record, to_rotation

logger = logging.getLogger(__name__)


class KeyRotationProvider(Protocol):
    """Interface consumed by model attempts."""

    def current_credential(
        self, provider: str, now: Optional[datetime] = None
    ) -> Optional[str]: ...

    def report_leaked(self, provider: str, key: str) -> None: ...


def rotation_index(now: datetime, strategy: RotationStrategy, count: int) -> int:
    """Index of the key to use for the time bucket containing ``now``."""
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    bucket = int(now.timestamp() // strategy.interval_seconds)
    return bucket % count


class KeyStore:
    """SQL-backed implementation of ``KeyRotationProvider``."""

    def __init__(self, engine: Optional[Engine] = None):
        self.engine = engine or get_engine()

    def list_keys(self, provider: str) -> list[ApiKeyRecord]:
        with get_session(self.engine) as session:
            return [to_record(k) for k in ApiKeyRepository(session).list(provider)]

    def add_key(self, provider: str, key: str, label: Optional[str] = None) -> ApiKeyRecord:
        with get_session(self.engine) as session:
            record = to_record(ApiKeyRepository(session).add(provider, key, label))
        logger.info("Added %s key %s (%s)", provider, record.id, mask_key(key))
        return record

    def delete_key(self, key_id: str) -> bool:
        with get_session(self.engine) as session:
            return ApiKeyRepository(session).delete(key_id)

    def set_enabled(self, key_id: str, enabled: bool) -> Optional[ApiKeyRecord]:
        with get_session(self.engine) as session:
            orm_key = ApiKeyRepository(session).set_enabled(key_id, enabled)
            return to_record(orm_key) if orm_key else None

    def set_flagged(self, key_id: str, flagged: bool) -> Optional[ApiKeyRecord]:
        with get_session(self.engine) as session:
            orm_key = ApiKeyRepository(session).set_flagged(key_id, flagged)
            return to_record(orm_key) if orm_key else None

    def find_by_key(self, provider: str, key: str) -> Optional[ApiKeyRecord]:
        with get_session(self.engine) as session:
            orm_key = ApiKeyRepository(session).find_by_key(provider, key)
            return to_record(orm_key) if orm_key else None

    def get_rotation(self, provider: str) -> RotationConfig:
        with get_session(self.engine) as session:
            return to_rotation(ApiKeyRepository(session).get_rotation(provider))

    def set_rotation_enabled(self, provider: str, enabled: bool) -> RotationConfig:
        with get_session(self.engine) as session:
            return to_rotation(
                ApiKeyRepository(session).set_rotation_enabled(provider, enabled)
            )

    def set_rotation_strategy(
        self, provider: str, strategy: RotationStrategy
    ) -> RotationConfig:
        with get_session(self.engine) as session:
            return to_rotation(
                ApiKeyRepository(session).set_rotation_strategy(provider, strategy)
            )

    def current_credential(
        self, provider: str, now: Optional[datetime] = None
    ) -> Optional[str]:
        """Pick the key for this request.

        Eligible keys are enabled and not flagged. With rotation disabled the
        first eligible key is used; otherwise the key at
        ``bucket % len(eligible)`` where the bucket is the current hour or
        minute since the epoch.
        """
        with get_session(self.engine) as session:
            repo = ApiKeyRepository(session)
            keys = repo.list_eligible(provider)
            if not keys:
                return None
            rotation = repo.get_rotation(provider)
            if not rotation.enabled:
                return keys[0].key
            idx = rotation_index(
                now or datetime.now(timezone.utc), rotation.strategy, len(keys)
            )
            return keys[idx].key

    def report_leaked(self, provider: str, key: str) -> None:
        """Take a key out of rotation after the provider rejected it as leaked."""
        with get_session(self.engine) as session:
            orm_key = ApiKeyRepository(session).disable_by_value(provider, key)
        if orm_key is not None:
            logger.warning("Disabled leaked %s key %s", provider, mask_key(key))
