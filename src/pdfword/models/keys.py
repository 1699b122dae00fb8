"""Credential records exposed by the key store."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from .base import RotationStrategy


class ApiKeyRecord(BaseModel):
    """A stored API key. Flagged keys are excluded from rotation."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    provider: str
    key: str
    label: Optional[str] = None
    created_at: datetime
    enabled: bool = True
    flagged: bool = False

    @property
    def is_eligible(self) -> bool:
        """Whether the key may be handed out for a request."""
        return self.enabled and not self.flagged

    @property
    def masked(self) -> str:
        return mask_key(self.key)


class RotationConfig(BaseModel):
    """Rotation policy for one provider."""

    model_config = ConfigDict(from_attributes=True)

    provider: str
    enabled: bool = True
    strategy: RotationStrategy = Field(default=RotationStrategy.HOURLY)


def mask_key(key: str) -> str:
    """Render a key for display without revealing it."""
    if not key:
        return ""
    if len(key) <= 8:
        return key[:4] + "****"
    return f"{key[:6]}...{key[-4:]}"
