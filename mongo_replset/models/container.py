from enum import Enum
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator


class ActivationState(str, Enum):
    """Progress of a single container activation"""
    CONFIGURED = "configured"
    STARTING = "starting"
    AWAITING_LOG = "awaiting_log"
    INITIATING = "initiating"
    POLLING_PRIMARY = "polling_primary"
    READY = "ready"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (ActivationState.READY, ActivationState.FAILED)


class MongoContainerConfig(BaseModel):
    """Frozen configuration of a MongoDB container, taken when startup begins"""
    model_config = ConfigDict(frozen=True)

    image: str = Field(..., description="Docker image reference, e.g. mongo:4.0.1")
    username: Optional[str] = Field(None, description="Root username")
    password: Optional[str] = Field(None, description="Root password")

    @field_validator("username", "password")
    @classmethod
    def blank_is_absent(cls, value: Optional[str]) -> Optional[str]:
        return value or None

    @property
    def has_credentials(self) -> bool:
        return self.username is not None and self.password is not None

    @property
    def has_partial_credentials(self) -> bool:
        return (self.username is None) != (self.password is None)
