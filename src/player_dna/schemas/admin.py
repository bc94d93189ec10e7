"""Schemas for owner-only administration."""

from pydantic import BaseModel, ConfigDict, Field, field_validator

from player_dna.models import ActionKind

from .common import validate_address


class OwnershipTransfer(BaseModel):
    new_owner: str = Field(..., description="Address receiving ownership")

    @field_validator("new_owner")
    @classmethod
    def _new_owner(cls, value: str) -> str:
        return validate_address(value)


class ProviderUpdate(BaseModel):
    address: str = Field(..., description="Provider address to authorize")

    @field_validator("address")
    @classmethod
    def _address(cls, value: str) -> str:
        return validate_address(value)


class ProviderChange(BaseModel):
    address: str
    changed: bool = Field(..., description="False when the call was a no-op")


class CooldownUpdate(BaseModel):
    action: ActionKind
    seconds: int = Field(..., ge=0, description="New cooldown window in seconds")


class RegistryStateResponse(BaseModel):
    """Public view of the registry configuration."""

    identity: str
    owner: str
    paused: bool
    current_batch_id: int
    submission_cooldown_seconds: int
    decryption_cooldown_seconds: int

    model_config = ConfigDict(from_attributes=True)
