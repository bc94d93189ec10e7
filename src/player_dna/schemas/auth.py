"""Authentication schemas."""

from pydantic import BaseModel, Field, field_validator

from .common import validate_address


class ChallengeRequest(BaseModel):
    """Request to obtain a login challenge."""

    address: str = Field(..., description="Hex-encoded Ed25519 public key (32 bytes)")

    @field_validator("address")
    @classmethod
    def _address(cls, value: str) -> str:
        return validate_address(value)


class ChallengeResponse(BaseModel):
    """Challenge the client must sign with its key."""

    challenge: str = Field(..., description="URL-safe base64 challenge that must be signed")
    expires_in: int = Field(..., description="Seconds until the challenge expires")


class LoginRequest(BaseModel):
    """Signed challenge presented for login."""

    address: str = Field(..., description="Hex-encoded Ed25519 public key (32 bytes)")
    challenge: str = Field(..., description="Challenge returned by /auth/challenge")
    signature: str = Field(..., description="Hex-encoded Ed25519 signature over the challenge")

    @field_validator("address")
    @classmethod
    def _address(cls, value: str) -> str:
        return validate_address(value)


class LoginResponse(BaseModel):
    """Response returned after successful login."""

    access_token: str = Field(..., description="JWT access token")
    token_type: str = Field("bearer", description="Token type")
    address: str
