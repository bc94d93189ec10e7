"""Shared schema helpers."""

from player_dna.core.security import normalize_address


def validate_address(value: str) -> str:
    """Normalize an address field, surfacing bad input as a validation error."""
    return normalize_address(value)
