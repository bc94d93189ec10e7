"""Mapping from decrypted results to player type labels."""

from __future__ import annotations

from typing import Final

UNRANKED: Final[str] = "Unranked"

# Ordered from the lowest to the highest average skill per play.
PLAYER_TYPES: Final[tuple[str, ...]] = (
    "Team Player",
    "Solo Champion",
    "Reaction King",
    "Speed Demon",
    "Tactical Master",
    "Strategic Genius",
    "Precision Expert",
)


def classify_player_type(value: int, bucket_width: int) -> str:
    """Return the player type for a decrypted average-skill value.

    A value of 0 (no plays recorded, or nothing submitted) is ``Unranked``.
    Positive values fall into buckets of ``bucket_width``; anything past the
    last bucket maps to the top type.
    """
    if bucket_width < 1:
        raise ValueError("bucket_width must be positive")
    if value <= 0:
        return UNRANKED
    index = min((value - 1) // bucket_width, len(PLAYER_TYPES) - 1)
    return PLAYER_TYPES[index]
