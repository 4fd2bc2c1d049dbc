"""Model tiers for auto-routing."""

from __future__ import annotations

from enum import Enum


class Tier(str, Enum):
    """Cost/capability tiers, ordered low < mid < top."""

    LOW = "low"
    MID = "mid"
    TOP = "top"

    @property
    def rank(self) -> int:
        return _RANKS[self]

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Tier):
            return NotImplemented
        return self.rank < other.rank


_RANKS = {Tier.LOW: 0, Tier.MID: 1, Tier.TOP: 2}

# Bracketed override tags -> tier
OVERRIDE_ALIASES: dict[str, Tier] = {
    "low": Tier.LOW,
    "med": Tier.MID,
    "medium": Tier.MID,
    "high": Tier.TOP,
}
