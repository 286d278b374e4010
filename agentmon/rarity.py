"""Server-side rarity draw.

Rarity is pure chance and never looks at the uploaded content. Weights:

    Common        69.0499%
    Uncommon      22.00%
    Rare           7.00%
    Epic           1.50%
    Legendary      0.40%
    Hyper Rare     0.05%
    Singularity    0.0001%
"""
from __future__ import annotations

import secrets
from typing import Callable, List, Optional, Tuple

from .models import RARITIES
from .utils import get_logger

LOGGER = get_logger(__name__)

RARITY_WEIGHTS: Tuple[Tuple[str, float], ...] = (
    ("Common", 0.690499),
    ("Uncommon", 0.2200),
    ("Rare", 0.0700),
    ("Epic", 0.0150),
    ("Legendary", 0.0040),
    ("Hyper Rare", 0.0005),
    ("Singularity", 0.000001),
)

EXPANDED_VARIANCE_TIERS = frozenset({"Hyper Rare", "Singularity"})


def _cumulative(weights: Tuple[Tuple[str, float], ...]) -> List[Tuple[str, float]]:
    table: List[Tuple[str, float]] = []
    running = 0.0
    for tier, weight in weights:
        running += weight
        table.append((tier, running))
    return table


CUMULATIVE_TABLE = _cumulative(RARITY_WEIGHTS)


def secure_uniform() -> float:
    """Cryptographically secure float in [0, 1) with 32 bits of resolution."""
    return secrets.randbits(32) / 2**32


def has_expanded_variance(rarity: str) -> bool:
    """True for the two rarest tiers, which get the wider HP band."""
    return rarity in EXPANDED_VARIANCE_TIERS


def is_rarity(value: Optional[str]) -> bool:
    return value in RARITIES


class RarityAllocator:
    """Draw a weighted rarity tier from a cumulative table."""

    def __init__(self, random_source: Callable[[], float] = secure_uniform) -> None:
        self.random_source = random_source
        self.table = CUMULATIVE_TABLE

    def roll(self) -> str:
        draw = self.random_source()
        for tier, cumulative in self.table:
            if cumulative > draw:
                return tier
        # Only reachable when the draw lands at or above the float sum of all
        # weights. Falls back to the most common tier.
        LOGGER.warning("Rarity draw %r exceeded cumulative table; using %s", draw, self.table[0][0])
        return self.table[0][0]

    def allocate(self, override: Optional[str] = None) -> str:
        """Return ``override`` when it names a tier, otherwise draw one."""
        if override is not None:
            if is_rarity(override):
                LOGGER.info("Using rarity override %s", override)
                return override
            LOGGER.warning("Ignoring unknown rarity override %r", override)
        return self.roll()


def roll_rarity() -> str:
    return RarityAllocator().roll()
