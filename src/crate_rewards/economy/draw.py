"""
Crate draw engine.

The tier table is data: each band holds the cumulative upper bound of its
probability range and the pool of rewards it can yield. Bands are half-open,
``[previous upper bound, upper bound)``, so a sample of exactly 0.60 falls in
the rare band.

Draws are a pure function of the injected ``random.Random``; seed it to
replay a sequence of draws.
"""

import random
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from ..exceptions import ValidationError
from ..models.rewards import RewardOutcome, RewardTier


@dataclass(frozen=True)
class TierBand:
    """One probability band of the draw table."""
    tier: RewardTier
    upper_bound: float
    pool: Tuple[str, ...]


DRAW_TABLE: Tuple[TierBand, ...] = (
    TierBand(RewardTier.COMMON, 0.60, ("good_boy",)),
    TierBand(RewardTier.RARE, 0.90, ("spring", "summer", "autumn", "winter")),
    TierBand(RewardTier.EPIC, 0.98, ("cca", "mr_hare", "nether")),
    TierBand(RewardTier.LEGENDARY, 1.0, ("midnight", "america", "enderpearl")),
)


def validate_table(table: Sequence[TierBand]) -> None:
    """
    Check a draw table is well formed.

    Raises:
        ValidationError: If bounds are not strictly increasing, the last
            bound is not 1.0, or a pool is empty
    """
    if not table:
        raise ValidationError("Draw table is empty", field="table")
    previous = 0.0
    for band in table:
        if band.upper_bound <= previous:
            raise ValidationError(
                f"Band {band.tier.value} bound {band.upper_bound} is not above {previous}",
                field="table",
            )
        if not band.pool:
            raise ValidationError(f"Band {band.tier.value} has an empty pool", field="table")
        previous = band.upper_bound
    if table[-1].upper_bound != 1.0:
        raise ValidationError("Last band must end at 1.0", field="table")


def _check_sample(sample: float, name: str) -> None:
    if not 0.0 <= sample < 1.0:
        raise ValidationError(f"Sample {sample} is outside [0, 1)", field=name)


def classify_sample(sample: float, table: Sequence[TierBand] = DRAW_TABLE) -> TierBand:
    """Return the band containing ``sample``."""
    _check_sample(sample, "sample")
    for band in table:
        if sample < band.upper_bound:
            return band
    return table[-1]


def select_reward(band: TierBand, sample: float) -> str:
    """Pick a reward uniformly from the band's pool using ``sample``."""
    _check_sample(sample, "pool_sample")
    index = min(int(sample * len(band.pool)), len(band.pool) - 1)
    return band.pool[index]


class DrawEngine:
    """Produces reward outcomes from a tier table and a random source."""

    def __init__(
        self,
        rng: Optional[random.Random] = None,
        table: Sequence[TierBand] = DRAW_TABLE,
    ):
        validate_table(table)
        self._rng = rng or random.Random()
        self._table = tuple(table)

    @property
    def table(self) -> Tuple[TierBand, ...]:
        return self._table

    def draw(self) -> RewardOutcome:
        """Draw one reward. Only call after a crate has been debited."""
        tier_sample = self._rng.random()
        pool_sample = self._rng.random()
        return self.draw_from_samples(tier_sample, pool_sample)

    def draw_from_samples(self, tier_sample: float, pool_sample: float) -> RewardOutcome:
        band = classify_sample(tier_sample, self._table)
        return RewardOutcome(
            reward_id=select_reward(band, pool_sample),
            tier=band.tier,
        )
