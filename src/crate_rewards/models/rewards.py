"""Reward draw data models."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from .account import to_camel


class RewardTier(str, Enum):
    """Rarity tiers for crate rewards."""
    COMMON = "common"
    RARE = "rare"
    EPIC = "epic"
    LEGENDARY = "legendary"


class RewardOutcome(BaseModel):
    """The reward produced by opening one crate."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )

    reward_id: str = Field(..., description="Drawn reward identifier")
    tier: RewardTier = Field(..., description="Rarity tier the reward was drawn from")
    is_new: bool = Field(default=True, description="False if the reward was already unlocked")
    crates_remaining: Optional[int] = Field(None, ge=0, description="Balance after opening")
