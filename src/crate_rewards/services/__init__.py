"""Services exposed to the UI layer."""

from .reward_service import RewardService

__all__ = ["RewardService"]
