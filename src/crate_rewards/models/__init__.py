"""Data models for the crate economy."""

from .account import (
    LeaderboardEntry,
    LoginResult,
    SessionReward,
    UserAccount,
    WorkoutSession,
    to_camel,
)
from .rewards import RewardOutcome, RewardTier

__all__ = [
    "LeaderboardEntry",
    "LoginResult",
    "RewardOutcome",
    "RewardTier",
    "SessionReward",
    "UserAccount",
    "WorkoutSession",
    "to_camel",
]
