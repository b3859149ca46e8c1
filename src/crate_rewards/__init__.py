"""Workout reward economy: earn crates by working out, open them for themes."""

from .config import Settings, get_settings
from .db import InMemoryAccountStore, SQLiteAccountStore, create_store
from .economy import DrawEngine
from .exceptions import (
    AccountNotFoundError,
    CrateRewardsError,
    ErrorCode,
    InsufficientFundsError,
    NotAuthenticatedError,
    NotUnlockedError,
    StorageUnavailableError,
    ValidationError,
)
from .identity import IdentityProvider, StaticIdentityProvider
from .models import RewardOutcome, RewardTier, UserAccount, WorkoutSession
from .services import RewardService
from .utils import configure_logging

__all__ = [
    "AccountNotFoundError",
    "CrateRewardsError",
    "DrawEngine",
    "ErrorCode",
    "IdentityProvider",
    "InMemoryAccountStore",
    "InsufficientFundsError",
    "NotAuthenticatedError",
    "NotUnlockedError",
    "RewardOutcome",
    "RewardService",
    "RewardTier",
    "SQLiteAccountStore",
    "Settings",
    "StaticIdentityProvider",
    "StorageUnavailableError",
    "UserAccount",
    "ValidationError",
    "WorkoutSession",
    "configure_logging",
    "create_store",
    "get_settings",
]
