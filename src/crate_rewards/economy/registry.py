"""Unlock registry and active reward selection."""

from typing import Tuple

from ..exceptions import NotUnlockedError, ValidationError
from ..models.account import UserAccount
from ..themes import is_known_reward


def is_unlocked(account: UserAccount, reward_id: str) -> bool:
    return reward_id in account.unlocked_rewards


def unlock(account: UserAccount, reward_id: str) -> Tuple[UserAccount, bool]:
    """
    Add ``reward_id`` to the account's unlocked rewards.

    Idempotent: unlocking an owned reward returns the account unchanged.

    Returns:
        Tuple of (account, newly_unlocked)

    Raises:
        ValidationError: If the reward is not in the theme catalog
    """
    if not is_known_reward(reward_id):
        raise ValidationError(f"Unknown reward '{reward_id}'", field="reward_id")
    if is_unlocked(account, reward_id):
        return account, False
    return (
        account.model_copy(update={"unlocked_rewards": [*account.unlocked_rewards, reward_id]}),
        True,
    )


def set_active(account: UserAccount, reward_id: str) -> UserAccount:
    """
    Equip an unlocked reward.

    Raises:
        NotUnlockedError: If the reward was never unlocked
    """
    if not is_unlocked(account, reward_id):
        raise NotUnlockedError(reward_id)
    return account.model_copy(update={"active_reward": reward_id})
