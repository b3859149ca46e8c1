"""Login streak tracking."""

from dataclasses import dataclass
from datetime import date
from typing import Optional, Tuple

from ..models.account import UserAccount


@dataclass(frozen=True)
class StreakUpdate:
    """State after evaluating one login."""
    streak: int
    longest_streak: int
    last_login_date: date
    changed: bool


def advance_streak(
    last_login_date: Optional[date],
    streak: int,
    today: date,
    longest_streak: int = 0,
) -> StreakUpdate:
    """
    Evaluate a login on ``today``.

    - First login ever: streak starts at 1
    - Same day: no change
    - Next day: streak + 1
    - Gap of two days or more: streak restarts at 1
    - Login dated before the last one (clock moved back): no change, and
      the last login date is kept

    Returns:
        StreakUpdate with the new streak and last login date
    """
    if last_login_date is None:
        new_streak = 1
    else:
        days_diff = (today - last_login_date).days
        if days_diff < 0:
            return StreakUpdate(
                streak=streak,
                longest_streak=max(longest_streak, streak),
                last_login_date=last_login_date,
                changed=False,
            )
        if days_diff == 0:
            new_streak = streak
        elif days_diff == 1:
            new_streak = streak + 1
        else:
            new_streak = 1

    return StreakUpdate(
        streak=new_streak,
        longest_streak=max(longest_streak, new_streak),
        last_login_date=today,
        changed=new_streak != streak,
    )


def apply_login(account: UserAccount, today: date) -> Tuple[UserAccount, StreakUpdate]:
    """Return ``account`` with the login on ``today`` recorded."""
    update = advance_streak(
        account.last_login_date,
        account.login_streak,
        today,
        longest_streak=account.longest_streak,
    )
    account = account.model_copy(
        update={
            "login_streak": update.streak,
            "longest_streak": update.longest_streak,
            "last_login_date": update.last_login_date,
        }
    )
    return account, update
