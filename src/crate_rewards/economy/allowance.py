"""Daily allowance ledger: workout minutes already credited today."""

from dataclasses import dataclass
from datetime import date
from typing import Optional

from ..models.account import UserAccount


MAX_DAILY_CREDIT_MINUTES = 120


@dataclass(frozen=True)
class DailyAllowance:
    """Minutes credited toward crates on ``last_credit_date``."""
    daily_workout_minutes: int = 0
    last_credit_date: Optional[date] = None

    @classmethod
    def from_account(cls, account: UserAccount) -> "DailyAllowance":
        return cls(
            daily_workout_minutes=account.daily_workout_minutes,
            last_credit_date=account.last_credit_date,
        )

    def to_update(self) -> dict:
        """Partial account update persisting this ledger."""
        return {
            "daily_workout_minutes": self.daily_workout_minutes,
            "last_credit_date": self.last_credit_date,
        }


def minutes_counted_today(allowance: DailyAllowance, today: date) -> int:
    """Minutes already credited today; a stale date counts as zero."""
    if allowance.last_credit_date != today:
        return 0
    return max(0, allowance.daily_workout_minutes)


def minutes_remaining_today(
    allowance: DailyAllowance,
    today: date,
    max_daily_minutes: int = MAX_DAILY_CREDIT_MINUTES,
) -> int:
    """Minutes that can still count toward crates today."""
    return max(0, max_daily_minutes - minutes_counted_today(allowance, today))
