"""
Reward calculator.

Converts a finished workout's duration into crates, charging the minutes
against the daily allowance. Pure: the caller persists the returned ledger
and the crate credit together.

Crates are counted on the day's running minute total, so minutes left over
from one session carry toward the next crate in a later session, and a day
never yields more than ``max_daily_minutes // minutes_per_crate`` crates
however the minutes are split between sessions.
"""

from dataclasses import dataclass
from datetime import date

from ..exceptions import ValidationError
from .allowance import (
    MAX_DAILY_CREDIT_MINUTES,
    DailyAllowance,
    minutes_counted_today,
    minutes_remaining_today,
)


MINUTES_PER_CRATE = 15
MS_PER_MINUTE = 60_000


@dataclass(frozen=True)
class CreditResult:
    """Outcome of crediting one workout."""
    crates_earned: int
    ledger: DailyAllowance
    message: str
    minutes_counted: int
    duration_minutes: int
    daily_minutes_remaining: int


def _plural(count: int, word: str) -> str:
    return f"{count} {word}" if count == 1 else f"{count} {word}s"


def credit(
    duration_ms: int,
    ledger: DailyAllowance,
    today: date,
    minutes_per_crate: int = MINUTES_PER_CRATE,
    max_daily_minutes: int = MAX_DAILY_CREDIT_MINUTES,
) -> CreditResult:
    """
    Credit a workout of ``duration_ms`` against ``ledger`` on ``today``.

    Args:
        duration_ms: Elapsed workout time in milliseconds
        ledger: Current daily allowance state
        today: Calendar date of the credit in the user's zone
        minutes_per_crate: Minutes of workout per crate
        max_daily_minutes: Minutes per day that can count toward crates

    Returns:
        CreditResult with crates earned, the ledger to persist and a
        user-facing message

    Raises:
        ValidationError: If the duration is negative or the crate rate and
            daily cap are out of range
    """
    if duration_ms < 0:
        raise ValidationError("Workout duration cannot be negative", field="duration_ms")
    if minutes_per_crate <= 0:
        raise ValidationError("minutes_per_crate must be positive", field="minutes_per_crate")
    if max_daily_minutes < 0:
        raise ValidationError("max_daily_minutes cannot be negative", field="max_daily_minutes")

    duration_minutes = duration_ms // MS_PER_MINUTE
    counted = minutes_counted_today(ledger, today)
    remaining = minutes_remaining_today(ledger, today, max_daily_minutes)

    if duration_minutes < minutes_per_crate:
        needed = minutes_per_crate - duration_minutes
        return CreditResult(
            crates_earned=0,
            ledger=ledger,
            message=f"Work out {_plural(needed, 'more minute')} to earn a crate.",
            minutes_counted=0,
            duration_minutes=duration_minutes,
            daily_minutes_remaining=remaining,
        )

    effective = min(duration_minutes, remaining)

    if effective <= 0:
        return CreditResult(
            crates_earned=0,
            ledger=DailyAllowance(daily_workout_minutes=counted, last_credit_date=today),
            message=(
                f"You've reached today's limit of {max_daily_minutes} workout minutes. "
                "Come back tomorrow for more crates!"
            ),
            minutes_counted=0,
            duration_minutes=duration_minutes,
            daily_minutes_remaining=0,
        )

    new_total = counted + effective
    crates_earned = new_total // minutes_per_crate - counted // minutes_per_crate
    remaining_after = max_daily_minutes - new_total
    progress = new_total % minutes_per_crate

    if crates_earned > 0:
        message = f"You earned {_plural(crates_earned, 'crate')}!"
    else:
        message = f"{_plural(effective, 'minute')} counted toward your next crate."

    if remaining_after <= 0:
        message += " That's all the crates you can earn today."
    elif progress:
        # A total on an exact multiple has no partial crate in progress
        message += f" {_plural(minutes_per_crate - progress, 'more minute')} until your next crate."

    return CreditResult(
        crates_earned=crates_earned,
        ledger=DailyAllowance(daily_workout_minutes=new_total, last_credit_date=today),
        message=message,
        minutes_counted=effective,
        duration_minutes=duration_minutes,
        daily_minutes_remaining=max(0, remaining_after),
    )
