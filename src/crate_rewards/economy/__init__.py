"""Workout reward economy: pure rules for crates, draws, unlocks and streaks."""

from .allowance import (
    MAX_DAILY_CREDIT_MINUTES,
    DailyAllowance,
    minutes_counted_today,
    minutes_remaining_today,
)
from .calculator import MINUTES_PER_CRATE, CreditResult, credit
from .currency import CurrencyLedger, apply_credit, apply_debit
from .draw import DRAW_TABLE, DrawEngine, TierBand, classify_sample, select_reward
from .registry import is_unlocked, set_active, unlock
from .session_timer import elapsed_ms, finish_session, format_elapsed, start_session
from .streak import StreakUpdate, advance_streak, apply_login

__all__ = [
    "DRAW_TABLE",
    "MAX_DAILY_CREDIT_MINUTES",
    "MINUTES_PER_CRATE",
    "CreditResult",
    "CurrencyLedger",
    "DailyAllowance",
    "DrawEngine",
    "StreakUpdate",
    "TierBand",
    "advance_streak",
    "apply_credit",
    "apply_debit",
    "apply_login",
    "classify_sample",
    "credit",
    "elapsed_ms",
    "finish_session",
    "format_elapsed",
    "is_unlocked",
    "minutes_counted_today",
    "minutes_remaining_today",
    "select_reward",
    "set_active",
    "start_session",
    "unlock",
]
