"""Account and session data models for the crate economy."""

from datetime import date
from typing import List, Optional

from pydantic import (
    AwareDatetime,
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)


def to_camel(string: str) -> str:
    """Convert snake_case to camelCase."""
    components = string.split("_")
    return components[0] + "".join(x.title() for x in components[1:])


class UserAccount(BaseModel):
    """
    Per-user economy state, owned by the store and mutated by this package.

    ``daily_workout_minutes`` only applies to ``last_credit_date``; callers
    must read it through ``allowance.minutes_counted_today``.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )

    user_id: str = Field(..., description="Stable identifier from the identity provider")
    display_name: Optional[str] = Field(None, description="Name shown on the leaderboard")
    crate_balance: int = Field(default=0, ge=0, description="Spendable crates")
    daily_workout_minutes: int = Field(default=0, ge=0, description="Minutes credited on last_credit_date")
    last_credit_date: Optional[date] = Field(None, description="Date daily_workout_minutes applies to")
    unlocked_rewards: List[str] = Field(default_factory=list, description="Unlocked reward ids, no duplicates")
    active_reward: Optional[str] = Field(None, description="Currently equipped reward")
    login_streak: int = Field(default=0, ge=0, description="Consecutive login days")
    longest_streak: int = Field(default=0, ge=0, description="Best streak reached")
    last_login_date: Optional[date] = Field(None, description="Date of the last recorded login")
    workouts_completed: int = Field(default=0, ge=0, description="Credited workout sessions")
    total_crates_earned: int = Field(default=0, ge=0, description="Lifetime crates earned")
    total_crates_opened: int = Field(default=0, ge=0, description="Lifetime crates opened")

    @field_validator("unlocked_rewards")
    @classmethod
    def _dedupe_rewards(cls, value: List[str]) -> List[str]:
        return list(dict.fromkeys(value))

    @model_validator(mode="after")
    def _active_must_be_unlocked(self) -> "UserAccount":
        if self.active_reward is not None and self.active_reward not in self.unlocked_rewards:
            raise ValueError(
                f"active_reward '{self.active_reward}' is not in unlocked_rewards"
            )
        return self


class WorkoutSession(BaseModel):
    """A workout in progress or just finished. Never persisted."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )

    started_at: AwareDatetime = Field(..., description="When the workout started")
    ended_at: Optional[AwareDatetime] = Field(None, description="When the workout finished")

    @property
    def is_finished(self) -> bool:
        return self.ended_at is not None


class SessionReward(BaseModel):
    """Result of finishing a workout session."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )

    crates_earned: int = Field(default=0, ge=0, description="Crates credited for this session")
    message: str = Field(..., description="User-facing summary")
    minutes_counted: int = Field(default=0, ge=0, description="Minutes charged against today's allowance")
    elapsed_ms: int = Field(default=0, ge=0, description="Session length in milliseconds")
    crate_balance: int = Field(default=0, ge=0, description="Balance after the credit")
    daily_minutes_remaining: int = Field(default=0, ge=0, description="Allowance left today")


class LoginResult(BaseModel):
    """Result of recording a login."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )

    streak: int = Field(..., ge=0, description="Current login streak")
    longest_streak: int = Field(default=0, ge=0, description="Best streak reached")
    streak_updated: bool = Field(default=False, description="Whether the streak value changed")


class LeaderboardEntry(BaseModel):
    """One leaderboard row."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )

    rank: int = Field(..., ge=1)
    name: str = Field(..., description="Display name, or the user id when unnamed")
    workouts: int = Field(default=0, ge=0, description="Credited workouts")
