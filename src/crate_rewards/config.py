"""Configuration settings for the crate reward economy."""

from pathlib import Path
from functools import lru_cache
from typing import Literal
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .themes import DEFAULT_THEME, STARTER_THEMES, is_known_reward


# __file__ = src/crate_rewards/config.py
# .parent.parent.parent = project root
PROJECT_ROOT = Path(__file__).parent.parent.parent


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="CRATE_REWARDS_",
        env_file=str(PROJECT_ROOT / ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Storage
    storage_backend: Literal["memory", "sqlite"] = "sqlite"
    db_path: Path | None = None

    # Day boundaries are evaluated in this zone
    timezone: str = "UTC"

    # Economy tuning
    minutes_per_crate: int = Field(default=15, gt=0)
    max_daily_credit_minutes: int = Field(default=120, ge=0)

    # Themes every new account owns
    starter_rewards: list[str] = Field(default_factory=lambda: list(STARTER_THEMES), min_length=1)
    default_reward: str = DEFAULT_THEME

    leaderboard_size: int = Field(default=10, gt=0)

    # Logging
    log_level: str = "INFO"

    @field_validator("timezone")
    @classmethod
    def _known_timezone(cls, value: str) -> str:
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"Unknown timezone '{value}'") from e
        return value

    @field_validator("starter_rewards")
    @classmethod
    def _known_rewards(cls, value: list[str]) -> list[str]:
        unknown = [reward_id for reward_id in value if not is_known_reward(reward_id)]
        if unknown:
            raise ValueError(f"Unknown starter rewards: {unknown}")
        return value

    @model_validator(mode="after")
    def _default_reward_is_starter(self) -> "Settings":
        if self.default_reward not in self.starter_rewards:
            raise ValueError(
                f"default_reward '{self.default_reward}' is not in starter_rewards"
            )
        return self

    def model_post_init(self, __context) -> None:
        """Set default database path after initialization."""
        if self.db_path is None:
            self.db_path = PROJECT_ROOT / "crate_rewards.db"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
