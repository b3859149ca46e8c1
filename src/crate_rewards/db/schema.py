"""Database schema for crate economy accounts."""

SCHEMA = """
-- One row per user identity
CREATE TABLE IF NOT EXISTS accounts (
    user_id TEXT PRIMARY KEY,
    display_name TEXT,
    crate_balance INTEGER NOT NULL DEFAULT 0 CHECK (crate_balance >= 0),
    daily_workout_minutes INTEGER NOT NULL DEFAULT 0 CHECK (daily_workout_minutes >= 0),
    last_credit_date TEXT,
    unlocked_rewards TEXT NOT NULL DEFAULT '[]',  -- JSON array, no duplicates
    active_reward TEXT,
    login_streak INTEGER NOT NULL DEFAULT 0,
    longest_streak INTEGER NOT NULL DEFAULT 0,
    last_login_date TEXT,
    workouts_completed INTEGER NOT NULL DEFAULT 0,
    total_crates_earned INTEGER NOT NULL DEFAULT 0,
    total_crates_opened INTEGER NOT NULL DEFAULT 0,
    created_at TEXT DEFAULT CURRENT_TIMESTAMP,
    updated_at TEXT DEFAULT CURRENT_TIMESTAMP
);

CREATE INDEX IF NOT EXISTS idx_accounts_workouts ON accounts(workouts_completed DESC);
"""

ACCOUNT_COLUMNS = (
    "user_id",
    "display_name",
    "crate_balance",
    "daily_workout_minutes",
    "last_credit_date",
    "unlocked_rewards",
    "active_reward",
    "login_streak",
    "longest_streak",
    "last_login_date",
    "workouts_completed",
    "total_crates_earned",
    "total_crates_opened",
)
