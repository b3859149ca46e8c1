"""
Reward service: the entry point the UI layer calls.

Handles:
- Workout sessions and crate credits against the daily allowance
- Opening crates (debit, draw and unlock in one transaction)
- Equipping unlocked themes
- Login streaks
- The workouts leaderboard

Every operation acts on the account of the user reported by the identity
provider. A missing account is initialised with the starter themes instead
of failing.
"""

import logging
from datetime import date, datetime, timezone
from typing import Callable, Dict, List, Optional
from zoneinfo import ZoneInfo

from ..config import Settings, get_settings
from ..db.store import AccountStore
from ..economy.allowance import DailyAllowance
from ..economy.calculator import CreditResult, credit
from ..economy.currency import CurrencyLedger, apply_credit, apply_debit
from ..economy.draw import DrawEngine
from ..economy.registry import set_active, unlock
from ..economy.session_timer import elapsed_ms, finish_session, start_session
from ..economy.streak import StreakUpdate, apply_login
from ..exceptions import (
    AccountNotFoundError,
    InsufficientFundsError,
    NotAuthenticatedError,
    NotUnlockedError,
    StorageUnavailableError,
    ValidationError,
)
from ..identity import IdentityProvider
from ..models.account import (
    LeaderboardEntry,
    LoginResult,
    SessionReward,
    UserAccount,
    WorkoutSession,
)
from ..models.rewards import RewardOutcome
from ..themes import Theme, get_theme


logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class RewardService:
    """
    Service wiring the economy rules to a store and an identity provider.

    The service holds no per-user state; the account is read from and
    written to the store on every call.
    """

    def __init__(
        self,
        store: AccountStore,
        identity: IdentityProvider,
        draw_engine: Optional[DrawEngine] = None,
        settings: Optional[Settings] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """
        Initialize the reward service.

        Args:
            store: Account storage backend
            identity: Source of the signed-in user
            draw_engine: Crate draw engine. A randomly seeded one if not provided.
            settings: Economy settings. Uses cached settings if not provided.
            clock: Returns the current timezone-aware instant
        """
        self._store = store
        self._identity = identity
        self._draw_engine = draw_engine or DrawEngine()
        self._settings = settings or get_settings()
        self._clock = clock or _utcnow
        self._zone = ZoneInfo(self._settings.timezone)
        self._ledger = CurrencyLedger(store)

    @property
    def ledger(self) -> CurrencyLedger:
        return self._ledger

    def today(self) -> date:
        """Calendar date in the configured zone."""
        return self._clock().astimezone(self._zone).date()

    def _require_user(self) -> str:
        user_id = self._identity.current_user_id()
        if not user_id:
            raise NotAuthenticatedError()
        return user_id

    def _new_account(self, user_id: str) -> UserAccount:
        return UserAccount(
            user_id=user_id,
            display_name=self._identity.display_name(),
            unlocked_rewards=list(self._settings.starter_rewards),
            active_reward=self._settings.default_reward,
        )

    # =========================================================================
    # Accounts
    # =========================================================================

    async def get_account(self) -> UserAccount:
        """
        Get the signed-in user's account, creating it on first use.

        Raises:
            NotAuthenticatedError: If no user is signed in
            StorageUnavailableError: If the store cannot be reached
        """
        user_id = self._require_user()
        try:
            return await self._store.read_account(user_id)
        except AccountNotFoundError:
            logger.warning(f"No account for {user_id}, initialising a fresh one")
            return await self._store.create_account(self._new_account(user_id))

    async def crate_balance(self) -> int:
        await self.get_account()
        return await self._ledger.balance(self._require_user())

    # =========================================================================
    # Workout Sessions
    # =========================================================================

    def start_session(self) -> WorkoutSession:
        """Start timing a workout now."""
        return start_session(self._clock())

    def end_session(self, session: WorkoutSession) -> WorkoutSession:
        """Stop the clock on a session. A finished session is returned as is."""
        return finish_session(session, self._clock())

    async def finish_session(self, session: WorkoutSession) -> SessionReward:
        """
        Finish a workout and credit the crates it earned.

        The daily allowance and the crate balance are written in the same
        transaction, so concurrent finishes cannot both spend today's
        allowance.

        Args:
            session: The session returned by ``start_session``; it is closed
                now if it is still open

        Returns:
            SessionReward with crates earned and a user-facing message

        Raises:
            NotAuthenticatedError: If no user is signed in
            ValidationError: If the session ends before it starts
            StorageUnavailableError: If the credit could not be saved. The
                closed session is dumped to ``details["session"]`` so a
                retry can credit the same instants.
        """
        user_id = self._require_user()
        closed = self.end_session(session)
        duration_ms = elapsed_ms(closed)
        today = self.today()
        minutes_per_crate = self._settings.minutes_per_crate
        results: Dict[str, CreditResult] = {}

        def apply(account: UserAccount) -> UserAccount:
            result = credit(
                duration_ms,
                DailyAllowance.from_account(account),
                today,
                minutes_per_crate=minutes_per_crate,
                max_daily_minutes=self._settings.max_daily_credit_minutes,
            )
            results["credit"] = result
            updated = account.model_copy(update=result.ledger.to_update())
            if result.duration_minutes >= minutes_per_crate:
                updated = updated.model_copy(
                    update={"workouts_completed": updated.workouts_completed + 1}
                )
            if result.crates_earned > 0:
                updated = apply_credit(updated, result.crates_earned)
            return updated

        try:
            await self.get_account()
            account = await self._store.transact(user_id, apply)
        except StorageUnavailableError as e:
            logger.warning(f"Could not save workout for {user_id}: {e.message}")
            e.details["session"] = closed.model_dump(mode="json")
            raise

        result = results["credit"]
        if result.crates_earned:
            logger.info(
                f"Credited {result.crates_earned} crates to {user_id} "
                f"for {result.minutes_counted} minutes. Balance: {account.crate_balance}"
            )

        return SessionReward(
            crates_earned=result.crates_earned,
            message=result.message,
            minutes_counted=result.minutes_counted,
            elapsed_ms=duration_ms,
            crate_balance=account.crate_balance,
            daily_minutes_remaining=result.daily_minutes_remaining,
        )

    # =========================================================================
    # Crates
    # =========================================================================

    async def open_crate(self) -> RewardOutcome:
        """
        Spend one crate and draw a reward.

        The debit, the draw and the unlock commit together. If the
        transaction fails nothing is drawn and the balance is untouched.

        Raises:
            NotAuthenticatedError: If no user is signed in
            InsufficientFundsError: If the balance is zero
            StorageUnavailableError: If the transaction could not be saved
        """
        user_id = self._require_user()
        outcomes: Dict[str, RewardOutcome] = {}

        def apply(account: UserAccount) -> UserAccount:
            account = apply_debit(account)
            outcome = self._draw_engine.draw()
            account, is_new = unlock(account, outcome.reward_id)
            outcomes["drawn"] = outcome.model_copy(update={"is_new": is_new})
            return account

        await self.get_account()
        try:
            account = await self._store.transact(user_id, apply)
        except InsufficientFundsError:
            logger.info(f"Crate open refused for {user_id}: no crates")
            raise

        outcome = outcomes["drawn"].model_copy(update={"crates_remaining": account.crate_balance})
        logger.info(
            f"{user_id} opened a crate: {outcome.reward_id} ({outcome.tier.value})"
            f"{' new' if outcome.is_new else ' duplicate'}"
        )
        return outcome

    # =========================================================================
    # Themes
    # =========================================================================

    async def equip_reward(self, reward_id: str) -> UserAccount:
        """
        Make an unlocked reward the active theme.

        Raises:
            NotAuthenticatedError: If no user is signed in
            NotUnlockedError: If the reward was never unlocked
        """
        user_id = self._require_user()
        await self.get_account()
        try:
            account = await self._store.transact(user_id, lambda acc: set_active(acc, reward_id))
        except NotUnlockedError:
            logger.warning(f"{user_id} tried to equip locked reward {reward_id}")
            raise
        logger.info(f"{user_id} equipped {reward_id}")
        return account

    async def active_theme(self) -> Theme:
        account = await self.get_account()
        return get_theme(account.active_reward)

    async def unlocked_themes(self) -> List[Theme]:
        account = await self.get_account()
        return [get_theme(reward_id) for reward_id in account.unlocked_rewards]

    # =========================================================================
    # Streaks
    # =========================================================================

    async def record_login(self) -> LoginResult:
        """
        Record a session start for the login streak.

        Call once per app session; repeated calls on the same day are
        harmless.
        """
        user_id = self._require_user()
        today = self.today()
        display_name = self._identity.display_name()
        updates: Dict[str, StreakUpdate] = {}

        def apply(account: UserAccount) -> UserAccount:
            account, update = apply_login(account, today)
            updates["streak"] = update
            if display_name and display_name != account.display_name:
                account = account.model_copy(update={"display_name": display_name})
            return account

        await self.get_account()
        await self._store.transact(user_id, apply)
        update = updates["streak"]
        if update.changed:
            logger.info(f"{user_id} login streak is now {update.streak}")
        return LoginResult(
            streak=update.streak,
            longest_streak=update.longest_streak,
            streak_updated=update.changed,
        )

    # =========================================================================
    # Leaderboard
    # =========================================================================

    async def leaderboard(self, limit: Optional[int] = None) -> List[LeaderboardEntry]:
        """Rank users by credited workouts, most first."""
        if limit is None:
            limit = self._settings.leaderboard_size
        if limit < 0:
            raise ValidationError("limit cannot be negative", field="limit")
        accounts = await self._store.list_accounts()
        ranked = sorted(
            accounts,
            key=lambda acc: (-acc.workouts_completed, (acc.display_name or acc.user_id).lower()),
        )
        return [
            LeaderboardEntry(
                rank=index + 1,
                name=acc.display_name or acc.user_id,
                workouts=acc.workouts_completed,
            )
            for index, acc in enumerate(ranked[:limit])
        ]
