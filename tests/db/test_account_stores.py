"""Tests for the account store implementations.

Every test runs against both the in-memory and the SQLite store:
1. Reading and creating accounts
2. Merge and replace writes
3. Atomic increments
4. Conditional transactions and aborts
5. Failure translation to StorageUnavailableError (SQLite)
6. Concurrent callers across connections, threads and coroutines
"""

import asyncio
import sqlite3
import threading
from concurrent.futures import ThreadPoolExecutor
from datetime import date

import pytest

from crate_rewards.config import Settings
from crate_rewards.db import (
    AccountStore,
    InMemoryAccountStore,
    SQLiteAccountStore,
    create_store,
)
from crate_rewards.economy.currency import apply_debit
from crate_rewards.exceptions import (
    AccountNotFoundError,
    InsufficientFundsError,
    StorageUnavailableError,
    ValidationError,
)
from crate_rewards.models.account import UserAccount


@pytest.fixture(params=["memory", "sqlite"])
def store(request):
    """Each store implementation in turn."""
    return request.getfixturevalue(f"{request.param}_store")


@pytest.fixture
def account():
    return UserAccount(
        user_id="user-123",
        display_name="Alice Brown",
        unlocked_rewards=["light", "dark"],
        active_reward="light",
    )


class TestProtocol:
    """Both stores satisfy the AccountStore protocol."""

    def test_is_account_store(self, store):
        assert isinstance(store, AccountStore)


class TestReadAndCreate:
    """Tests for reading and creating accounts."""

    @pytest.mark.asyncio
    async def test_missing_account(self, store):
        with pytest.raises(AccountNotFoundError) as exc_info:
            await store.read_account("nobody")
        assert exc_info.value.details["user_id"] == "nobody"

    @pytest.mark.asyncio
    async def test_create_then_read(self, store, account):
        await store.create_account(account)
        stored = await store.read_account("user-123")
        assert stored == account

    @pytest.mark.asyncio
    async def test_create_does_not_overwrite(self, store, account):
        await store.create_account(account)
        await store.increment("user-123", {"crate_balance": 4})

        stored = await store.create_account(account)

        assert stored.crate_balance == 4

    @pytest.mark.asyncio
    async def test_dates_round_trip(self, store, account):
        account = account.model_copy(
            update={"last_credit_date": date(2024, 3, 10), "last_login_date": date(2024, 3, 9)}
        )
        await store.create_account(account)
        stored = await store.read_account("user-123")
        assert stored.last_credit_date == date(2024, 3, 10)
        assert stored.last_login_date == date(2024, 3, 9)

    @pytest.mark.asyncio
    async def test_list_accounts(self, store, account):
        await store.create_account(account)
        await store.create_account(UserAccount(user_id="user-456"))

        accounts = await store.list_accounts()

        assert sorted(a.user_id for a in accounts) == ["user-123", "user-456"]


class TestWriteAccount:
    """Tests for non-conditional writes."""

    @pytest.mark.asyncio
    async def test_merge_write_changes_only_given_fields(self, store, account):
        await store.create_account(account)

        stored = await store.write_account("user-123", {"display_name": "Bob White"})

        assert stored.display_name == "Bob White"
        assert stored.unlocked_rewards == ["light", "dark"]
        assert (await store.read_account("user-123")).display_name == "Bob White"

    @pytest.mark.asyncio
    async def test_merge_write_creates_missing_account(self, store):
        stored = await store.write_account("new-user", {"crate_balance": 2})
        assert stored.crate_balance == 2

    @pytest.mark.asyncio
    async def test_replace_write(self, store, account):
        await store.create_account(account)

        stored = await store.write_account("user-123", {"crate_balance": 1}, merge=False)

        assert stored.crate_balance == 1
        assert stored.unlocked_rewards == []
        assert stored.display_name is None

    @pytest.mark.asyncio
    async def test_invalid_write_rejected(self, store, account):
        await store.create_account(account)

        with pytest.raises(ValidationError):
            await store.write_account("user-123", {"active_reward": "nether"})
        with pytest.raises(ValidationError):
            await store.write_account("user-123", {"crate_balance": -1})

        assert (await store.read_account("user-123")) == account


class TestIncrement:
    """Tests for atomic counter increments."""

    @pytest.mark.asyncio
    async def test_increment_several_fields(self, store, account):
        await store.create_account(account)

        stored = await store.increment(
            "user-123", {"crate_balance": 2, "total_crates_earned": 2}
        )

        assert stored.crate_balance == 2
        assert stored.total_crates_earned == 2

    @pytest.mark.asyncio
    async def test_increment_rejects_non_counter(self, store, account):
        await store.create_account(account)
        with pytest.raises(ValidationError):
            await store.increment("user-123", {"login_streak": 1})

    @pytest.mark.asyncio
    async def test_increment_rejects_negative(self, store, account):
        await store.create_account(account)
        with pytest.raises(ValidationError):
            await store.increment("user-123", {"crate_balance": -1})


class TestTransact:
    """Tests for conditional read-modify-write."""

    @pytest.mark.asyncio
    async def test_transact_applies_function(self, store, account):
        await store.create_account(account)

        stored = await store.transact(
            "user-123",
            lambda acc: acc.model_copy(update={"login_streak": acc.login_streak + 1}),
        )

        assert stored.login_streak == 1
        assert (await store.read_account("user-123")).login_streak == 1

    @pytest.mark.asyncio
    async def test_abort_writes_nothing(self, store, account):
        await store.create_account(account)

        def abort(acc):
            raise InsufficientFundsError(balance=acc.crate_balance)

        with pytest.raises(InsufficientFundsError):
            await store.transact("user-123", abort)

        assert (await store.read_account("user-123")) == account

    @pytest.mark.asyncio
    async def test_transact_missing_account(self, store):
        with pytest.raises(AccountNotFoundError):
            await store.transact("nobody", lambda acc: acc)

    @pytest.mark.asyncio
    async def test_transact_result_is_validated(self, store, account):
        await store.create_account(account)

        with pytest.raises(ValidationError):
            await store.transact(
                "user-123",
                lambda acc: acc.model_copy(update={"crate_balance": -1}),
            )

        assert (await store.read_account("user-123")).crate_balance == 0


class TestSQLiteStore:
    """SQLite-specific behaviour."""

    @pytest.mark.asyncio
    async def test_creates_accounts_table(self, sqlite_store):
        async with sqlite_store._get_connection() as conn:
            cursor = await conn.execute(
                "SELECT name FROM sqlite_master WHERE type='table' AND name='accounts'"
            )
            row = await cursor.fetchone()
        assert row is not None

    @pytest.mark.asyncio
    async def test_persists_across_instances(self, temp_db_path, account):
        await SQLiteAccountStore(temp_db_path).create_account(account)

        stored = await SQLiteAccountStore(temp_db_path).read_account("user-123")

        assert stored == account

    @pytest.mark.asyncio
    async def test_database_error_becomes_storage_unavailable(self, sqlite_store, account):
        await sqlite_store.create_account(account)
        async with sqlite_store._get_connection(write=True) as conn:
            await conn.execute("DROP TABLE accounts")

        with pytest.raises(StorageUnavailableError) as exc_info:
            await sqlite_store.read_account("user-123")

        assert exc_info.value.retryable is True
        assert isinstance(exc_info.value.__cause__, sqlite3.Error)

    @pytest.mark.asyncio
    async def test_failed_transaction_rolls_back(self, sqlite_store, account):
        await sqlite_store.create_account(account)

        def boom(acc):
            raise sqlite3.OperationalError("disk I/O error")

        with pytest.raises(StorageUnavailableError):
            await sqlite_store.transact("user-123", boom)

        assert (await sqlite_store.read_account("user-123")) == account

    @pytest.mark.asyncio
    async def test_lock_timeout_becomes_storage_unavailable(self, temp_db_path, account):
        store = SQLiteAccountStore(temp_db_path, timeout=0.1)
        await store.create_account(account)
        holder = sqlite3.connect(temp_db_path, isolation_level=None)
        holder.execute("BEGIN IMMEDIATE")
        try:
            with pytest.raises(StorageUnavailableError):
                await store.increment("user-123", {"crate_balance": 1})
        finally:
            holder.execute("ROLLBACK")
            holder.close()

        assert (await store.read_account("user-123")).crate_balance == 0


class TestSQLiteConcurrency:
    """Concurrent callers against one database file."""

    @pytest.mark.asyncio
    async def test_waiting_for_the_lock_does_not_block_the_loop(self, temp_db_path, account):
        store = SQLiteAccountStore(temp_db_path)
        await store.create_account(account)
        loop = asyncio.get_running_loop()

        # Another connection holds the write lock for one second
        holder = sqlite3.connect(temp_db_path, isolation_level=None)
        holder.execute("BEGIN IMMEDIATE")
        loop.call_later(1.0, holder.execute, "COMMIT")

        task = asyncio.ensure_future(
            store.transact(
                "user-123",
                lambda acc: acc.model_copy(update={"login_streak": acc.login_streak + 1}),
            )
        )
        gaps = []
        last = loop.time()
        try:
            while not task.done():
                await asyncio.sleep(0.05)
                now = loop.time()
                gaps.append(now - last)
                last = now
            stored = await task
        finally:
            holder.close()

        assert stored.login_streak == 1
        assert len(gaps) >= 10
        assert max(gaps) < 0.5

    @pytest.mark.asyncio
    async def test_debits_from_two_connections_never_overspend(self, temp_db_path):
        first = SQLiteAccountStore(temp_db_path)
        second = SQLiteAccountStore(temp_db_path)
        await first.create_account(UserAccount(user_id="u", crate_balance=3))

        results = await asyncio.gather(
            *(
                store.transact("u", apply_debit)
                for _ in range(5)
                for store in (first, second)
            ),
            return_exceptions=True,
        )

        successes = [r for r in results if isinstance(r, UserAccount)]
        refusals = [r for r in results if isinstance(r, InsufficientFundsError)]
        assert len(successes) == 3
        assert len(refusals) == 7
        assert sorted(r.crate_balance for r in successes) == [0, 1, 2]
        stored = await second.read_account("u")
        assert stored.crate_balance == 0
        assert stored.total_crates_opened == 3

    def test_debits_from_threads_never_overspend(self, temp_db_path):
        asyncio.run(
            SQLiteAccountStore(temp_db_path).create_account(
                UserAccount(user_id="u", crate_balance=4)
            )
        )
        barrier = threading.Barrier(8)

        def debit_in_own_loop():
            store = SQLiteAccountStore(temp_db_path, timeout=10.0)
            barrier.wait()
            try:
                asyncio.run(store.transact("u", apply_debit))
                return True
            except InsufficientFundsError:
                return False

        with ThreadPoolExecutor(max_workers=8) as pool:
            outcomes = list(pool.map(lambda _: debit_in_own_loop(), range(8)))

        assert outcomes.count(True) == 4
        stored = asyncio.run(SQLiteAccountStore(temp_db_path).read_account("u"))
        assert stored.crate_balance == 0


class TestMemoryStoreLocks:
    """Per-user locks of the in-memory store."""

    @pytest.mark.asyncio
    async def test_locks_released_after_use(self, memory_store, account):
        await memory_store.create_account(account)
        await memory_store.increment("user-123", {"crate_balance": 1})
        with pytest.raises(AccountNotFoundError):
            await memory_store.transact("nobody", lambda acc: acc)

        assert "user-123" not in memory_store._locks
        assert "nobody" not in memory_store._locks

    @pytest.mark.asyncio
    async def test_transact_waits_for_lock_holder(self, memory_store):
        await memory_store.create_account(UserAccount(user_id="u", crate_balance=1))
        lock = memory_store._lock_for("u")
        await lock.acquire()

        task = asyncio.ensure_future(memory_store.transact("u", apply_debit))
        await asyncio.sleep(0.01)
        assert not task.done()

        lock.release()
        stored = await task
        assert stored.crate_balance == 0


class TestCreateStore:
    """Tests for the configured store factory."""

    def test_memory_backend(self):
        settings = Settings(_env_file=None, storage_backend="memory")
        assert isinstance(create_store(settings), InMemoryAccountStore)

    def test_sqlite_backend(self, temp_db_path):
        settings = Settings(_env_file=None, storage_backend="sqlite", db_path=temp_db_path)
        store = create_store(settings)
        assert isinstance(store, SQLiteAccountStore)
        assert str(store.db_path) == temp_db_path
