"""SQLite-backed account store.

Connections go through ``aiosqlite``, which runs each connection on its own
worker thread, so waiting on the database lock never blocks the event loop.

Every write runs in a ``BEGIN IMMEDIATE`` transaction, which takes the
database write lock before the read. Read-modify-write sequences for the
same user therefore serialize across connections and processes.
"""

import json
import logging
import sqlite3
from contextlib import asynccontextmanager
from datetime import date
from pathlib import Path
from typing import Any, AsyncIterator, Dict, List, Mapping, Optional, Union

import aiosqlite

from ..exceptions import AccountNotFoundError, StorageUnavailableError
from ..models.account import UserAccount
from .schema import ACCOUNT_COLUMNS, SCHEMA
from .store import AccountUpdate, build_account, check_increments, merge_update


logger = logging.getLogger(__name__)


class SQLiteAccountStore:
    """
    SQLite-backed AccountStore.

    The schema is created on the first connection.

    Attributes:
        db_path: Path to the SQLite database file
        timeout: Seconds to wait for the write lock before failing
    """

    def __init__(self, db_path: Union[str, Path], timeout: float = 5.0):
        """
        Initialize the store.

        Args:
            db_path: Path to the SQLite database file
            timeout: Seconds to wait for the write lock (default: 5)
        """
        self.db_path = Path(db_path)
        self.timeout = timeout
        self._schema_ready = False

    @asynccontextmanager
    async def _get_connection(self, write: bool = False) -> AsyncIterator[aiosqlite.Connection]:
        """
        Get a database connection wrapped in a transaction.

        Commits on success and rolls back on any exception. SQLite errors are
        re-raised as StorageUnavailableError; other exceptions (including the
        ones a transaction function uses to abort) propagate unchanged.
        """
        try:
            conn = await aiosqlite.connect(
                str(self.db_path),
                timeout=self.timeout,
                isolation_level=None,  # Transactions are managed explicitly
            )
        except sqlite3.Error as e:
            logger.error(f"Failed to open account database {self.db_path}: {e}")
            raise StorageUnavailableError(operation="connect") from e

        conn.row_factory = aiosqlite.Row
        try:
            if not self._schema_ready:
                await conn.executescript(SCHEMA)
                self._schema_ready = True
            await conn.execute("BEGIN IMMEDIATE" if write else "BEGIN")
            yield conn
            await conn.execute("COMMIT")
        except sqlite3.Error as e:
            await self._rollback(conn)
            logger.error(f"Account database error: {e}")
            raise StorageUnavailableError(operation="write" if write else "read") from e
        except Exception:
            await self._rollback(conn)
            raise
        finally:
            await conn.close()

    @staticmethod
    async def _rollback(conn: aiosqlite.Connection) -> None:
        try:
            await conn.execute("ROLLBACK")
        except sqlite3.Error:
            # No transaction left to roll back
            pass

    # =========================================================================
    # Row conversion
    # =========================================================================

    @staticmethod
    def _row_to_account(row: sqlite3.Row) -> UserAccount:
        """Convert a database row to a UserAccount."""
        data: Dict[str, Any] = {column: row[column] for column in ACCOUNT_COLUMNS}
        data["unlocked_rewards"] = json.loads(row["unlocked_rewards"] or "[]")
        for column in ("last_credit_date", "last_login_date"):
            if data[column]:
                data[column] = date.fromisoformat(data[column])
        return UserAccount.model_validate(data)

    @staticmethod
    def _account_to_params(account: UserAccount) -> List[Any]:
        data = account.model_dump()
        data["unlocked_rewards"] = json.dumps(data["unlocked_rewards"])
        for column in ("last_credit_date", "last_login_date"):
            if data[column] is not None:
                data[column] = data[column].isoformat()
        return [data[column] for column in ACCOUNT_COLUMNS]

    async def _fetch(self, conn: aiosqlite.Connection, user_id: str) -> Optional[UserAccount]:
        cursor = await conn.execute(
            "SELECT * FROM accounts WHERE user_id = ?",
            (user_id,),
        )
        row = await cursor.fetchone()
        return self._row_to_account(row) if row else None

    async def _save(self, conn: aiosqlite.Connection, account: UserAccount) -> UserAccount:
        columns = ", ".join(ACCOUNT_COLUMNS)
        placeholders = ", ".join("?" for _ in ACCOUNT_COLUMNS)
        assignments = ", ".join(
            f"{column} = excluded.{column}" for column in ACCOUNT_COLUMNS if column != "user_id"
        )
        await conn.execute(
            f"""
            INSERT INTO accounts ({columns}) VALUES ({placeholders})
            ON CONFLICT(user_id) DO UPDATE SET {assignments},
                updated_at = CURRENT_TIMESTAMP
            """,
            self._account_to_params(account),
        )
        return account

    # =========================================================================
    # AccountStore
    # =========================================================================

    async def read_account(self, user_id: str) -> UserAccount:
        async with self._get_connection() as conn:
            account = await self._fetch(conn, user_id)
        if account is None:
            raise AccountNotFoundError(user_id)
        return account

    async def create_account(self, account: UserAccount) -> UserAccount:
        account = build_account(account.model_dump())
        async with self._get_connection(write=True) as conn:
            existing = await self._fetch(conn, account.user_id)
            if existing is not None:
                return existing
            logger.debug(f"Created account {account.user_id}")
            return await self._save(conn, account)

    async def write_account(
        self,
        user_id: str,
        update: Mapping[str, Any],
        merge: bool = True,
    ) -> UserAccount:
        async with self._get_connection(write=True) as conn:
            if merge:
                current = await self._fetch(conn, user_id) or UserAccount(user_id=user_id)
                account = merge_update(current, update)
            else:
                account = build_account({**update, "user_id": user_id})
            return await self._save(conn, account)

    async def increment(self, user_id: str, amounts: Mapping[str, int]) -> UserAccount:
        check_increments(amounts)
        async with self._get_connection(write=True) as conn:
            await conn.execute(
                "INSERT OR IGNORE INTO accounts (user_id) VALUES (?)",
                (user_id,),
            )
            for field, amount in amounts.items():
                # Field names are checked against COUNTER_FIELDS above
                await conn.execute(
                    f"UPDATE accounts SET {field} = {field} + ?, "
                    "updated_at = CURRENT_TIMESTAMP WHERE user_id = ?",
                    (amount, user_id),
                )
            return await self._fetch(conn, user_id)

    async def transact(self, user_id: str, fn: AccountUpdate) -> UserAccount:
        async with self._get_connection(write=True) as conn:
            current = await self._fetch(conn, user_id)
            if current is None:
                raise AccountNotFoundError(user_id)
            updated = merge_update(current, fn(current).model_dump())
            return await self._save(conn, updated)

    async def list_accounts(self) -> List[UserAccount]:
        async with self._get_connection() as conn:
            cursor = await conn.execute("SELECT * FROM accounts ORDER BY user_id")
            rows = await cursor.fetchall()
        return [self._row_to_account(row) for row in rows]
