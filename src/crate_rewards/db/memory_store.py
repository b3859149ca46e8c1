"""In-memory account store.

Keeps accounts as plain dictionaries and serializes writes per user with an
``asyncio.Lock``. Suitable for tests and single-process use.
"""

import asyncio
import logging
import weakref
from typing import Any, Dict, List, Mapping

from ..exceptions import AccountNotFoundError
from ..models.account import UserAccount
from .store import AccountUpdate, build_account, check_increments, merge_update


logger = logging.getLogger(__name__)


class InMemoryAccountStore:
    """Dictionary-backed AccountStore."""

    def __init__(self):
        self._accounts: Dict[str, Dict[str, Any]] = {}
        # Entries disappear once no coroutine holds or awaits the lock
        self._locks: "weakref.WeakValueDictionary[str, asyncio.Lock]" = (
            weakref.WeakValueDictionary()
        )

    def _lock_for(self, user_id: str) -> asyncio.Lock:
        lock = self._locks.get(user_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[user_id] = lock
        return lock

    def _get(self, user_id: str) -> UserAccount:
        data = self._accounts.get(user_id)
        if data is None:
            raise AccountNotFoundError(user_id)
        return UserAccount.model_validate(data)

    def _put(self, account: UserAccount) -> UserAccount:
        self._accounts[account.user_id] = account.model_dump()
        return account.model_copy(deep=True)

    async def read_account(self, user_id: str) -> UserAccount:
        return self._get(user_id)

    async def create_account(self, account: UserAccount) -> UserAccount:
        async with self._lock_for(account.user_id):
            if account.user_id in self._accounts:
                return self._get(account.user_id)
            logger.debug(f"Created account {account.user_id}")
            return self._put(build_account(account.model_dump()))

    async def write_account(
        self,
        user_id: str,
        update: Mapping[str, Any],
        merge: bool = True,
    ) -> UserAccount:
        async with self._lock_for(user_id):
            if merge:
                current = (
                    self._get(user_id)
                    if user_id in self._accounts
                    else UserAccount(user_id=user_id)
                )
                return self._put(merge_update(current, update))
            return self._put(build_account({**update, "user_id": user_id}))

    async def increment(self, user_id: str, amounts: Mapping[str, int]) -> UserAccount:
        check_increments(amounts)
        async with self._lock_for(user_id):
            current = (
                self._get(user_id)
                if user_id in self._accounts
                else UserAccount(user_id=user_id)
            )
            data = current.model_dump()
            for field, amount in amounts.items():
                data[field] += amount
            return self._put(build_account(data))

    async def transact(self, user_id: str, fn: AccountUpdate) -> UserAccount:
        async with self._lock_for(user_id):
            current = self._get(user_id)
            updated = fn(current)
            return self._put(merge_update(current, updated.model_dump()))

    async def list_accounts(self) -> List[UserAccount]:
        return [UserAccount.model_validate(data) for data in self._accounts.values()]
