"""
Currency ledger: the user's crate balance.

Credits are commutative and go through the store's atomic increment.
Debits are check-then-act and therefore always run inside a store
transaction, so two concurrent openings can never both spend the last crate.
"""

from typing import TYPE_CHECKING

from ..exceptions import InsufficientFundsError, ValidationError
from ..models.account import UserAccount

if TYPE_CHECKING:
    from ..db.store import AccountStore


def apply_credit(account: UserAccount, amount: int) -> UserAccount:
    """Return ``account`` with ``amount`` crates added."""
    if amount <= 0:
        raise ValidationError("Credit amount must be positive", field="amount")
    return account.model_copy(
        update={
            "crate_balance": account.crate_balance + amount,
            "total_crates_earned": account.total_crates_earned + amount,
        }
    )


def apply_debit(account: UserAccount) -> UserAccount:
    """
    Return ``account`` with exactly one crate removed.

    Raises:
        InsufficientFundsError: If the balance is zero
    """
    if account.crate_balance <= 0:
        raise InsufficientFundsError(balance=account.crate_balance)
    return account.model_copy(
        update={
            "crate_balance": account.crate_balance - 1,
            "total_crates_opened": account.total_crates_opened + 1,
        }
    )


class CurrencyLedger:
    """Store-backed crate balance operations for one store."""

    def __init__(self, store: "AccountStore"):
        self._store = store

    async def balance(self, user_id: str) -> int:
        account = await self._store.read_account(user_id)
        return account.crate_balance

    async def credit(self, user_id: str, amount: int) -> None:
        """Atomically add ``amount`` crates. Safe to apply concurrently."""
        if amount <= 0:
            raise ValidationError("Credit amount must be positive", field="amount")
        await self._store.increment(
            user_id,
            {"crate_balance": amount, "total_crates_earned": amount},
        )

    async def debit(self, user_id: str) -> UserAccount:
        """
        Remove one crate as a single conditional transaction.

        Returns:
            The account after the debit

        Raises:
            InsufficientFundsError: If the balance is zero; nothing is written
            StorageUnavailableError: If the transaction fails; nothing is written
        """
        return await self._store.transact(user_id, apply_debit)
