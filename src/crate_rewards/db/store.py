"""
Storage protocol for per-user account documents.

The economy never talks to a database directly; it goes through an
``AccountStore``. Implementations must guarantee:

- ``transact`` is a conditional read-modify-write: for one user, no two
  transactions interleave their read and their write, and an exception
  raised by ``fn`` aborts without writing anything.
- ``increment`` is an atomic add, safe to apply concurrently.
- Backend failures surface as ``StorageUnavailableError``.
"""

from typing import Any, Callable, Dict, List, Mapping, Protocol, runtime_checkable

from pydantic import ValidationError as PydanticValidationError

from ..exceptions import ValidationError
from ..models.account import UserAccount


AccountUpdate = Callable[[UserAccount], UserAccount]

# Fields that may be changed with an atomic increment
COUNTER_FIELDS = frozenset(
    {
        "crate_balance",
        "workouts_completed",
        "total_crates_earned",
        "total_crates_opened",
    }
)


@runtime_checkable
class AccountStore(Protocol):
    """Interface for per-user account storage."""

    async def read_account(self, user_id: str) -> UserAccount:
        """Get the account. Raises AccountNotFoundError if absent."""
        ...

    async def create_account(self, account: UserAccount) -> UserAccount:
        """Insert the account if absent and return what is stored."""
        ...

    async def write_account(
        self,
        user_id: str,
        update: Mapping[str, Any],
        merge: bool = True,
    ) -> UserAccount:
        """Non-conditional write. With ``merge`` only the given fields change."""
        ...

    async def increment(self, user_id: str, amounts: Mapping[str, int]) -> UserAccount:
        """Atomically add ``amounts`` to counter fields."""
        ...

    async def transact(self, user_id: str, fn: AccountUpdate) -> UserAccount:
        """Apply ``fn`` to the current account as one serialized transaction."""
        ...

    async def list_accounts(self) -> List[UserAccount]:
        """Get every stored account."""
        ...


def build_account(data: Mapping[str, Any]) -> UserAccount:
    """
    Validate raw account data.

    Raises:
        ValidationError: If the data breaks an account invariant
    """
    try:
        return UserAccount.model_validate(dict(data))
    except PydanticValidationError as e:
        raise ValidationError(f"Invalid account data: {e.errors()[0]['msg']}") from e


def merge_update(current: UserAccount, update: Mapping[str, Any]) -> UserAccount:
    """Apply a partial update to ``current`` and re-validate it."""
    if "user_id" in update and update["user_id"] != current.user_id:
        raise ValidationError("user_id cannot be changed", field="user_id")
    data: Dict[str, Any] = current.model_dump()
    data.update(update)
    return build_account(data)


def check_increments(amounts: Mapping[str, int]) -> None:
    """
    Validate an increment request.

    Raises:
        ValidationError: If a field is not a counter or an amount is negative
    """
    for field, amount in amounts.items():
        if field not in COUNTER_FIELDS:
            raise ValidationError(f"Field '{field}' cannot be incremented", field=field)
        if amount < 0:
            raise ValidationError(f"Increment for '{field}' must not be negative", field=field)
