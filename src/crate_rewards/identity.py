"""Identity provider interface."""

from typing import Optional, Protocol, runtime_checkable


@runtime_checkable
class IdentityProvider(Protocol):
    """Supplies the signed-in user, if any."""

    def current_user_id(self) -> Optional[str]:
        """Stable identifier of the signed-in user, or None when signed out."""
        ...

    def display_name(self) -> Optional[str]:
        """Name to show for the signed-in user."""
        ...


class StaticIdentityProvider:
    """Identity provider returning a fixed user. Useful for tests and scripts."""

    def __init__(self, user_id: Optional[str], display_name: Optional[str] = None):
        self._user_id = user_id
        self._display_name = display_name

    def current_user_id(self) -> Optional[str]:
        return self._user_id

    def display_name(self) -> Optional[str]:
        return self._display_name

    def sign_in(self, user_id: str, display_name: Optional[str] = None) -> None:
        self._user_id = user_id
        self._display_name = display_name

    def sign_out(self) -> None:
        self._user_id = None
        self._display_name = None
