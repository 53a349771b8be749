"""Token-based authentication capability."""

from typing import Optional

from booking.ports import AuthPort
from utils.exceptions import AuthRequiredError


class TokenAuth(AuthPort):
    """
    Session backed by an API token.

    Interactive login lives in the app's authentication screens; this
    only reports whether a token is present.
    """

    def __init__(self, token: Optional[str] = None):
        self._token = token or None

    @property
    def is_authenticated(self) -> bool:
        return self._token is not None

    @property
    def access_token(self) -> Optional[str]:
        return self._token

    def set_token(self, token: Optional[str]) -> None:
        self._token = token or None

    async def login(self) -> None:
        if not self.is_authenticated:
            raise AuthRequiredError("Please log in to book appointments")
