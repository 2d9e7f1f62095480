"""Authenticated session handed to the client components."""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class SessionContext:
    """The signed-in user as seen by the client.

    ``access_token`` is the Supabase access token sent as a bearer token on
    every request.  An anonymous session has neither id nor token.
    """

    user_id: Optional[str] = None
    access_token: Optional[str] = None
    email: Optional[str] = None

    @property
    def is_authenticated(self) -> bool:
        return bool(self.user_id and self.access_token)

    @classmethod
    def anonymous(cls) -> "SessionContext":
        return cls()
