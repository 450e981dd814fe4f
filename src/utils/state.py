from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from db import store


@dataclass
class SessionContext:
    """
    The logged-in identity, passed explicitly to every service call.

    Fields:
      - email: email of the logged-in user, None when logged out
      - persistent: write through to the store's session slot so the login
        survives a restart; turn off to simulate independent sessions
    """

    email: Optional[str] = None
    persistent: bool = True

    @property
    def is_logged_in(self) -> bool:
        return bool(self.email)

    async def restore(self) -> Optional[str]:
        """Pick up the session saved by a previous run, if any."""
        if self.persistent:
            self.email = await store.get_current_email()
        return self.email

    async def start(self, email: str) -> None:
        self.email = email
        if self.persistent:
            await store.set_current_email(email)

    async def end(self) -> None:
        """
        End the session unconditionally.
        """
        self.email = None
        if self.persistent:
            await store.clear_current_email()
