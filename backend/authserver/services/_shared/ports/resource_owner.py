from __future__ import annotations

from typing import Protocol


class ResourceOwnerSession(Protocol):
    """
    Port exposing the resource owner authenticated by the login collaborator.

    Returns ``None`` when nobody is logged in (or the session is unusable), in
    which case the implicit flow suspends behind the interactive login step.
    """

    def current_user_id(self) -> str | None: ...

