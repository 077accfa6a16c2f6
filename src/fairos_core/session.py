"""In-memory session store keyed by username."""

from typing import Dict, Iterator, Optional


class InMemorySessionStore:
    """
    Default SessionStore implementation backed by a dict.

    One instance per client, so independent clients in the same process
    never see each other's sessions.
    """

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._cookies: Dict[str, str] = dict(initial or {})

    def cookie(self, username: str) -> Optional[str]:
        return self._cookies.get(username)

    def set_cookie(self, username: str, token: str) -> None:
        self._cookies[username] = token

    def remove_cookie(self, username: str) -> None:
        self._cookies.pop(username, None)

    def __contains__(self, username: object) -> bool:
        return username in self._cookies

    def __iter__(self) -> Iterator[str]:
        return iter(self._cookies)

    def __len__(self) -> int:
        return len(self._cookies)

    def __repr__(self) -> str:
        # Tokens are credentials; only show who is logged in
        return f"InMemorySessionStore(users={sorted(self._cookies)!r})"


__all__ = ["InMemorySessionStore"]
