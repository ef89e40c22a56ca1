from __future__ import annotations

from typing import Iterable, Optional


class SuperUsers:
    """Accounts exempt from moderation, matched by username."""

    def __init__(self, usernames: Iterable[str] = ()) -> None:
        self._names = {self._normalize(name) for name in usernames if self._normalize(name)}

    def is_super(self, username: Optional[str]) -> bool:
        if not username:
            return False
        return self._normalize(username) in self._names

    @staticmethod
    def _normalize(name: str) -> str:
        return name.strip().lstrip("@").lower()

    def __len__(self) -> int:
        return len(self._names)
