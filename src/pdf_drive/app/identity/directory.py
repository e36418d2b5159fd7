"""User identity value object and in-memory directory."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable


@dataclass(frozen=True, slots=True)
class Identity:
    """A known user.

    Attributes:
        id: Stable user id (the JWT ``sub`` claim).
        name: Display name.
        email: Current email address, lower-cased.
    """

    id: str
    name: str
    email: str

    def to_dict(self) -> dict[str, Any]:
        return {'id': self.id, 'name': self.name, 'email': self.email}


class InMemoryUserDirectory:
    """Simple in-memory user directory for local dev and testing."""

    def __init__(self, identities: Iterable[Identity] = ()) -> None:
        self._users: dict[str, Identity] = {}
        for identity in identities:
            self.add(identity)

    def add(self, identity: Identity) -> Identity:
        stored = Identity(
            id=identity.id,
            name=identity.name,
            email=identity.email.strip().lower(),
        )
        self._users[stored.id] = stored
        return stored

    async def get(self, user_id: str) -> Identity | None:
        return self._users.get(user_id)

    async def list_all(self) -> list[Identity]:
        return list(self._users.values())
