"""Supabase-backed UserDirectory over the ``users`` table.

Only ``id``, ``name`` and ``email`` are ever selected; credential columns
stay in the identity provider's own tables.
"""

from __future__ import annotations

from typing import Any

from ..identity.directory import Identity
from .supabase_client import SupabaseClient

_COLUMNS = "id,name,email"


def _identity_from_row(row: dict[str, Any]) -> Identity:
    return Identity(
        id=str(row["id"]),
        name=row.get("name") or "",
        email=(row.get("email") or "").lower(),
    )


class SupabaseUserDirectory:
    TABLE = "users"

    def __init__(self, client: SupabaseClient) -> None:
        self._client = client

    async def get(self, user_id: str) -> Identity | None:
        rows = await self._client.select(
            self.TABLE, {"id": ("eq", user_id)}, columns=_COLUMNS, limit=1,
        )
        return _identity_from_row(rows[0]) if rows else None

    async def list_all(self) -> list[Identity]:
        rows = await self._client.select(
            self.TABLE, columns=_COLUMNS, order="name.asc,email.asc",
        )
        return [_identity_from_row(r) for r in rows]
