"""Sharing ledger: the authorization state attached to one document.

The ledger owns the two mutations of a document's sharing state:

  - ``add_grant`` appends a direct grant (at most one per grantee).
  - ``issue_public_token`` replaces the public token (never appends).

Both are read-modify-write against the document store. Mutations on the
same document are serialized by a per-document ``asyncio.Lock`` and the
duplicate check runs against a fresh read taken inside the lock, so two
concurrent grants in one process cannot lose each other's update. Across
processes the store's last-write-wins semantics apply. A lock lives only
while some caller holds or awaits it, so the lock table stays bounded by
the number of in-flight mutations.

If the document disappears between the caller's load and the locked
re-read, the mutation fails with ``NotFound`` instead of writing the stale
copy back.
"""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, AsyncIterator

from ..documents.model import (
    Document,
    Grant,
    generate_share_token,
    hash_token,
    utcnow,
)
from ..errors import NotFound

if TYPE_CHECKING:
    from ..protocols import DocumentStore


class DuplicateGrant(Exception):
    """The grantee already appears in the document's grants."""

    def __init__(self, document_id: str, grantee_id: str) -> None:
        self.document_id = document_id
        self.grantee_id = grantee_id
        super().__init__(f'{grantee_id} already has a grant on {document_id}')


@dataclass
class _LockEntry:
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    users: int = 0


def find_grant(document: Document, grantee_id: str) -> Grant | None:
    for grant in document.grants:
        if grant.grantee_id == grantee_id:
            return grant
    return None


class SharingLedger:
    """Mutates and persists a document's grants and public token."""

    def __init__(self, store: DocumentStore) -> None:
        self._store = store
        self._locks: dict[str, _LockEntry] = {}

    find_grant = staticmethod(find_grant)

    @asynccontextmanager
    async def _locked(self, document_id: str) -> AsyncIterator[None]:
        entry = self._locks.get(document_id)
        if entry is None:
            entry = self._locks[document_id] = _LockEntry()
        entry.users += 1
        try:
            async with entry.lock:
                yield
        finally:
            entry.users -= 1
            if entry.users == 0:
                del self._locks[document_id]

    async def _fresh(self, document: Document) -> Document:
        current = await self._store.get(document.id)
        if current is None:
            raise NotFound('PDF not found')
        return current

    @staticmethod
    def _sync(target: Document, source: Document) -> None:
        target.grants = source.grants
        target.public_token_hash = source.public_token_hash
        target.updated_at = source.updated_at

    async def add_grant(
        self,
        document: Document,
        grantee_id: str,
        grantee_email: str,
    ) -> Grant:
        """Append a grant for ``grantee_id`` and persist the document.

        Raises:
            DuplicateGrant: The grantee already holds a grant.
            NotFound: The document was deleted after the caller loaded it.
        """
        async with self._locked(document.id):
            current = await self._fresh(document)
            if find_grant(current, grantee_id) is not None:
                self._sync(document, current)
                raise DuplicateGrant(document.id, grantee_id)

            grant = Grant(
                grantee_id=grantee_id,
                grantee_email=grantee_email,
                access_token=generate_share_token(),
                granted_at=utcnow(),
            )
            current.grants = [*current.grants, grant]
            current.updated_at = grant.granted_at
            saved = await self._store.save(current)
            self._sync(document, saved)
            return grant

    async def issue_public_token(self, document: Document) -> str:
        """Replace the document's public token and return the new plaintext.

        Any previously issued token stops matching immediately.

        Raises:
            NotFound: The document was deleted after the caller loaded it.
        """
        async with self._locked(document.id):
            current = await self._fresh(document)
            token = generate_share_token()
            current.public_token_hash = hash_token(token)
            current.updated_at = utcnow()
            saved = await self._store.save(current)
            self._sync(document, saved)
            return token
