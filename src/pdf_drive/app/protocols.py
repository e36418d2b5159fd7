"""Repository and provider protocol interfaces for dependency injection.

These protocols define the contracts that concrete implementations (InMemory
for local dev, Supabase / Google Drive for non-local) must satisfy. The app
factory accepts any implementation that matches these protocols.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from .documents.model import Comment, Document
from .identity.directory import Identity


@runtime_checkable
class DocumentStore(Protocol):
    """Durable storage for documents and their embedded sharing state.

    ``save`` is an upsert with last-write-wins semantics. ``delete`` must
    also remove every comment attached to the document.
    """

    async def get(self, document_id: str) -> Document | None: ...
    async def save(self, document: Document) -> Document: ...
    async def delete(self, document_id: str) -> bool: ...
    async def list_by_owner(self, owner_id: str) -> list[Document]: ...
    async def list_shared_with(self, user_id: str) -> list[Document]: ...


@runtime_checkable
class CommentStore(Protocol):
    """Comment persistence keyed by comment id and owning document."""

    async def create(self, comment: Comment) -> Comment: ...
    async def get(self, comment_id: str) -> Comment | None: ...
    async def save(self, comment: Comment) -> Comment: ...
    async def delete(self, comment_id: str) -> bool: ...
    async def list_for_document(self, document_id: str) -> list[Comment]: ...
    async def delete_for_document(self, document_id: str) -> int: ...


@runtime_checkable
class UserDirectory(Protocol):
    """Read-only lookup of known user identities."""

    async def get(self, user_id: str) -> Identity | None: ...
    async def list_all(self) -> list[Identity]: ...


@runtime_checkable
class FileStorage(Protocol):
    """Cloud drive operations the service performs on stored PDFs."""

    async def rename(self, file_id: str, title: str) -> None: ...
    async def delete(self, file_id: str) -> None: ...
