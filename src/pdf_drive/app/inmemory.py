"""In-memory implementations of all protocol interfaces.

Used for local development (``environment="local"``) and testing. Stores
hand out copies, never their own objects, so callers get the same
read-modify-write semantics they would against a real database.
"""

from __future__ import annotations

import copy

from .documents.model import Comment, Document


class InMemoryDocumentStore:
    """Dict-backed document store. ``delete`` cascades to comments."""

    def __init__(self, comments: InMemoryCommentStore | None = None) -> None:
        self._documents: dict[str, Document] = {}
        self._comments = comments

    async def get(self, document_id: str) -> Document | None:
        document = self._documents.get(document_id)
        return copy.deepcopy(document) if document is not None else None

    async def save(self, document: Document) -> Document:
        self._documents[document.id] = copy.deepcopy(document)
        return copy.deepcopy(document)

    async def delete(self, document_id: str) -> bool:
        removed = self._documents.pop(document_id, None)
        if removed is not None and self._comments is not None:
            await self._comments.delete_for_document(document_id)
        return removed is not None

    async def list_by_owner(self, owner_id: str) -> list[Document]:
        return [
            copy.deepcopy(d)
            for d in self._documents.values()
            if d.owner_id == owner_id
        ]

    async def list_shared_with(self, user_id: str) -> list[Document]:
        return [
            copy.deepcopy(d)
            for d in self._documents.values()
            if any(g.grantee_id == user_id for g in d.grants)
        ]


class InMemoryCommentStore:
    """Dict-backed comment store."""

    def __init__(self) -> None:
        self._comments: dict[str, Comment] = {}

    async def create(self, comment: Comment) -> Comment:
        self._comments[comment.id] = copy.deepcopy(comment)
        return copy.deepcopy(comment)

    async def get(self, comment_id: str) -> Comment | None:
        comment = self._comments.get(comment_id)
        return copy.deepcopy(comment) if comment is not None else None

    async def save(self, comment: Comment) -> Comment:
        self._comments[comment.id] = copy.deepcopy(comment)
        return copy.deepcopy(comment)

    async def delete(self, comment_id: str) -> bool:
        return self._comments.pop(comment_id, None) is not None

    async def list_for_document(self, document_id: str) -> list[Comment]:
        return [
            copy.deepcopy(c)
            for c in self._comments.values()
            if c.document_id == document_id
        ]

    async def delete_for_document(self, document_id: str) -> int:
        doomed = [cid for cid, c in self._comments.items() if c.document_id == document_id]
        for cid in doomed:
            del self._comments[cid]
        return len(doomed)
