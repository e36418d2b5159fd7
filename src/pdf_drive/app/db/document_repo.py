"""Supabase-backed DocumentStore and CommentStore.

Tables (public schema):
  - ``pdfs``: one row per document. ``grants`` is a jsonb array of
    ``{grantee_id, grantee_email, access_token, granted_at}`` objects kept
    in sharing order; ``public_token_hash`` holds the SHA-256 of the public
    token (never the token itself).
  - ``comments``: one row per comment, ``document_id`` references ``pdfs.id``.

``save`` is an upsert on ``id`` (last write wins). ``delete`` removes the
document's comments before the document row.
"""

from __future__ import annotations

from typing import Any

from ..documents.model import Comment, Document, Grant, parse_timestamp
from .supabase_client import SupabaseClient


def document_to_row(document: Document) -> dict[str, Any]:
    return {
        "id": document.id,
        "title": document.title,
        "file_id": document.file_id,
        "file_url": document.file_url,
        "owner_id": document.owner_id,
        "grants": [g.to_dict() for g in document.grants],
        "public_token_hash": document.public_token_hash,
        "created_at": document.created_at.isoformat(),
        "updated_at": document.updated_at.isoformat(),
    }


def document_from_row(row: dict[str, Any]) -> Document:
    return Document(
        id=str(row["id"]),
        title=row["title"],
        file_id=row["file_id"],
        file_url=row["file_url"],
        owner_id=str(row["owner_id"]),
        grants=[Grant.from_dict(g) for g in row.get("grants") or []],
        public_token_hash=row.get("public_token_hash"),
        created_at=parse_timestamp(row.get("created_at")),
        updated_at=parse_timestamp(row.get("updated_at")),
    )


def comment_to_row(comment: Comment) -> dict[str, Any]:
    return {
        "id": comment.id,
        "document_id": comment.document_id,
        "author_id": comment.author_id,
        "text": comment.text,
        "created_at": comment.created_at.isoformat(),
        "updated_at": comment.updated_at.isoformat(),
    }


def comment_from_row(row: dict[str, Any]) -> Comment:
    return Comment(
        id=str(row["id"]),
        document_id=str(row["document_id"]),
        author_id=str(row["author_id"]),
        text=row["text"],
        created_at=parse_timestamp(row.get("created_at")),
        updated_at=parse_timestamp(row.get("updated_at")),
    )


class SupabaseCommentStore:
    """CommentStore backed by the ``comments`` table."""

    TABLE = "comments"

    def __init__(self, client: SupabaseClient) -> None:
        self._client = client

    async def create(self, comment: Comment) -> Comment:
        rows = await self._client.insert(self.TABLE, comment_to_row(comment))
        return comment_from_row(rows[0]) if rows else comment

    async def get(self, comment_id: str) -> Comment | None:
        rows = await self._client.select(
            self.TABLE, {"id": ("eq", comment_id)}, limit=1,
        )
        return comment_from_row(rows[0]) if rows else None

    async def save(self, comment: Comment) -> Comment:
        rows = await self._client.upsert(self.TABLE, comment_to_row(comment))
        return comment_from_row(rows[0]) if rows else comment

    async def delete(self, comment_id: str) -> bool:
        rows = await self._client.delete(self.TABLE, {"id": ("eq", comment_id)})
        return len(rows) > 0

    async def list_for_document(self, document_id: str) -> list[Comment]:
        rows = await self._client.select(
            self.TABLE,
            {"document_id": ("eq", document_id)},
            order="created_at.asc",
        )
        return [comment_from_row(r) for r in rows]

    async def delete_for_document(self, document_id: str) -> int:
        rows = await self._client.delete(
            self.TABLE, {"document_id": ("eq", document_id)},
        )
        return len(rows)


class SupabaseDocumentStore:
    """DocumentStore backed by the ``pdfs`` table."""

    TABLE = "pdfs"

    def __init__(self, client: SupabaseClient, comments: SupabaseCommentStore) -> None:
        self._client = client
        self._comments = comments

    async def get(self, document_id: str) -> Document | None:
        rows = await self._client.select(
            self.TABLE, {"id": ("eq", document_id)}, limit=1,
        )
        return document_from_row(rows[0]) if rows else None

    async def save(self, document: Document) -> Document:
        rows = await self._client.upsert(self.TABLE, document_to_row(document))
        return document_from_row(rows[0]) if rows else document

    async def delete(self, document_id: str) -> bool:
        await self._comments.delete_for_document(document_id)
        rows = await self._client.delete(self.TABLE, {"id": ("eq", document_id)})
        return len(rows) > 0

    async def list_by_owner(self, owner_id: str) -> list[Document]:
        rows = await self._client.select(
            self.TABLE,
            {"owner_id": ("eq", owner_id)},
            order="created_at.desc",
        )
        return [document_from_row(r) for r in rows]

    async def list_shared_with(self, user_id: str) -> list[Document]:
        rows = await self._client.select(
            self.TABLE,
            {"grants": ("cs", [{"grantee_id": user_id}])},
            order="created_at.desc",
        )
        return [document_from_row(r) for r in rows]
