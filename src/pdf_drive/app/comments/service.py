"""Comment service.

Posting requires an identity with some access path to the document (owner
or direct grant). Anonymous public-link viewers can read comments by
presenting the public token but cannot post: a comment always has an
author on record. Editing and deleting are restricted to the author; the
document owner gets no override.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from pdf_drive.observability.logging import get_logger

from ..documents.model import Comment, Document, new_id, token_matches, utcnow
from ..errors import Forbidden, InvalidInput, NotFound
from ..identity.directory import Identity
from ..sharing import access

if TYPE_CHECKING:
    from ..identity.provider import IdentityProvider
    from ..protocols import CommentStore, DocumentStore

logger = get_logger(__name__)

MAX_COMMENT_LENGTH = 5000


@dataclass(frozen=True, slots=True)
class CommentView:
    """A comment with its author resolved for display."""

    comment: Comment
    author: Identity

    def to_dict(self) -> dict[str, Any]:
        return {
            'id': self.comment.id,
            'document_id': self.comment.document_id,
            'text': self.comment.text,
            'author': self.author.to_dict(),
            'created_at': self.comment.created_at.isoformat(),
            'updated_at': self.comment.updated_at.isoformat(),
        }


def _clean_text(text: str | None) -> str:
    cleaned = (text or '').strip()
    if not cleaned:
        raise InvalidInput('Text is required')
    if len(cleaned) > MAX_COMMENT_LENGTH:
        raise InvalidInput(f'Text must be at most {MAX_COMMENT_LENGTH} characters')
    return cleaned


class CommentService:
    def __init__(
        self,
        comments: CommentStore,
        documents: DocumentStore,
        identities: IdentityProvider,
    ) -> None:
        self._comments = comments
        self._documents = documents
        self._identities = identities

    async def _load_document(self, document_id: str) -> Document:
        document = await self._documents.get(document_id)
        if document is None:
            raise NotFound('PDF not found')
        return document

    async def _load_own_comment(self, actor: Identity, comment_id: str) -> Comment:
        comment = await self._comments.get(comment_id)
        if comment is None:
            raise NotFound('Comment not found')
        if not access.can_modify_comment(actor, comment):
            raise Forbidden('Only the author can change this comment')
        return comment

    async def _render(self, comments: list[Comment]) -> list[CommentView]:
        authors: dict[str, Identity] = {}
        views = []
        for comment in comments:
            author = authors.get(comment.author_id)
            if author is None:
                author = await self._identities.find_by_id(comment.author_id)
                author = author or Identity(id=comment.author_id, name='', email='')
                authors[comment.author_id] = author
            views.append(CommentView(comment=comment, author=author))
        return views

    async def create(self, actor: Identity, document_id: str, text: str) -> CommentView:
        text = _clean_text(text)
        document = await self._load_document(document_id)
        if not access.can_comment(actor, document):
            raise Forbidden('No access to this PDF')

        now = utcnow()
        comment = await self._comments.create(Comment(
            id=new_id(),
            document_id=document.id,
            author_id=actor.id,
            text=text,
            created_at=now,
            updated_at=now,
        ))
        logger.info('comment_created', document_id=document.id, comment_id=comment.id)
        return CommentView(comment=comment, author=actor)

    async def list_for_document(
        self,
        document_id: str,
        *,
        actor: Identity | None = None,
        public_token: str | None = None,
    ) -> list[CommentView]:
        """Comments on a document, oldest first.

        Readable by anyone who can view the document: the owner, a grantee,
        or an anonymous caller presenting the current public token.
        """
        document = await self._load_document(document_id)
        allowed = (actor is not None and access.can_view(actor, document)) or (
            token_matches(public_token, document.public_token_hash)
        )
        if not allowed:
            raise Forbidden('No access to this PDF')

        comments = await self._comments.list_for_document(document.id)
        comments.sort(key=lambda c: c.created_at)
        return await self._render(comments)

    async def update(self, actor: Identity, comment_id: str, text: str) -> CommentView:
        text = _clean_text(text)
        comment = await self._load_own_comment(actor, comment_id)
        comment.edit(text)
        comment = await self._comments.save(comment)
        logger.info('comment_updated', comment_id=comment.id)
        return CommentView(comment=comment, author=actor)

    async def delete(self, actor: Identity, comment_id: str) -> None:
        comment = await self._load_own_comment(actor, comment_id)
        await self._comments.delete(comment.id)
        logger.info('comment_deleted', comment_id=comment.id)
