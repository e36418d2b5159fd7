"""Comment endpoints.

  POST   /api/pdf/{id}/comments           → 201 comment (owner or grantee)
  GET    /api/pdf/{id}/comments[?token=]  → 200 { items, count }
  PUT    /api/pdf/comments/{comment_id}   → 200 comment (author only)
  DELETE /api/pdf/comments/{comment_id}   → 200 { deleted: true } (author only)
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from ..identity.directory import Identity
from ..security.auth_guard import get_actor, get_optional_actor
from .service import MAX_COMMENT_LENGTH, CommentService


class CommentRequest(BaseModel):
    text: str = Field(..., min_length=1, max_length=MAX_COMMENT_LENGTH)


def create_comment_router(comments: CommentService) -> APIRouter:
    router = APIRouter(prefix='/api/pdf', tags=['comments'])

    @router.put('/comments/{comment_id}')
    async def update_comment(
        comment_id: str,
        body: CommentRequest,
        actor: Identity = Depends(get_actor),
    ):
        view = await comments.update(actor, comment_id, body.text)
        return view.to_dict()

    @router.delete('/comments/{comment_id}')
    async def delete_comment(
        comment_id: str,
        actor: Identity = Depends(get_actor),
    ):
        await comments.delete(actor, comment_id)
        return {'deleted': True, 'comment_id': comment_id}

    @router.post('/{document_id}/comments', status_code=201)
    async def create_comment(
        document_id: str,
        body: CommentRequest,
        actor: Identity = Depends(get_actor),
    ):
        view = await comments.create(actor, document_id, body.text)
        return view.to_dict()

    @router.get('/{document_id}/comments')
    async def list_comments(
        document_id: str,
        token: str = '',
        actor: Identity | None = Depends(get_optional_actor),
    ):
        views = await comments.list_for_document(
            document_id, actor=actor, public_token=token or None,
        )
        items = [v.to_dict() for v in views]
        return {'items': items, 'count': len(items)}

    return router
