"""Sharing API endpoints.

  POST /api/pdf-sharing/{id}/share/email       → grant a user direct access
  POST /api/pdf-sharing/{id}/share/public      → issue/replace the public link
  GET  /api/pdf-sharing/{id}/view?token=...    → anonymous view via public link
  GET  /api/pdf-sharing/{id}/external-access   → view via direct grant
  GET  /api/pdf-sharing/shared-with-me         → documents granted to caller
  GET  /api/pdf-sharing/users                  → share candidates

Auth contract:
  - ``/view`` is anonymous; the public token is the only credential.
  - Every other endpoint requires a bearer token (``get_actor``).
  - Collections use the ``{items, count}`` envelope.

This module provides:
  ``create_sharing_router``:  FastAPI router factory with injected service.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import AliasChoices, BaseModel, Field

from ..identity.directory import Identity
from ..security.auth_guard import get_actor
from .service import SharingService


# ── Request schemas ──────────────────────────────────────────────────


class ShareWithUserRequest(BaseModel):
    """Request body for a direct grant."""

    user_id: str = Field(
        ...,
        min_length=1,
        validation_alias=AliasChoices('user_id', 'userId'),
        description='Grantee user id',
    )
    email: str = Field(..., min_length=3, description="Grantee's current email")


# ── Route factory ────────────────────────────────────────────────────


def create_sharing_router(sharing: SharingService) -> APIRouter:
    """Create the sharing router.

    Args:
        sharing: Sharing service bound to the app's stores.

    Returns:
        FastAPI router with the sharing endpoints.
    """
    router = APIRouter(prefix='/api/pdf-sharing', tags=['sharing'])

    @router.get('/shared-with-me')
    async def shared_with_me(actor: Identity = Depends(get_actor)):
        shared = await sharing.list_shared_with_me(actor)
        items = [s.to_dict() for s in shared]
        return {'items': items, 'count': len(items)}

    @router.get('/users')
    async def share_candidates(actor: Identity = Depends(get_actor)):
        users = await sharing.list_share_candidates(actor)
        items = [u.to_dict() for u in users]
        return {'items': items, 'count': len(items)}

    @router.post('/{document_id}/share/email')
    async def share_with_user(
        document_id: str,
        body: ShareWithUserRequest,
        actor: Identity = Depends(get_actor),
    ):
        """Grant a registered user direct access. Owner only."""
        grantee = await sharing.grant_access_by_identity(
            actor, document_id, body.user_id, body.email,
        )
        return {'granted': True, 'grantee_id': grantee.id}

    @router.post('/{document_id}/share/public')
    async def share_public(
        document_id: str,
        actor: Identity = Depends(get_actor),
    ):
        """Issue a new public link. Owner only; replaces any earlier link."""
        url = await sharing.generate_public_link(actor, document_id)
        return {'url': url}

    @router.get('/{document_id}/view')
    async def view_public(document_id: str, token: str = ''):
        """Anonymous read-only view via the public token."""
        view = await sharing.resolve_public_access(document_id, token)
        return view.to_dict()

    @router.get('/{document_id}/external-access')
    async def view_granted(
        document_id: str,
        actor: Identity = Depends(get_actor),
    ):
        """Read-only view for a user holding a direct grant."""
        view = await sharing.resolve_granted_access(actor, document_id)
        return view.to_dict()

    return router
