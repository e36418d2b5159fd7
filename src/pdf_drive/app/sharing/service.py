"""Sharing service: grants, public links, and shared-document lookup.

Every operation takes the acting identity explicitly and validates fully
(existence, ownership, grantee identity) before touching the ledger, so a
failed request never leaves a partial write behind.

Operations:
  - ``grant_access_by_identity``:  owner grants a user direct access.
  - ``generate_public_link``:      owner issues/replaces the public token.
  - ``resolve_public_access``:     anonymous view via public token.
  - ``resolve_granted_access``:    grantee view via direct grant.
  - ``list_shared_with_me``:       documents granted to the actor.
  - ``list_share_candidates``:     everyone except the actor.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Any
from urllib.parse import quote, urlencode

from pdf_drive.observability.logging import get_logger
from pdf_drive.observability.metrics import (
    ACCESS_DENIED_TOTAL,
    SHARE_OPERATIONS_TOTAL,
)

from ..documents.model import Document, DocumentView, token_matches
from ..errors import AlreadyShared, Forbidden, InvalidInput, NotFound
from ..identity.directory import Identity
from . import access
from .audit import (
    SHARE_ACCESSED,
    SHARE_DENIED,
    SHARE_GRANTED,
    SHARE_PUBLIC_LINK,
    ShareAuditEmitter,
    ShareAuditEvent,
    redact_token,
)
from .ledger import DuplicateGrant, SharingLedger, find_grant

if TYPE_CHECKING:
    from ..identity.provider import IdentityProvider
    from ..protocols import DocumentStore

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class SharedDocument:
    """A document granted to the actor, with the sharing metadata."""

    view: DocumentView
    owner: Identity
    shared_at: datetime
    access_token: str

    def to_dict(self) -> dict[str, Any]:
        return {
            **self.view.to_dict(),
            'owner': self.owner.to_dict(),
            'shared_at': self.shared_at.isoformat(),
            'access_token': self.access_token,
        }


class SharingService:
    """Orchestrates the sharing ledger against the document store."""

    def __init__(
        self,
        store: DocumentStore,
        identities: IdentityProvider,
        audit: ShareAuditEmitter,
        *,
        public_base_url: str,
        ledger: SharingLedger | None = None,
    ) -> None:
        self._store = store
        self._identities = identities
        self._audit = audit
        self._public_base_url = public_base_url.rstrip('/')
        self._ledger = ledger or SharingLedger(store)

    async def _load(self, document_id: str) -> Document:
        document = await self._store.get(document_id)
        if document is None:
            raise NotFound('PDF not found')
        return document

    async def _require_owner(self, actor: Identity, document_id: str) -> Document:
        document = await self._load(document_id)
        if not access.can_manage_sharing(actor, document):
            ACCESS_DENIED_TOTAL.labels(path='manage').inc()
            await self._audit.emit(ShareAuditEvent(
                event_type=SHARE_DENIED,
                document_id=document_id,
                actor_user_id=actor.id,
                detail='not_owner',
            ))
            raise Forbidden('Only the owner can share this PDF')
        return document

    # ── Owner operations ─────────────────────────────────────────────

    async def grant_access_by_identity(
        self,
        actor: Identity,
        document_id: str,
        grantee_id: str,
        grantee_email: str,
    ) -> Identity:
        """Grant ``grantee_id`` direct access to the document.

        The supplied email must match the grantee's current email in the
        directory. The comparison ignores case and surrounding whitespace,
        which is looser than an exact string match.

        Returns:
            The grantee identity as resolved from the directory.

        Raises:
            InvalidInput: Missing fields, or the owner granting themselves.
            NotFound: Unknown document, unknown grantee, or email mismatch.
            Forbidden: Actor does not own the document.
            AlreadyShared: Grantee already has access.
        """
        document = await self._require_owner(actor, document_id)

        grantee_id = (grantee_id or '').strip()
        grantee_email = (grantee_email or '').strip().lower()
        if not grantee_id or not grantee_email:
            raise InvalidInput('user_id and email are required')

        grantee = await self._identities.find_by_id(grantee_id)
        if grantee is None or grantee.email.lower() != grantee_email:
            raise NotFound('User not found')
        if grantee.id == document.owner_id:
            raise InvalidInput('The owner already has access to this PDF')

        try:
            grant = await self._ledger.add_grant(document, grantee.id, grantee.email)
        except DuplicateGrant as exc:
            SHARE_OPERATIONS_TOTAL.labels(operation='grant', outcome='duplicate').inc()
            raise AlreadyShared('User already has access to this PDF') from exc

        SHARE_OPERATIONS_TOTAL.labels(operation='grant', outcome='ok').inc()
        logger.info(
            'grant_created',
            document_id=document.id,
            owner_id=actor.id,
            grantee_id=grantee.id,
            access_token=redact_token(grant.access_token),
        )
        await self._audit.emit(ShareAuditEvent(
            event_type=SHARE_GRANTED,
            document_id=document.id,
            actor_user_id=actor.id,
            grantee_id=grantee.id,
            via='grant',
            token_prefix=redact_token(grant.access_token),
        ))
        return grantee

    async def generate_public_link(self, actor: Identity, document_id: str) -> str:
        """Issue a fresh public token and return the link that embeds it.

        Any previously generated link stops working.
        """
        document = await self._require_owner(actor, document_id)
        token = await self._ledger.issue_public_token(document)

        SHARE_OPERATIONS_TOTAL.labels(operation='public_link', outcome='ok').inc()
        logger.info(
            'public_link_issued',
            document_id=document.id,
            owner_id=actor.id,
            token=redact_token(token),
        )
        await self._audit.emit(ShareAuditEvent(
            event_type=SHARE_PUBLIC_LINK,
            document_id=document.id,
            actor_user_id=actor.id,
            via='public',
            token_prefix=redact_token(token),
        ))
        return self.build_public_url(document.id, token)

    def build_public_url(self, document_id: str, token: str) -> str:
        query = urlencode({'token': token})
        return f'{self._public_base_url}/shared/{quote(document_id, safe="")}?{query}'

    # ── Read paths ────────────────────────────────────────────────────

    async def resolve_public_access(
        self, document_id: str, token: str | None,
    ) -> DocumentView:
        """Anonymous read-only access through the public token.

        Raises:
            NotFound: Unknown document.
            Forbidden: No public token set, or ``token`` does not match.
        """
        document = await self._load(document_id)
        if not token_matches(token, document.public_token_hash):
            ACCESS_DENIED_TOTAL.labels(path='public').inc()
            await self._audit.emit(ShareAuditEvent(
                event_type=SHARE_DENIED,
                document_id=document_id,
                via='public',
                token_prefix=redact_token(token),
                detail='invalid_public_token',
            ))
            raise Forbidden('Invalid public link')

        await self._audit.emit(ShareAuditEvent(
            event_type=SHARE_ACCESSED,
            document_id=document_id,
            via='public',
            token_prefix=redact_token(token),
        ))
        return document.view()

    async def resolve_granted_access(
        self, actor: Identity, document_id: str,
    ) -> DocumentView:
        """Read-only access through a direct grant.

        Raises:
            NotFound: Unknown document.
            Forbidden: The actor holds no grant on the document.
        """
        document = await self._load(document_id)
        if not access.has_direct_grant(actor, document):
            ACCESS_DENIED_TOTAL.labels(path='grant').inc()
            await self._audit.emit(ShareAuditEvent(
                event_type=SHARE_DENIED,
                document_id=document_id,
                actor_user_id=actor.id,
                via='grant',
                detail='no_grant',
            ))
            raise Forbidden("You don't have access to this PDF")

        await self._audit.emit(ShareAuditEvent(
            event_type=SHARE_ACCESSED,
            document_id=document_id,
            actor_user_id=actor.id,
            via='grant',
        ))
        return document.view()

    async def list_shared_with_me(self, actor: Identity) -> list[SharedDocument]:
        """Documents granted to the actor, most recently created first."""
        documents = await self._store.list_shared_with(actor.id)
        documents.sort(key=lambda d: d.created_at, reverse=True)

        owners: dict[str, Identity] = {}
        shared: list[SharedDocument] = []
        for document in documents:
            grant = find_grant(document, actor.id)
            if grant is None:
                continue
            owner = owners.get(document.owner_id)
            if owner is None:
                owner = await self._identities.find_by_id(document.owner_id)
                if owner is None:
                    owner = Identity(id=document.owner_id, name='', email='')
                owners[document.owner_id] = owner
            shared.append(SharedDocument(
                view=document.view(),
                owner=owner,
                shared_at=grant.granted_at,
                access_token=grant.access_token,
            ))
        return shared

    async def list_share_candidates(self, actor: Identity) -> list[Identity]:
        """Every known identity except the actor; a UI discovery aid only."""
        return await self._identities.list_except(actor.id)
