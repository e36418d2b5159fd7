"""PDF document, grant, and comment domain objects.

A ``Document`` carries its own sharing state: an ordered list of
``Grant`` records (one per grantee) and an optional public-token hash.
Only the hash of a public token is persisted; the plaintext token is
handed to the owner exactly once inside the generated link.

This module provides:
  1. ``Document`` / ``Grant`` / ``Comment``:  mutable domain records.
  2. ``DocumentView``:  read-only projection safe for non-owners.
  3. ``generate_share_token`` / ``hash_token``:  token lifecycle helpers.
"""

from __future__ import annotations

import hashlib
import hmac
import secrets
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

# ── Constants ─────────────────────────────────────────────────────────

TOKEN_BYTES = 32  # 256-bit tokens.


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> str:
    return uuid.uuid4().hex


# ── Token operations ──────────────────────────────────────────────────


def generate_share_token() -> str:
    """Generate a cryptographically random URL-safe token."""
    return secrets.token_urlsafe(TOKEN_BYTES)


def hash_token(plaintext: str) -> str:
    """Compute the SHA-256 hex digest of a plaintext token."""
    return hashlib.sha256(plaintext.encode('utf-8')).hexdigest()


def token_matches(plaintext: str | None, token_hash: str | None) -> bool:
    """Constant-time check of a presented token against a stored hash."""
    if not plaintext or not token_hash:
        return False
    return hmac.compare_digest(hash_token(plaintext), token_hash)


# ── Domain model ──────────────────────────────────────────────────────


@dataclass
class Grant:
    """Direct access for one user to one document.

    Attributes:
        grantee_id: Identity the grant authorizes.
        grantee_email: Grantee email as it was when the grant was made.
        access_token: Opaque per-grant token. Carried for display and
            future per-grant revocation; authorization matches on
            ``grantee_id`` only.
        granted_at: When the grant was created.
    """

    grantee_id: str
    grantee_email: str
    access_token: str
    granted_at: datetime = field(default_factory=utcnow)

    def to_dict(self) -> dict[str, Any]:
        return {
            'grantee_id': self.grantee_id,
            'grantee_email': self.grantee_email,
            'access_token': self.access_token,
            'granted_at': self.granted_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Grant:
        return cls(
            grantee_id=str(data['grantee_id']),
            grantee_email=data['grantee_email'],
            access_token=data['access_token'],
            granted_at=parse_timestamp(data.get('granted_at')),
        )


@dataclass
class Document:
    """A PDF record stored on the cloud drive.

    Attributes:
        id: Immutable identifier assigned at creation.
        title: Display title; the only field the owner may change.
        file_id: Opaque drive file reference.
        file_url: Drive display link.
        owner_id: The uploading user. Ownership never transfers.
        grants: Direct grants in sharing order, at most one per grantee.
        public_token_hash: SHA-256 of the active public token, if any.
        created_at: Creation timestamp.
        updated_at: Last modification timestamp.
    """

    id: str
    title: str
    file_id: str
    file_url: str
    owner_id: str
    grants: list[Grant] = field(default_factory=list)
    public_token_hash: str | None = None
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    @property
    def is_publicly_shared(self) -> bool:
        return self.public_token_hash is not None

    @property
    def sharing_status(self) -> str:
        """``private``, ``shared_direct``, ``public`` or ``shared_direct+public``."""
        parts = []
        if self.grants:
            parts.append('shared_direct')
        if self.is_publicly_shared:
            parts.append('public')
        return '+'.join(parts) or 'private'

    def rename(self, title: str) -> None:
        self.title = title
        self.updated_at = utcnow()

    def view(self) -> DocumentView:
        return DocumentView(
            document_id=self.id,
            title=self.title,
            file_id=self.file_id,
            file_url=self.file_url,
            created_at=self.created_at,
        )

    def owner_view(self) -> dict[str, Any]:
        """Full representation for the owner; token values are never included."""
        return {
            **self.view().to_dict(),
            'owner_id': self.owner_id,
            'updated_at': self.updated_at.isoformat(),
            'has_public_link': self.is_publicly_shared,
            'sharing_status': self.sharing_status,
            'shared_with': [
                {
                    'grantee_id': g.grantee_id,
                    'grantee_email': g.grantee_email,
                    'granted_at': g.granted_at.isoformat(),
                }
                for g in self.grants
            ],
        }


@dataclass(frozen=True, slots=True)
class DocumentView:
    """Read-only projection returned to grantees and public viewers."""

    document_id: str
    title: str
    file_id: str
    file_url: str
    created_at: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            'document_id': self.document_id,
            'title': self.title,
            'file_id': self.file_id,
            'file_url': self.file_url,
            'created_at': self.created_at.isoformat(),
        }


@dataclass
class Comment:
    """A comment posted on a document by an authenticated user."""

    id: str
    document_id: str
    author_id: str
    text: str
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    def edit(self, text: str) -> None:
        self.text = text
        self.updated_at = utcnow()


def parse_timestamp(value: Any) -> datetime:
    """Parse an ISO-8601 timestamp read back from storage. None raises."""
    if value is None:
        raise ValueError('persisted timestamp is missing')
    if isinstance(value, datetime):
        return value
    # PostgREST renders UTC as "+00:00"; older rows may carry "Z".
    return datetime.fromisoformat(str(value).replace('Z', '+00:00'))
