"""Authorization predicates over an actor and an already-loaded document.

Pure functions: no I/O, no persistence. The rules:

  - The owner can do everything to a document except edit other users'
    comments.
  - A direct grantee can view and comment.
  - A public token never makes an *actor* a viewer; public-link access is
    a separate anonymous path handled by the sharing service.
  - Comments are modified only by their author, regardless of ownership.
  - Grants are permanent: there is no revocation predicate.
"""

from __future__ import annotations

from ..documents.model import Comment, Document
from ..identity.directory import Identity
from .ledger import find_grant


def is_owner(actor: Identity, document: Document) -> bool:
    return actor.id == document.owner_id


def has_direct_grant(actor: Identity, document: Document) -> bool:
    return find_grant(document, actor.id) is not None


def can_view(actor: Identity, document: Document) -> bool:
    return is_owner(actor, document) or has_direct_grant(actor, document)


def can_manage_sharing(actor: Identity, document: Document) -> bool:
    """Rename, delete, grant, and public-link issuance are owner-only."""
    return is_owner(actor, document)


def can_comment(actor: Identity, document: Document) -> bool:
    return is_owner(actor, document) or has_direct_grant(actor, document)


def can_modify_comment(actor: Identity, comment: Comment) -> bool:
    return actor.id == comment.author_id
