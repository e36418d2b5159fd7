"""Document sharing: ledger, access predicates, service, and routes."""

from . import access
from .audit import (
    InMemoryShareAuditEmitter,
    LoggingShareAuditEmitter,
    ShareAuditEmitter,
    ShareAuditEvent,
    redact_token,
)
from .ledger import DuplicateGrant, SharingLedger, find_grant
from .routes import ShareWithUserRequest, create_sharing_router
from .service import SharedDocument, SharingService

__all__ = [
    'DuplicateGrant',
    'InMemoryShareAuditEmitter',
    'LoggingShareAuditEmitter',
    'ShareAuditEmitter',
    'ShareAuditEvent',
    'ShareWithUserRequest',
    'SharedDocument',
    'SharingLedger',
    'SharingService',
    'access',
    'create_sharing_router',
    'find_grant',
    'redact_token',
]
