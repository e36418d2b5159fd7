"""Sharing audit events and token redaction.

Records who shared what with whom, and every public/granted access attempt.

Security invariant:
  Plaintext tokens must NEVER appear in audit event data. Only token
  prefixes (first 8 chars) are included for correlation.

This module provides:
  1. ``ShareAuditEvent``:  structured audit record.
  2. ``ShareAuditEmitter``:  protocol for event sinks.
  3. ``InMemoryShareAuditEmitter``:  test implementation.
  4. ``LoggingShareAuditEmitter``:  writes events through structlog.
  5. ``redact_token``:  safely truncate tokens for logging.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Protocol

from pdf_drive.observability.logging import get_logger

# ── Constants ─────────────────────────────────────────────────────────

TOKEN_PREFIX_LENGTH = 8

SHARE_GRANTED = 'share.granted'
SHARE_PUBLIC_LINK = 'share.public_link'
SHARE_ACCESSED = 'share.accessed'
SHARE_DENIED = 'share.denied'


def redact_token(token: str | None) -> str:
    """Truncate a token to ``<prefix>...``, or ``<redacted>`` if too short."""
    if not token or len(token) < TOKEN_PREFIX_LENGTH:
        return '<redacted>'
    return f'{token[:TOKEN_PREFIX_LENGTH]}...'


# ── Audit event model ───────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class ShareAuditEvent:
    """Structured audit event for sharing operations.

    Attributes:
        event_type: share.granted, share.public_link, share.accessed,
                    or share.denied.
        document_id: The document involved.
        actor_user_id: Who acted ('' for anonymous public-link access).
        grantee_id: Recipient of a direct grant, when applicable.
        via: Access path: 'grant' or 'public'.
        token_prefix: First 8 chars of a token (for correlation only).
        detail: Additional context (e.g. denial reason).
        timestamp: When the event occurred.
    """

    event_type: str
    document_id: str
    actor_user_id: str = ''
    grantee_id: str = ''
    via: str = ''
    token_prefix: str = '<redacted>'
    detail: str = ''
    timestamp: datetime = field(
        default_factory=lambda: datetime.now(timezone.utc),
    )

    def to_dict(self) -> dict:
        """Serialize to a dict safe for JSON logging."""
        return {
            'event_type': self.event_type,
            'document_id': self.document_id,
            'actor_user_id': self.actor_user_id,
            'grantee_id': self.grantee_id,
            'via': self.via,
            'token_prefix': self.token_prefix,
            'detail': self.detail,
            'timestamp': self.timestamp.isoformat(),
        }


# ── Emitters ───────────────────────────────────────────────────────


class ShareAuditEmitter(Protocol):
    """Abstract audit event sink."""

    async def emit(self, event: ShareAuditEvent) -> None: ...


class InMemoryShareAuditEmitter:
    """Test audit emitter that stores events in memory."""

    def __init__(self) -> None:
        self.events: list[ShareAuditEvent] = []

    async def emit(self, event: ShareAuditEvent) -> None:
        self.events.append(event)

    def find(
        self,
        event_type: str | None = None,
        document_id: str | None = None,
    ) -> list[ShareAuditEvent]:
        result = self.events
        if event_type:
            result = [e for e in result if e.event_type == event_type]
        if document_id:
            result = [e for e in result if e.document_id == document_id]
        return result


class LoggingShareAuditEmitter:
    """Audit sink that writes one structured log line per event."""

    def __init__(self, logger_name: str = 'pdf_drive.audit') -> None:
        self._logger = get_logger(logger_name)

    async def emit(self, event: ShareAuditEvent) -> None:
        self._logger.info('share_audit', **event.to_dict())
