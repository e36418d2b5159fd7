"""PDF document records and owner-only document management."""

from .model import (
    Comment,
    Document,
    DocumentView,
    Grant,
    generate_share_token,
    hash_token,
    token_matches,
)

__all__ = [
    'Comment',
    'Document',
    'DocumentView',
    'Grant',
    'generate_share_token',
    'hash_token',
    'token_matches',
]
