"""Supabase (PostgREST) backed stores."""

from .document_repo import SupabaseCommentStore, SupabaseDocumentStore
from .errors import (
    StoreAuthError,
    StoreConflictError,
    StoreError,
    StoreNotFoundError,
)
from .supabase_client import SupabaseClient
from .user_repo import SupabaseUserDirectory

__all__ = [
    "StoreAuthError",
    "StoreConflictError",
    "StoreError",
    "StoreNotFoundError",
    "SupabaseClient",
    "SupabaseCommentStore",
    "SupabaseDocumentStore",
    "SupabaseUserDirectory",
]
