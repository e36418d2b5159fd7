"""Bearer-token verification and request authentication."""

from .auth_guard import get_actor, get_optional_actor
from .token_verify import (
    AuthClaims,
    TokenVerificationError,
    TokenVerifier,
    create_token_verifier,
    extract_bearer_token,
    issue_token,
)

__all__ = [
    'AuthClaims',
    'TokenVerificationError',
    'TokenVerifier',
    'create_token_verifier',
    'extract_bearer_token',
    'get_actor',
    'get_optional_actor',
    'issue_token',
]
