"""Bearer JWT verification.

Validates access tokens issued by the external identity provider:
  1. Resolves the signing key (static HS256 secret, or JWKS for RS256).
  2. Verifies signature, audience, and expiry.
  3. Returns the verified claims as an ``AuthClaims`` value.

The claims only say who the caller claims to be; ``IdentityProvider`` then
resolves ``sub`` against the user directory.

Configuration:
  - ``JWT_SECRET``: HS256 secret (local dev and single-issuer deployments).
  - ``JWT_AUDIENCE``: Expected audience claim (default: ``authenticated``).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Protocol

import jwt
from jwt import PyJWKClient, PyJWKClientError
from starlette.requests import Request

# ── Constants ─────────────────────────────────────────────────────────

DEFAULT_AUDIENCE = 'authenticated'
JWKS_CACHE_TTL_SECONDS = 300
BEARER_PREFIX = 'Bearer '
LOCAL_DEV_SECRET = 'pdf-drive-local-development-secret'

# ── Types ─────────────────────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class AuthClaims:
    """Verified claims extracted from a bearer token."""

    user_id: str
    email: str = ''
    raw_claims: dict[str, Any] = field(default_factory=dict)


class TokenVerificationError(Exception):
    """Raised when token verification fails."""

    def __init__(self, code: str, detail: str = '') -> None:
        self.code = code
        self.detail = detail
        super().__init__(f'{code}: {detail}' if detail else code)


# ── Key providers ─────────────────────────────────────────────────────


class KeyProvider(Protocol):
    """Resolves the signing key for a given (unverified) token."""

    def get_signing_key(self, token: str) -> Any: ...


class StaticKeyProvider:
    """Uses one shared secret for HS256 verification."""

    def __init__(self, secret: str) -> None:
        self._secret = secret

    def get_signing_key(self, token: str) -> str:
        return self._secret


class JWKSKeyProvider:
    """Fetches RS256 signing keys from a JWKS endpoint, with caching."""

    def __init__(
        self,
        jwks_url: str,
        cache_ttl: int = JWKS_CACHE_TTL_SECONDS,
    ) -> None:
        self._client = PyJWKClient(
            jwks_url,
            cache_jwk_set=True,
            lifespan=cache_ttl,
        )

    def get_signing_key(self, token: str) -> Any:
        try:
            return self._client.get_signing_key_from_jwt(token).key
        except PyJWKClientError as exc:
            raise TokenVerificationError('jwks_fetch_error', str(exc)) from exc
        except jwt.PyJWTError as exc:
            raise TokenVerificationError('invalid_token', str(exc)) from exc


# ── Verifier ──────────────────────────────────────────────────────────


class TokenVerifier:
    """Verifies bearer JWTs and extracts the caller's claims."""

    def __init__(
        self,
        key_provider: KeyProvider,
        audience: str = DEFAULT_AUDIENCE,
        algorithms: list[str] | None = None,
    ) -> None:
        self._key_provider = key_provider
        self._audience = audience
        self._algorithms = algorithms or ['HS256']

    def verify(self, token: str) -> AuthClaims:
        """Verify a JWT and return its claims.

        Raises:
            TokenVerificationError: On any verification failure.
        """
        if not token or not token.strip():
            raise TokenVerificationError('empty_token')

        key = self._key_provider.get_signing_key(token)
        try:
            claims = jwt.decode(
                token,
                key,
                algorithms=self._algorithms,
                audience=self._audience,
                options={'require': ['sub', 'exp', 'aud']},
            )
        except jwt.ExpiredSignatureError:
            raise TokenVerificationError('token_expired', 'Access token expired')
        except jwt.InvalidAudienceError:
            raise TokenVerificationError(
                'invalid_audience', f'expected {self._audience}',
            )
        except jwt.InvalidTokenError as exc:
            raise TokenVerificationError('invalid_token', str(exc))

        user_id = claims.get('sub')
        if not user_id:
            raise TokenVerificationError('missing_sub_claim')

        return AuthClaims(
            user_id=str(user_id),
            email=(claims.get('email') or '').lower(),
            raw_claims=claims,
        )


# ── Helpers ───────────────────────────────────────────────────────────


def extract_bearer_token(request: Request) -> str | None:
    """Return the Bearer token from the Authorization header, if any."""
    auth_header = request.headers.get('authorization', '')
    if auth_header.startswith(BEARER_PREFIX):
        return auth_header[len(BEARER_PREFIX):].strip() or None
    return None


def issue_token(
    user_id: str,
    secret: str,
    *,
    email: str = '',
    audience: str = DEFAULT_AUDIENCE,
    expires_in: timedelta = timedelta(hours=1),
) -> str:
    """Mint an HS256 access token (local development and tests)."""
    now = datetime.now(timezone.utc)
    payload = {
        'sub': user_id,
        'aud': audience,
        'iat': now,
        'exp': now + expires_in,
    }
    if email:
        payload['email'] = email
    return jwt.encode(payload, secret, algorithm='HS256')


def create_token_verifier(
    jwt_secret: str = '',
    *,
    jwks_url: str = '',
    audience: str = DEFAULT_AUDIENCE,
) -> TokenVerifier:
    """Create a TokenVerifier, preferring JWKS (RS256) when a URL is given.

    An empty secret falls back to ``LOCAL_DEV_SECRET``; settings validation
    prevents that outside the local environment.
    """
    if jwks_url:
        return TokenVerifier(
            JWKSKeyProvider(jwks_url), audience=audience, algorithms=['RS256'],
        )
    return TokenVerifier(
        StaticKeyProvider(jwt_secret or LOCAL_DEV_SECRET),
        audience=audience,
        algorithms=['HS256'],
    )
