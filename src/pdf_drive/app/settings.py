"""PDF Drive configuration settings.

PdfDriveSettings is the single configuration object accepted by create_app().
It is a plain dataclass (not env-coupled) so tests can inject config without
touching os.environ.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

DEFAULT_PUBLIC_URL = "http://localhost:5173"
MIN_JWT_SECRET_LENGTH = 32
DEFAULT_CORS_ORIGINS = (
    "http://localhost:5173",
    "http://localhost:3000",
)


@dataclass(frozen=True, slots=True)
class PdfDriveSettings:
    """Configuration for the PDF Drive FastAPI application.

    All fields have sensible defaults for local development. Non-local
    environments must supply a JWT secret, Supabase credentials, and a
    Google Drive access token.
    """

    # ── Environment ────────────────────────────────────────────────
    environment: str = "local"
    """One of: local, dev, staging, production."""

    public_url: str = DEFAULT_PUBLIC_URL
    """Frontend base URL that public share links point at."""

    # ── Identity ───────────────────────────────────────────────────
    jwt_secret: str = ""
    """HS256 secret used to verify bearer tokens. Never log this."""

    jwt_audience: str = "authenticated"
    """Expected ``aud`` claim on bearer tokens."""

    jwks_url: str = ""
    """JWKS endpoint for RS256 tokens. Takes precedence over jwt_secret."""

    # ── Document store ─────────────────────────────────────────────
    supabase_url: str = ""
    """Supabase project URL (e.g. https://xyz.supabase.co)."""

    supabase_service_role_key: str = ""
    """Supabase service-role key for PostgREST calls. Never log this."""

    # ── File storage ───────────────────────────────────────────────
    drive_access_token: str = ""
    """OAuth access token for the Google Drive v3 API."""

    # ── HTTP / logging ─────────────────────────────────────────────
    cors_origins: tuple[str, ...] = DEFAULT_CORS_ORIGINS
    log_level: str = "INFO"
    log_format: str = "json"

    @property
    def is_local(self) -> bool:
        return self.environment == "local"

    @property
    def public_base_url(self) -> str:
        return self.public_url.rstrip("/")

    def validate(self) -> list[str]:
        """Return a list of configuration errors. Empty means valid."""
        errors: list[str] = []
        if not self.public_url.startswith(("http://", "https://")):
            errors.append(f"{self.environment}: public_url must be an http(s) URL")
        if not self.is_local:
            if not self.jwks_url and len(self.jwt_secret) < MIN_JWT_SECRET_LENGTH:
                errors.append(
                    f"{self.environment}: jwt_secret must be >= "
                    f"{MIN_JWT_SECRET_LENGTH} characters"
                )
            if not self.supabase_url:
                errors.append(f"{self.environment}: supabase_url is required")
            if not self.supabase_service_role_key:
                errors.append(
                    f"{self.environment}: supabase_service_role_key is required"
                )
            if not self.drive_access_token:
                errors.append(f"{self.environment}: drive_access_token is required")
        return errors

    @classmethod
    def from_env(cls, env: dict[str, str] | None = None) -> PdfDriveSettings:
        """Build settings from environment variables.

        This is a convenience factory for production use. Tests should
        construct PdfDriveSettings directly.
        """
        if env is None:
            env = dict(os.environ)

        cors_raw = env.get("CORS_ORIGINS", "")
        cors = (
            tuple(o.strip() for o in cors_raw.split(",") if o.strip())
            if cors_raw
            else DEFAULT_CORS_ORIGINS
        )

        return cls(
            environment=env.get("ENVIRONMENT", "local"),
            public_url=env.get("FRONTEND_URL", DEFAULT_PUBLIC_URL),
            jwt_secret=env.get("JWT_SECRET", ""),
            jwt_audience=env.get("JWT_AUDIENCE", "authenticated"),
            jwks_url=env.get("JWT_JWKS_URL", ""),
            supabase_url=env.get("SUPABASE_URL", ""),
            supabase_service_role_key=env.get("SUPABASE_SERVICE_ROLE_KEY", ""),
            drive_access_token=env.get("GOOGLE_DRIVE_ACCESS_TOKEN", ""),
            cors_origins=cors,
            log_level=env.get("LOG_LEVEL", "INFO"),
            log_format=env.get("LOG_FORMAT", "json"),
        )
