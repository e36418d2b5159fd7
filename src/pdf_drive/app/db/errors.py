"""Document store error hierarchy.

Kept small and dependency-free so repositories can raise them without
leaking httpx.Response objects (or secrets). These are infrastructure
failures, separate from the domain taxonomy in
``pdf_drive.app.errors``; the API surfaces them as 503.
"""

from __future__ import annotations


class StoreError(Exception):
    """Base error for PostgREST requests."""

    def __init__(
        self,
        status_code: int,
        message: str,
        *,
        code: str | None = None,
        details: str | None = None,
    ) -> None:
        self.status_code = status_code
        self.message = message
        self.code = code
        self.details = details
        super().__init__(str(self))

    def __str__(self) -> str:
        bits: list[str] = [f"StoreError(status={self.status_code})", self.message]
        if self.code:
            bits.append(f"code={self.code}")
        if self.details:
            bits.append(f"details={self.details}")
        return " ".join(bits)


class StoreAuthError(StoreError):
    """401/403: bad service key or row-level security rejection."""


class StoreNotFoundError(StoreError):
    """404: missing table, view, or route."""


class StoreConflictError(StoreError):
    """409: unique violation or other conflict."""
