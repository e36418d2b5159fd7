"""Google Drive v3 file operations over httpx.

Only the operations the service performs on already-uploaded PDFs live
here: rename (on document rename) and delete (on document delete). The
upload transport itself is handled outside this service.

Auth uses an OAuth bearer token injected from settings (server-side only).
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

logger = logging.getLogger(__name__)

DRIVE_API_BASE = "https://www.googleapis.com/drive/v3"


# ── Exception hierarchy ─────────────────────────────────────────


class DriveError(Exception):
    """Google Drive API call failed."""

    def __init__(self, status_code: int, message: str = "") -> None:
        self.status_code = status_code
        self.message = message
        super().__init__(f"Drive API error {status_code}: {message}")


class DriveNotFoundError(DriveError):
    """File does not exist in the drive (404)."""

    def __init__(self, message: str = "File not found") -> None:
        super().__init__(404, message)


# ── Shared client ────────────────────────────────────────────────

_shared_async_client: httpx.AsyncClient | None = None


def _get_shared_async_client() -> httpx.AsyncClient:
    global _shared_async_client
    if _shared_async_client is None:
        _shared_async_client = httpx.AsyncClient()
    return _shared_async_client


# ── Google Drive ─────────────────────────────────────────────────


class GoogleDriveStorage:
    """FileStorage backed by the Google Drive v3 REST API."""

    def __init__(
        self,
        *,
        access_token: str,
        base_url: str = DRIVE_API_BASE,
        http_client: httpx.AsyncClient | None = None,
        timeout_seconds: float = 30.0,
    ) -> None:
        if not access_token:
            raise ValueError("access_token is required")
        self._access_token = access_token
        self._base_url = base_url.rstrip("/")
        self._client = http_client or _get_shared_async_client()
        self._timeout = float(timeout_seconds)

    def _file_url(self, file_id: str) -> str:
        return f"{self._base_url}/files/{file_id}"

    def _auth_headers(self) -> dict[str, str]:
        # Never log these headers.
        return {"Authorization": f"Bearer {self._access_token}"}

    def _raise_for_status(self, resp: httpx.Response) -> None:
        if resp.status_code < 400:
            return

        message = resp.text[:200] if resp.text else f"HTTP {resp.status_code}"
        try:
            payload = resp.json()
            error = payload.get("error") if isinstance(payload, dict) else None
            if isinstance(error, dict):
                message = error.get("message", message)
        except ValueError:
            pass

        if resp.status_code == 404:
            raise DriveNotFoundError(message)
        raise DriveError(resp.status_code, message)

    async def _send(self, method: str, file_id: str, **kwargs: Any) -> httpx.Response:
        try:
            resp = await self._client.request(
                method,
                self._file_url(file_id),
                headers=self._auth_headers(),
                timeout=self._timeout,
                **kwargs,
            )
        except httpx.TransportError as exc:
            raise DriveError(0, f"transport error: {exc.__class__.__name__}") from exc
        self._raise_for_status(resp)
        return resp

    async def rename(self, file_id: str, title: str) -> None:
        await self._send("PATCH", file_id, json={"name": title})
        logger.info("Renamed drive file %s", file_id)

    async def delete(self, file_id: str) -> None:
        """Delete a drive file. A file that is already gone counts as deleted."""
        try:
            await self._send("DELETE", file_id)
        except DriveNotFoundError:
            logger.warning("Drive file %s already absent; continuing delete", file_id)
            return
        logger.info("Deleted drive file %s", file_id)


# ── In-memory fake ───────────────────────────────────────────────


class InMemoryFileStorage:
    """Records drive calls; used for local development and tests."""

    def __init__(self) -> None:
        self.names: dict[str, str] = {}
        self.deleted: list[str] = []

    async def rename(self, file_id: str, title: str) -> None:
        self.names[file_id] = title

    async def delete(self, file_id: str) -> None:
        self.deleted.append(file_id)
        self.names.pop(file_id, None)
