"""Async PostgREST client wrapper for Supabase.

The single point of Supabase HTTP interaction for the PDF Drive stores.
Filters are given as ``{column: (op, value)}`` (bare values mean ``eq``)
and rendered as PostgREST query parameters, e.g. ``owner_id=eq.u1`` or
``grants=cs.[{"grantee_id":"u2"}]``.
"""

from __future__ import annotations

import json
from typing import Any, Mapping, Sequence

import httpx

from .errors import (
    StoreAuthError,
    StoreConflictError,
    StoreError,
    StoreNotFoundError,
)

Filters = Mapping[str, "tuple[str, Any] | Any"]

_shared_async_client: httpx.AsyncClient | None = None


def _get_shared_async_client() -> httpx.AsyncClient:
    global _shared_async_client
    if _shared_async_client is None:
        _shared_async_client = httpx.AsyncClient()
    return _shared_async_client


def encode_filter(op: str, value: Any) -> str:
    """Render one filter as ``op.value`` in PostgREST syntax."""
    if op == "is":
        rendered = {None: "null", True: "true", False: "false"}.get(value, value)
        return f"is.{rendered}"
    if op == "in":
        if not isinstance(value, (list, tuple, set, frozenset)):
            raise ValueError("in operator requires an iterable of values")
        items = [json.dumps(v) if isinstance(v, str) else str(v) for v in value]
        return f"in.({','.join(items)})"
    if op in ("cs", "cd"):
        # jsonb containment; the value is a JSON document.
        return f"{op}.{json.dumps(value, separators=(',', ':'))}"
    if value is None:
        raise ValueError(f"{op} does not support None; use op='is'")
    if isinstance(value, bool):
        value = "true" if value else "false"
    return f"{op}.{value}"


def filters_to_params(filters: Filters | None) -> dict[str, str]:
    params: dict[str, str] = {}
    for column, condition in (filters or {}).items():
        op, value = condition if isinstance(condition, tuple) and len(condition) == 2 else ("eq", condition)
        params[str(column)] = encode_filter(str(op), value)
    return params


class SupabaseClient:
    """Minimal async PostgREST client authenticated with the service role."""

    def __init__(
        self,
        *,
        supabase_url: str,
        service_role_key: str,
        schema: str = "public",
        http_client: httpx.AsyncClient | None = None,
        timeout_seconds: float = 30.0,
    ) -> None:
        if not supabase_url:
            raise ValueError("supabase_url is required")
        if not service_role_key:
            raise ValueError("service_role_key is required")

        self._rest_url = f"{supabase_url.rstrip('/')}/rest/v1"
        self._service_role_key = service_role_key
        self._schema = schema
        self._timeout = float(timeout_seconds)
        self._client = http_client or _get_shared_async_client()

    def _headers(self, method: str, prefer: str | None) -> dict[str, str]:
        # Never log these headers.
        headers = {
            "apikey": self._service_role_key,
            "Authorization": f"Bearer {self._service_role_key}",
            "Accept-Profile": self._schema,
        }
        if method != "GET":
            headers["Content-Profile"] = self._schema
        if prefer:
            headers["Prefer"] = prefer
        return headers

    @staticmethod
    def _raise_for_error(resp: httpx.Response) -> None:
        if resp.status_code < 400:
            return

        message, code, details = resp.text, None, None
        try:
            payload = resp.json()
            if isinstance(payload, dict):
                message = payload.get("message") or message
                code = payload.get("code")
                details = payload.get("details")
        except ValueError:
            pass

        if resp.status_code in (401, 403):
            err_cls: type[StoreError] = StoreAuthError
        elif resp.status_code == 404:
            err_cls = StoreNotFoundError
        elif resp.status_code == 409:
            err_cls = StoreConflictError
        else:
            err_cls = StoreError
        raise err_cls(resp.status_code, message, code=code, details=details)

    async def _request(
        self,
        method: str,
        table: str,
        *,
        params: dict[str, str] | None = None,
        body: Any = None,
        prefer: str | None = None,
    ) -> list[dict[str, Any]]:
        try:
            resp = await self._client.request(
                method,
                f"{self._rest_url}/{table}",
                params=params,
                json=body,
                headers=self._headers(method, prefer),
                timeout=self._timeout,
            )
        except httpx.TransportError as exc:
            raise StoreError(0, f"transport error: {exc.__class__.__name__}") from exc

        self._raise_for_error(resp)
        if resp.status_code == 204 or not resp.content:
            return []
        payload = resp.json()
        if not isinstance(payload, list):
            raise StoreError(500, f"expected list response from {method} {table}")
        return payload

    async def select(
        self,
        table: str,
        filters: Filters | None = None,
        *,
        columns: str = "*",
        order: str | None = None,
        limit: int | None = None,
    ) -> list[dict[str, Any]]:
        params = filters_to_params(filters)
        params["select"] = columns
        if order:
            params["order"] = order
        if limit is not None:
            params["limit"] = str(int(limit))
        return await self._request("GET", table, params=params)

    async def upsert(
        self,
        table: str,
        rows: Mapping[str, Any] | Sequence[Mapping[str, Any]],
        *,
        on_conflict: str = "id",
    ) -> list[dict[str, Any]]:
        return await self._request(
            "POST",
            table,
            params={"on_conflict": on_conflict},
            body=rows,
            prefer="return=representation,resolution=merge-duplicates",
        )

    async def insert(
        self,
        table: str,
        rows: Mapping[str, Any] | Sequence[Mapping[str, Any]],
    ) -> list[dict[str, Any]]:
        return await self._request(
            "POST", table, body=rows, prefer="return=representation",
        )

    async def delete(self, table: str, filters: Filters) -> list[dict[str, Any]]:
        if not filters:
            raise ValueError("delete requires at least one filter")
        return await self._request(
            "DELETE",
            table,
            params=filters_to_params(filters),
            prefer="return=representation",
        )
