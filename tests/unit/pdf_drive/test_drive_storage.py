"""Tests for the Google Drive v3 file storage adapter."""

from __future__ import annotations

import json
from typing import Any

import httpx
import pytest

from pdf_drive.app.storage.drive import DriveError, GoogleDriveStorage


def _storage(http: httpx.AsyncClient) -> GoogleDriveStorage:
    return GoogleDriveStorage(
        access_token='ya29.token',
        base_url='https://drive.test/drive/v3',
        http_client=http,
    )


@pytest.mark.asyncio
async def test_rename_patches_file_name():
    seen: dict[str, Any] = {}

    async def handler(request: httpx.Request) -> httpx.Response:
        seen['method'] = request.method
        seen['url'] = str(request.url)
        seen['auth'] = request.headers['authorization']
        seen['body'] = json.loads(request.content)
        return httpx.Response(200, json={'id': 'f1', 'name': 'New.pdf'})

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
        await _storage(http).rename('f1', 'New.pdf')

    assert seen['method'] == 'PATCH'
    assert seen['url'] == 'https://drive.test/drive/v3/files/f1'
    assert seen['auth'] == 'Bearer ya29.token'
    assert seen['body'] == {'name': 'New.pdf'}


@pytest.mark.asyncio
async def test_delete_sends_delete():
    methods: list[str] = []

    async def handler(request: httpx.Request) -> httpx.Response:
        methods.append(request.method)
        return httpx.Response(204)

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
        await _storage(http).delete('f1')

    assert methods == ['DELETE']


@pytest.mark.asyncio
async def test_delete_of_missing_file_succeeds():
    async def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404, json={'error': {'message': 'File not found: f1'}})

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
        await _storage(http).delete('f1')


@pytest.mark.asyncio
async def test_rename_of_missing_file_raises():
    async def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404, json={'error': {'message': 'File not found: f1'}})

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
        with pytest.raises(DriveError) as exc_info:
            await _storage(http).rename('f1', 'x')

    assert exc_info.value.status_code == 404
    assert exc_info.value.message == 'File not found: f1'


@pytest.mark.asyncio
async def test_server_error_and_transport_error_raise():
    async def failing(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, text='backend')

    async def unreachable(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectTimeout('timeout', request=request)

    async with httpx.AsyncClient(transport=httpx.MockTransport(failing)) as http:
        with pytest.raises(DriveError) as exc_info:
            await _storage(http).delete('f1')
    assert exc_info.value.status_code == 500

    async with httpx.AsyncClient(transport=httpx.MockTransport(unreachable)) as http:
        with pytest.raises(DriveError) as exc_info:
            await _storage(http).rename('f1', 'x')
    assert exc_info.value.status_code == 0


def test_access_token_required():
    with pytest.raises(ValueError):
        GoogleDriveStorage(access_token='')
