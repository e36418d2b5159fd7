"""Tests for request correlation, route-labelled metrics, and logging setup."""

from __future__ import annotations

import logging

import pytest
import structlog
from fastapi import FastAPI, Request
from httpx import ASGITransport, AsyncClient
from prometheus_client import REGISTRY

from pdf_drive.observability.logging import configure_logging
from pdf_drive.observability.metrics import metrics_text
from pdf_drive.observability.middleware import (
    UNMATCHED_ROUTE,
    ObservabilityMiddleware,
)


def _app() -> FastAPI:
    app = FastAPI()
    app.add_middleware(ObservabilityMiddleware)

    @app.get('/api/pdfs/{document_id}')
    async def document_details(document_id: str, request: Request):
        return {
            'bound': structlog.contextvars.get_contextvars().get('request_id'),
            'state': request.state.request_id,
        }

    return app


def _client() -> AsyncClient:
    return AsyncClient(transport=ASGITransport(app=_app()), base_url='http://test')


def _requests_total(route: str, status: str) -> float:
    value = REGISTRY.get_sample_value(
        'pdf_drive_http_requests_total',
        {'method': 'GET', 'route': route, 'status': status},
    )
    return value or 0.0


class TestRequestId:

    @pytest.mark.asyncio
    async def test_generated_when_absent(self):
        async with _client() as c:
            resp = await c.get('/api/pdfs/p1')
        rid = resp.headers['x-request-id']
        assert len(rid) == 36
        assert resp.json() == {'bound': rid, 'state': rid}

    @pytest.mark.asyncio
    async def test_well_formed_incoming_id_kept(self):
        async with _client() as c:
            resp = await c.get('/api/pdfs/p1', headers={'X-Request-ID': 'req-12345678'})
        assert resp.headers['x-request-id'] == 'req-12345678'
        assert resp.json()['bound'] == 'req-12345678'

    @pytest.mark.asyncio
    async def test_malformed_incoming_id_replaced(self):
        async with _client() as c:
            resp = await c.get('/api/pdfs/p1', headers={'X-Request-ID': 'bad id!'})
        assert resp.headers['x-request-id'] != 'bad id!'

    @pytest.mark.asyncio
    async def test_context_cleared_after_request(self):
        async with _client() as c:
            await c.get('/api/pdfs/p1')
        assert 'request_id' not in structlog.contextvars.get_contextvars()


class TestMetrics:

    @pytest.mark.asyncio
    async def test_requests_labelled_by_route_template(self):
        before = _requests_total('/api/pdfs/{document_id}', '200')

        async with _client() as c:
            await c.get('/api/pdfs/some-document')

        assert _requests_total('/api/pdfs/{document_id}', '200') == before + 1
        body, content_type = metrics_text()
        assert 'text/plain' in content_type
        assert 'some-document' not in body.decode()

    @pytest.mark.asyncio
    async def test_unknown_paths_share_one_label(self):
        before = _requests_total(UNMATCHED_ROUTE, '404')

        async with _client() as c:
            await c.get('/nowhere/abc')
            await c.get('/nowhere/def')

        assert _requests_total(UNMATCHED_ROUTE, '404') == before + 2
        assert '/nowhere' not in metrics_text()[0].decode()


class TestConfigureLogging:

    def test_repeat_calls_keep_one_handler_and_foreign_handlers(self):
        root = logging.getLogger()
        foreign = logging.NullHandler()
        root.addHandler(foreign)
        try:
            configure_logging('DEBUG', 'console')
            configure_logging('WARNING', 'json')

            ours = [h for h in root.handlers if h.get_name() == 'pdf_drive']
            assert len(ours) == 1
            assert foreign in root.handlers
            assert root.level == logging.WARNING
        finally:
            root.removeHandler(foreign)
            configure_logging()
