"""PDF Drive FastAPI application factory.

The create_app() factory is the single entry point for building the ASGI
application. It wires middleware (observability and CORS), exception
handlers, and route modules, and injects store/provider implementations
via dependency injection.

Usage:
    # Local development (in-memory stores, dev JWT secret)
    from pdf_drive.app import create_app, PdfDriveSettings
    app = create_app(PdfDriveSettings())

    # Non-local (Supabase stores and Google Drive built from settings)
    app = create_app(PdfDriveSettings.from_env())

    # Testing (full DI control)
    app = create_app(settings, document_store=store, user_directory=users)
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from dataclasses import dataclass

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.responses import Response

from pdf_drive.observability.logging import configure_logging, get_logger
from pdf_drive.observability.metrics import metrics_text
from pdf_drive.observability.middleware import ObservabilityMiddleware

from .comments.routes import create_comment_router
from .comments.service import CommentService
from .db.errors import StoreError
from .documents.routes import create_document_router
from .documents.service import DocumentService
from .errors import PdfDriveError, Unauthorized
from .identity.provider import IdentityProvider
from .protocols import CommentStore, DocumentStore, FileStorage, UserDirectory
from .security.token_verify import create_token_verifier
from .settings import PdfDriveSettings
from .sharing.audit import LoggingShareAuditEmitter, ShareAuditEmitter
from .sharing.routes import create_sharing_router
from .sharing.service import SharingService
from .storage.drive import DriveError

logger = get_logger(__name__)


@dataclass(frozen=True)
class AppDependencies:
    """Container for the injected stores, providers, and services.

    Stored on ``app.state.deps`` so dependencies and handlers can reach them.
    """

    document_store: DocumentStore
    comment_store: CommentStore
    user_directory: UserDirectory
    file_storage: FileStorage
    audit_emitter: ShareAuditEmitter
    identity_provider: IdentityProvider
    documents: DocumentService
    sharing: SharingService
    comments: CommentService


def _build_local_stores() -> tuple[DocumentStore, CommentStore, UserDirectory, FileStorage]:
    """Construct all-InMemory stores for local development."""
    from .identity.directory import InMemoryUserDirectory
    from .inmemory import InMemoryCommentStore, InMemoryDocumentStore
    from .storage.drive import InMemoryFileStorage

    comments = InMemoryCommentStore()
    return (
        InMemoryDocumentStore(comments),
        comments,
        InMemoryUserDirectory(),
        InMemoryFileStorage(),
    )


def _build_remote_stores(
    settings: PdfDriveSettings,
) -> tuple[DocumentStore, CommentStore, UserDirectory, FileStorage]:
    """Construct Supabase stores and Google Drive storage from settings."""
    from .db import (
        SupabaseClient,
        SupabaseCommentStore,
        SupabaseDocumentStore,
        SupabaseUserDirectory,
    )
    from .storage.drive import GoogleDriveStorage

    client = SupabaseClient(
        supabase_url=settings.supabase_url,
        service_role_key=settings.supabase_service_role_key,
    )
    comments = SupabaseCommentStore(client)
    return (
        SupabaseDocumentStore(client, comments),
        comments,
        SupabaseUserDirectory(client),
        GoogleDriveStorage(access_token=settings.drive_access_token),
    )


# ── Error responses ─────────────────────────────────────────────────


def _error_response(
    request: Request,
    status_code: int,
    error: str,
    detail: str,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "error": error,
            "detail": detail,
            "request_id": getattr(request.state, "request_id", None),
        },
        headers=headers,
    )


def _install_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(PdfDriveError)
    async def domain_error(request: Request, exc: PdfDriveError):
        headers = None
        if isinstance(exc, Unauthorized):
            headers = {"WWW-Authenticate": 'Bearer realm="pdf-drive"'}
        return _error_response(request, exc.status_code, exc.code, exc.detail, headers)

    @app.exception_handler(RequestValidationError)
    async def validation_error(request: Request, exc: RequestValidationError):
        first = exc.errors()[0] if exc.errors() else {}
        field = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
        message = first.get("msg", "Invalid request")
        detail = f"{field}: {message}" if field else message
        return _error_response(request, 400, "invalid_input", detail)

    @app.exception_handler(StoreError)
    async def store_error(request: Request, exc: StoreError):
        logger.error("store_error", status=exc.status_code, code=exc.code)
        return _error_response(
            request, 503, "store_unavailable", "Document store unavailable",
        )

    @app.exception_handler(DriveError)
    async def drive_error(request: Request, exc: DriveError):
        logger.error("drive_error", status=exc.status_code)
        return _error_response(
            request, 502, "file_storage_error", "Cloud drive request failed",
        )


# ── Factory ─────────────────────────────────────────────────────────


def create_app(
    settings: PdfDriveSettings | None = None,
    *,
    document_store: DocumentStore | None = None,
    comment_store: CommentStore | None = None,
    user_directory: UserDirectory | None = None,
    file_storage: FileStorage | None = None,
    audit_emitter: ShareAuditEmitter | None = None,
    identity_provider: IdentityProvider | None = None,
) -> FastAPI:
    """Create a configured PDF Drive FastAPI application.

    Args:
        settings: Application settings. Defaults to local-dev settings.
        document_store..identity_provider: Overrides. Anything not given
            is built from settings: InMemory stores in local mode,
            Supabase and Google Drive otherwise.

    Returns:
        Configured FastAPI application ready for uvicorn.run().

    Raises:
        ValueError: If settings validation fails.
    """
    if settings is None:
        settings = PdfDriveSettings()

    errors = settings.validate()
    if errors:
        raise ValueError(
            "PDF Drive settings validation failed:\n"
            + "\n".join(f"  - {e}" for e in errors)
        )

    configure_logging(settings.log_level, settings.log_format)

    injected = (document_store, comment_store, user_directory, file_storage)
    if all(part is not None for part in injected):
        defaults = injected
    elif settings.is_local:
        defaults = _build_local_stores()
    else:
        defaults = _build_remote_stores(settings)

    # Inject document_store and comment_store together; a default document
    # store cascades deletes only into its own default comment store.
    documents_store = document_store or defaults[0]
    comments_store = comment_store or defaults[1]
    directory = user_directory or defaults[2]
    files = file_storage or defaults[3]
    audit = audit_emitter or LoggingShareAuditEmitter()

    identities = identity_provider or IdentityProvider(
        create_token_verifier(
            settings.jwt_secret,
            jwks_url=settings.jwks_url,
            audience=settings.jwt_audience,
        ),
        directory,
    )

    deps = AppDependencies(
        document_store=documents_store,
        comment_store=comments_store,
        user_directory=directory,
        file_storage=files,
        audit_emitter=audit,
        identity_provider=identities,
        documents=DocumentService(documents_store, files),
        sharing=SharingService(
            documents_store,
            identities,
            audit,
            public_base_url=settings.public_base_url,
        ),
        comments=CommentService(comments_store, documents_store, identities),
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("pdf_drive_startup", environment=settings.environment)
        yield
        logger.info("pdf_drive_shutdown")

    app = FastAPI(
        title="PDF Drive",
        description="PDF document sharing and collaboration API",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.state.deps = deps
    app.state.settings = settings

    # ── Middleware stack (applied in reverse order) ──────────────
    # Order of execution: Observability -> CORS -> route

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(ObservabilityMiddleware)

    _install_exception_handlers(app)

    # ── Routes ──────────────────────────────────────────────────

    @app.get("/health")
    async def health():
        return {"status": "ok", "environment": settings.environment}

    @app.get("/metrics", include_in_schema=False)
    async def metrics():
        body, content_type = metrics_text()
        return Response(content=body, media_type=content_type)

    app.include_router(create_document_router(deps.documents))
    app.include_router(create_sharing_router(deps.sharing))
    app.include_router(create_comment_router(deps.comments))

    return app


# For uvicorn, use --factory flag:
#   uvicorn pdf_drive.app.main:create_app --factory
