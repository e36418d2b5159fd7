"""Owner-side document management.

Registers PDFs that were uploaded to the cloud drive, lists the caller's
own PDFs, and lets the owner rename or delete them. Rename and delete hit
the drive first; if the drive call fails the store is left untouched.
Deleting a document removes its comments as well.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from pdf_drive.observability.logging import get_logger

from ..errors import Forbidden, InvalidInput, NotFound
from ..identity.directory import Identity
from ..sharing import access
from .model import Document, new_id, utcnow

if TYPE_CHECKING:
    from ..protocols import DocumentStore, FileStorage

logger = get_logger(__name__)

MAX_TITLE_LENGTH = 255


def _clean_title(title: str | None) -> str:
    cleaned = (title or '').strip()
    if not cleaned:
        raise InvalidInput('Title is required')
    if len(cleaned) > MAX_TITLE_LENGTH:
        raise InvalidInput(f'Title must be at most {MAX_TITLE_LENGTH} characters')
    return cleaned


class DocumentService:
    """CRUD over the caller's own documents."""

    def __init__(self, store: DocumentStore, files: FileStorage) -> None:
        self._store = store
        self._files = files

    async def _require_owner(self, actor: Identity, document_id: str) -> Document:
        document = await self._store.get(document_id)
        if document is None:
            raise NotFound('PDF not found')
        if not access.can_manage_sharing(actor, document):
            raise Forbidden('Unauthorized')
        return document

    async def create(
        self,
        actor: Identity,
        *,
        title: str,
        file_id: str,
        file_url: str,
    ) -> Document:
        if not file_id or not file_url:
            raise InvalidInput('file_id and file_url are required')
        now = utcnow()
        document = Document(
            id=new_id(),
            title=_clean_title(title),
            file_id=file_id,
            file_url=file_url,
            owner_id=actor.id,
            created_at=now,
            updated_at=now,
        )
        document = await self._store.save(document)
        logger.info('document_created', document_id=document.id, owner_id=actor.id)
        return document

    async def list_mine(self, actor: Identity) -> list[Document]:
        documents = await self._store.list_by_owner(actor.id)
        return sorted(documents, key=lambda d: d.created_at, reverse=True)

    async def get_details(self, actor: Identity, document_id: str) -> Document:
        return await self._require_owner(actor, document_id)

    async def rename(self, actor: Identity, document_id: str, title: str) -> Document:
        document = await self._require_owner(actor, document_id)
        new_title = _clean_title(title)
        await self._files.rename(document.file_id, new_title)
        document.rename(new_title)
        document = await self._store.save(document)
        logger.info('document_renamed', document_id=document.id)
        return document

    async def delete(self, actor: Identity, document_id: str) -> None:
        document = await self._require_owner(actor, document_id)
        await self._files.delete(document.file_id)
        await self._store.delete(document.id)
        logger.info('document_deleted', document_id=document.id, owner_id=actor.id)
