"""Owner document endpoints.

  POST   /api/pdfs            → 201 register an uploaded PDF
  GET    /api/pdfs/my-pdfs    → 200 { items, count }
  GET    /api/pdfs/{id}       → 200 owner view (owner only)
  PUT    /api/pdfs/{id}       → 200 renamed owner view (owner only)
  DELETE /api/pdfs/{id}       → 200 { deleted: true } (owner only)
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from ..identity.directory import Identity
from ..security.auth_guard import get_actor
from .service import MAX_TITLE_LENGTH, DocumentService


class CreateDocumentRequest(BaseModel):
    title: str = Field(..., min_length=1, max_length=MAX_TITLE_LENGTH)
    file_id: str = Field(..., min_length=1, description='Drive file id')
    file_url: str = Field(..., min_length=1, description='Drive view link')


class RenameDocumentRequest(BaseModel):
    title: str = Field(..., min_length=1, max_length=MAX_TITLE_LENGTH)


def create_document_router(documents: DocumentService) -> APIRouter:
    router = APIRouter(prefix='/api/pdfs', tags=['pdfs'])

    @router.post('', status_code=201)
    async def create_document(
        body: CreateDocumentRequest,
        actor: Identity = Depends(get_actor),
    ):
        document = await documents.create(
            actor, title=body.title, file_id=body.file_id, file_url=body.file_url,
        )
        return document.owner_view()

    @router.get('/my-pdfs')
    async def my_documents(actor: Identity = Depends(get_actor)):
        items = [d.owner_view() for d in await documents.list_mine(actor)]
        return {'items': items, 'count': len(items)}

    @router.get('/{document_id}')
    async def document_details(
        document_id: str,
        actor: Identity = Depends(get_actor),
    ):
        document = await documents.get_details(actor, document_id)
        return document.owner_view()

    @router.put('/{document_id}')
    async def rename_document(
        document_id: str,
        body: RenameDocumentRequest,
        actor: Identity = Depends(get_actor),
    ):
        document = await documents.rename(actor, document_id, body.title)
        return document.owner_view()

    @router.delete('/{document_id}')
    async def delete_document(
        document_id: str,
        actor: Identity = Depends(get_actor),
    ):
        await documents.delete(actor, document_id)
        return {'deleted': True, 'document_id': document_id}

    return router
