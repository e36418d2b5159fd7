"""Shared fixtures for pdf_drive unit tests."""

from __future__ import annotations

import pytest

from pdf_drive.app.comments.service import CommentService
from pdf_drive.app.documents.service import DocumentService
from pdf_drive.app.identity.directory import Identity, InMemoryUserDirectory
from pdf_drive.app.identity.provider import IdentityProvider
from pdf_drive.app.inmemory import InMemoryCommentStore, InMemoryDocumentStore
from pdf_drive.app.security.token_verify import create_token_verifier
from pdf_drive.app.sharing.audit import InMemoryShareAuditEmitter
from pdf_drive.app.sharing.service import SharingService
from pdf_drive.app.storage.drive import InMemoryFileStorage

PUBLIC_BASE_URL = 'https://pdfs.example.com'

ALICE = Identity(id='u1', name='Alice', email='u1@x.com')
BOB = Identity(id='u2', name='Bob', email='u2@x.com')
CAROL = Identity(id='u3', name='carol', email='u3@x.com')


@pytest.fixture
def users():
    return InMemoryUserDirectory([ALICE, BOB, CAROL])


@pytest.fixture
def identities(users):
    return IdentityProvider(create_token_verifier(), users)


@pytest.fixture
def comment_store():
    return InMemoryCommentStore()


@pytest.fixture
def document_store(comment_store):
    return InMemoryDocumentStore(comment_store)


@pytest.fixture
def files():
    return InMemoryFileStorage()


@pytest.fixture
def audit():
    return InMemoryShareAuditEmitter()


@pytest.fixture
def documents(document_store, files):
    return DocumentService(document_store, files)


@pytest.fixture
def sharing(document_store, identities, audit):
    return SharingService(
        document_store, identities, audit, public_base_url=PUBLIC_BASE_URL,
    )


@pytest.fixture
def comments(comment_store, document_store, identities):
    return CommentService(comment_store, document_store, identities)


@pytest.fixture
def make_document(documents):
    async def _make(owner: Identity = ALICE, title: str = 'Report.pdf'):
        return await documents.create(
            owner,
            title=title,
            file_id=f'drive-{title}',
            file_url=f'https://drive.example.com/{title}',
        )
    return _make


@pytest.fixture
def alice():
    return ALICE


@pytest.fixture
def bob():
    return BOB


@pytest.fixture
def carol():
    return CAROL
