"""Tests for the pure authorization predicates."""

from __future__ import annotations

from pdf_drive.app.documents.model import Comment, Document, Grant, hash_token
from pdf_drive.app.identity.directory import Identity
from pdf_drive.app.sharing import access

OWNER = Identity(id='u1', name='Owner', email='u1@x.com')
GRANTEE = Identity(id='u2', name='Grantee', email='u2@x.com')
STRANGER = Identity(id='u3', name='Stranger', email='u3@x.com')


def _shared_doc() -> Document:
    return Document(
        id='p1',
        title='Report.pdf',
        file_id='drive-1',
        file_url='https://drive.example.com/1',
        owner_id=OWNER.id,
        grants=[Grant(GRANTEE.id, GRANTEE.email, 'tok')],
        public_token_hash=hash_token('public'),
    )


class TestViewing:

    def test_owner_can_view(self):
        assert access.can_view(OWNER, _shared_doc())

    def test_grantee_can_view(self):
        assert access.can_view(GRANTEE, _shared_doc())

    def test_public_token_alone_never_makes_actor_a_viewer(self):
        assert not access.can_view(STRANGER, _shared_doc())

    def test_owner_without_grant_is_not_a_grantee(self):
        assert access.is_owner(OWNER, _shared_doc())
        assert not access.has_direct_grant(OWNER, _shared_doc())


class TestManagement:

    def test_only_owner_manages_sharing(self):
        doc = _shared_doc()
        assert access.can_manage_sharing(OWNER, doc)
        assert not access.can_manage_sharing(GRANTEE, doc)
        assert not access.can_manage_sharing(STRANGER, doc)


class TestComments:

    def test_owner_and_grantee_can_comment(self):
        doc = _shared_doc()
        assert access.can_comment(OWNER, doc)
        assert access.can_comment(GRANTEE, doc)
        assert not access.can_comment(STRANGER, doc)

    def test_only_author_modifies_comment(self):
        comment = Comment(id='c1', document_id='p1', author_id=GRANTEE.id, text='hi')
        assert access.can_modify_comment(GRANTEE, comment)
        assert not access.can_modify_comment(OWNER, comment)
