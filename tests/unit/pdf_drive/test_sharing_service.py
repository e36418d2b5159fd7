"""Tests for SharingService orchestration.

Validates:
  - Grants: ownership gate, live email match, duplicates, self-grant.
  - Public links: URL shape, replacement, anonymous resolution.
  - Granted access and the shared-with-me listing.
  - Share candidates exclude the caller.
  - Audit events never carry plaintext tokens.
"""

from __future__ import annotations

from urllib.parse import parse_qs, urlparse

import pytest

from pdf_drive.app.errors import AlreadyShared, Forbidden, InvalidInput, NotFound
from pdf_drive.app.sharing import access
from pdf_drive.app.sharing.audit import (
    SHARE_ACCESSED,
    SHARE_DENIED,
    SHARE_GRANTED,
    SHARE_PUBLIC_LINK,
)


def _token_from(url: str) -> str:
    return parse_qs(urlparse(url).query)['token'][0]


# =====================================================================
# Direct grants
# =====================================================================


class TestGrantAccess:

    @pytest.mark.asyncio
    async def test_owner_grants_access(self, sharing, document_store, make_document, alice, bob):
        doc = await make_document(alice)

        grantee = await sharing.grant_access_by_identity(alice, doc.id, bob.id, bob.email)

        assert grantee == bob
        stored = await document_store.get(doc.id)
        assert access.can_view(bob, stored)
        assert stored.grants[0].grantee_email == 'u2@x.com'

    @pytest.mark.asyncio
    async def test_email_match_is_case_insensitive(self, sharing, make_document, alice, bob):
        doc = await make_document(alice)
        grantee = await sharing.grant_access_by_identity(alice, doc.id, bob.id, ' U2@X.com ')
        assert grantee.id == bob.id

    @pytest.mark.asyncio
    async def test_unknown_document(self, sharing, alice, bob):
        with pytest.raises(NotFound):
            await sharing.grant_access_by_identity(alice, 'missing', bob.id, bob.email)

    @pytest.mark.asyncio
    async def test_non_owner_is_forbidden(self, sharing, make_document, alice, bob, carol):
        doc = await make_document(alice)
        with pytest.raises(Forbidden):
            await sharing.grant_access_by_identity(bob, doc.id, carol.id, carol.email)

    @pytest.mark.asyncio
    async def test_grantee_cannot_reshare(self, sharing, make_document, alice, bob, carol):
        doc = await make_document(alice)
        await sharing.grant_access_by_identity(alice, doc.id, bob.id, bob.email)

        with pytest.raises(Forbidden):
            await sharing.grant_access_by_identity(bob, doc.id, carol.id, carol.email)

    @pytest.mark.asyncio
    async def test_stale_email_is_rejected_without_writing(
        self, sharing, document_store, make_document, alice, bob,
    ):
        doc = await make_document(alice)
        with pytest.raises(NotFound):
            await sharing.grant_access_by_identity(alice, doc.id, bob.id, 'old@x.com')
        assert (await document_store.get(doc.id)).grants == []

    @pytest.mark.asyncio
    async def test_unknown_grantee(self, sharing, make_document, alice):
        doc = await make_document(alice)
        with pytest.raises(NotFound):
            await sharing.grant_access_by_identity(alice, doc.id, 'ghost', 'ghost@x.com')

    @pytest.mark.asyncio
    async def test_missing_fields(self, sharing, make_document, alice):
        doc = await make_document(alice)
        with pytest.raises(InvalidInput):
            await sharing.grant_access_by_identity(alice, doc.id, '', '')

    @pytest.mark.asyncio
    async def test_owner_cannot_grant_self(self, sharing, make_document, alice):
        doc = await make_document(alice)
        with pytest.raises(InvalidInput):
            await sharing.grant_access_by_identity(alice, doc.id, alice.id, alice.email)

    @pytest.mark.asyncio
    async def test_second_grant_fails_and_keeps_original(
        self, sharing, document_store, make_document, alice, bob,
    ):
        doc = await make_document(alice)
        await sharing.grant_access_by_identity(alice, doc.id, bob.id, bob.email)
        original = (await document_store.get(doc.id)).grants[0]

        with pytest.raises(AlreadyShared):
            await sharing.grant_access_by_identity(alice, doc.id, bob.id, bob.email)

        grants = (await document_store.get(doc.id)).grants
        assert len(grants) == 1
        assert grants[0].access_token == original.access_token
        assert grants[0].granted_at == original.granted_at

    @pytest.mark.asyncio
    async def test_document_deleted_during_grant_stays_deleted(
        self, sharing, documents, identities, document_store, make_document,
        monkeypatch, alice, bob,
    ):
        doc = await make_document(alice)
        lookup = identities.find_by_id

        async def delete_then_lookup(user_id):
            await documents.delete(alice, doc.id)
            return await lookup(user_id)

        monkeypatch.setattr(identities, 'find_by_id', delete_then_lookup)

        with pytest.raises(NotFound):
            await sharing.grant_access_by_identity(alice, doc.id, bob.id, bob.email)

        assert await document_store.get(doc.id) is None

    @pytest.mark.asyncio
    async def test_grant_is_audited_with_redacted_token(
        self, sharing, audit, document_store, make_document, alice, bob,
    ):
        doc = await make_document(alice)
        await sharing.grant_access_by_identity(alice, doc.id, bob.id, bob.email)

        token = (await document_store.get(doc.id)).grants[0].access_token
        events = audit.find(SHARE_GRANTED, doc.id)
        assert len(events) == 1
        assert events[0].grantee_id == bob.id
        assert token not in repr(events[0].to_dict())
        assert events[0].token_prefix == f'{token[:8]}...'


# =====================================================================
# Public links
# =====================================================================


class TestPublicLink:

    @pytest.mark.asyncio
    async def test_link_embeds_document_and_token(self, sharing, make_document, alice):
        doc = await make_document(alice)

        url = await sharing.generate_public_link(alice, doc.id)

        parsed = urlparse(url)
        assert f'{parsed.scheme}://{parsed.netloc}' == 'https://pdfs.example.com'
        assert parsed.path == f'/shared/{doc.id}'
        view = await sharing.resolve_public_access(doc.id, _token_from(url))
        assert view.document_id == doc.id
        assert view.title == doc.title

    @pytest.mark.asyncio
    async def test_regenerating_invalidates_previous_link(self, sharing, make_document, alice):
        doc = await make_document(alice)
        old = _token_from(await sharing.generate_public_link(alice, doc.id))
        new = _token_from(await sharing.generate_public_link(alice, doc.id))

        assert old != new
        await sharing.resolve_public_access(doc.id, new)
        with pytest.raises(Forbidden):
            await sharing.resolve_public_access(doc.id, old)

    @pytest.mark.asyncio
    async def test_document_without_link_rejects_any_token(self, sharing, make_document, alice):
        doc = await make_document(alice)
        with pytest.raises(Forbidden):
            await sharing.resolve_public_access(doc.id, '')
        with pytest.raises(Forbidden):
            await sharing.resolve_public_access(doc.id, None)

    @pytest.mark.asyncio
    async def test_unknown_document(self, sharing):
        with pytest.raises(NotFound):
            await sharing.resolve_public_access('missing', 'token')

    @pytest.mark.asyncio
    async def test_non_owner_cannot_generate(self, sharing, make_document, alice, bob):
        doc = await make_document(alice)
        with pytest.raises(Forbidden):
            await sharing.generate_public_link(bob, doc.id)

    @pytest.mark.asyncio
    async def test_events_recorded(self, sharing, audit, make_document, alice):
        doc = await make_document(alice)
        token = _token_from(await sharing.generate_public_link(alice, doc.id))
        await sharing.resolve_public_access(doc.id, token)
        with pytest.raises(Forbidden):
            await sharing.resolve_public_access(doc.id, 'wrong-token-value')

        assert len(audit.find(SHARE_PUBLIC_LINK, doc.id)) == 1
        assert len(audit.find(SHARE_ACCESSED, doc.id)) == 1
        denied = audit.find(SHARE_DENIED, doc.id)
        assert denied[0].detail == 'invalid_public_token'
        for event in audit.events:
            assert token not in repr(event.to_dict())


# =====================================================================
# Granted access and listings
# =====================================================================


class TestGrantedAccess:

    @pytest.mark.asyncio
    async def test_grantee_resolves_view(self, sharing, make_document, alice, bob):
        doc = await make_document(alice)
        await sharing.grant_access_by_identity(alice, doc.id, bob.id, bob.email)

        view = await sharing.resolve_granted_access(bob, doc.id)
        assert view.document_id == doc.id

    @pytest.mark.asyncio
    async def test_stranger_is_forbidden(self, sharing, make_document, alice, carol):
        doc = await make_document(alice)
        with pytest.raises(Forbidden):
            await sharing.resolve_granted_access(carol, doc.id)

    @pytest.mark.asyncio
    async def test_public_link_does_not_grant_identity_access(
        self, sharing, make_document, alice, carol,
    ):
        doc = await make_document(alice)
        await sharing.generate_public_link(alice, doc.id)
        with pytest.raises(Forbidden):
            await sharing.resolve_granted_access(carol, doc.id)


class TestListings:

    @pytest.mark.asyncio
    async def test_shared_with_me_includes_owner_and_grant_metadata(
        self, sharing, document_store, make_document, alice, bob,
    ):
        first = await make_document(alice, 'First.pdf')
        second = await make_document(alice, 'Second.pdf')
        await make_document(alice, 'Private.pdf')
        await sharing.grant_access_by_identity(alice, first.id, bob.id, bob.email)
        await sharing.grant_access_by_identity(alice, second.id, bob.id, bob.email)

        shared = await sharing.list_shared_with_me(bob)

        assert [s.view.title for s in shared] == ['Second.pdf', 'First.pdf']
        item = shared[0].to_dict()
        assert item['owner'] == {'id': 'u1', 'name': 'Alice', 'email': 'u1@x.com'}
        grant = (await document_store.get(second.id)).grants[0]
        assert item['access_token'] == grant.access_token
        assert item['shared_at'] == grant.granted_at.isoformat()

    @pytest.mark.asyncio
    async def test_shared_with_me_empty_for_owner(self, sharing, make_document, alice, bob):
        doc = await make_document(alice)
        await sharing.grant_access_by_identity(alice, doc.id, bob.id, bob.email)
        assert await sharing.list_shared_with_me(alice) == []

    @pytest.mark.asyncio
    async def test_share_candidates_exclude_caller(self, sharing, alice):
        candidates = await sharing.list_share_candidates(alice)
        assert [c.id for c in candidates] == ['u2', 'u3']
