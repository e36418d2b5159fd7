"""Resolve bearer credentials to known identities.

``IdentityProvider`` is the only way route handlers obtain an actor: the
token is verified first, then its ``sub`` claim must name a user in the
directory. Either failure surfaces as ``Unauthorized``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..errors import Unauthorized
from ..security.token_verify import TokenVerificationError, TokenVerifier
from .directory import Identity

if TYPE_CHECKING:
    from ..protocols import UserDirectory


class IdentityProvider:
    """Token verifier plus user directory."""

    def __init__(self, verifier: TokenVerifier, directory: UserDirectory) -> None:
        self._verifier = verifier
        self._directory = directory

    async def resolve_from_credential(self, token: str) -> Identity:
        """Verify ``token`` and return the identity it belongs to.

        Raises:
            Unauthorized: Invalid or expired token, or unknown user.
        """
        try:
            claims = self._verifier.verify(token)
        except TokenVerificationError as exc:
            raise Unauthorized(exc.detail or exc.code) from exc

        identity = await self._directory.get(claims.user_id)
        if identity is None:
            raise Unauthorized('User not found')
        return identity

    async def find_by_id(self, user_id: str) -> Identity | None:
        return await self._directory.get(user_id)

    async def list_except(self, user_id: str) -> list[Identity]:
        """All identities other than ``user_id``, sorted by name then email."""
        others = [i for i in await self._directory.list_all() if i.id != user_id]
        return sorted(others, key=lambda i: (i.name.lower(), i.email))
