"""Request authentication dependencies.

Route handlers never read a "current user" from ambient state; they
declare the actor as a dependency and pass it explicitly into services.

  - ``get_actor``: requires ``Authorization: Bearer <token>``; 401 otherwise.
  - ``get_optional_actor``: returns None for anonymous requests, but still
    rejects a credential that is present and invalid.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from starlette.requests import Request

from ..errors import Unauthorized
from .token_verify import extract_bearer_token

if TYPE_CHECKING:
    from ..identity.directory import Identity


async def get_optional_actor(request: Request) -> Identity | None:
    """FastAPI dependency resolving the bearer credential, if one is sent."""
    token = extract_bearer_token(request)
    if token is None:
        return None
    identity_provider = request.app.state.deps.identity_provider
    return await identity_provider.resolve_from_credential(token)


async def get_actor(request: Request) -> Identity:
    """FastAPI dependency that returns the authenticated actor.

    Raises:
        Unauthorized: No bearer credential, or it does not resolve.
    """
    actor = await get_optional_actor(request)
    if actor is None:
        raise Unauthorized('Authentication required')
    return actor
