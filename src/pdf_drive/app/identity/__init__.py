"""User identities: directory lookup and credential resolution."""

from .directory import Identity, InMemoryUserDirectory
from .provider import IdentityProvider

__all__ = [
    'Identity',
    'IdentityProvider',
    'InMemoryUserDirectory',
]
