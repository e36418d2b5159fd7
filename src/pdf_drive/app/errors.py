"""Domain error taxonomy for document, sharing, and comment operations.

Every error carries a stable ``code`` and the HTTP status it maps to, so
route handlers never translate errors by hand. The app factory installs a
single exception handler for ``PdfDriveError``.

Infrastructure failures (store, drive) live in their own hierarchies
(``db.errors``, ``storage``) and are never subclasses of these.
"""

from __future__ import annotations


class PdfDriveError(Exception):
    """Base class for recoverable, caller-facing domain errors."""

    code = 'error'
    status_code = 400

    def __init__(self, detail: str = '') -> None:
        self.detail = detail or self.default_detail()
        super().__init__(f'{self.code}: {self.detail}')

    def default_detail(self) -> str:
        return self.code.replace('_', ' ').capitalize()


class NotFound(PdfDriveError):
    """Document, comment, or identity does not exist."""

    code = 'not_found'
    status_code = 404


class Forbidden(PdfDriveError):
    """An authorization predicate failed."""

    code = 'forbidden'
    status_code = 403


class AlreadyShared(PdfDriveError):
    """The grantee already holds a grant on the document."""

    code = 'already_shared'
    status_code = 409


class InvalidInput(PdfDriveError):
    """Missing or malformed request fields."""

    code = 'invalid_input'
    status_code = 400


class Unauthorized(PdfDriveError):
    """No credential, or the credential does not resolve to a user."""

    code = 'unauthorized'
    status_code = 401
