"""PDF Drive FastAPI application."""

from .main import create_app
from .settings import PdfDriveSettings

__all__ = ["create_app", "PdfDriveSettings"]
