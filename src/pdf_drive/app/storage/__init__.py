"""Cloud drive file storage."""

from .drive import (
    DriveError,
    DriveNotFoundError,
    GoogleDriveStorage,
    InMemoryFileStorage,
)

__all__ = [
    'DriveError',
    'DriveNotFoundError',
    'GoogleDriveStorage',
    'InMemoryFileStorage',
]
