from __future__ import annotations

from pathlib import Path


class StoreError(Exception):
    pass


class DirectoryResolutionError(StoreError):
    pass


class InvalidFilenameError(StoreError, ValueError):
    pass


class StoreIOError(StoreError):
    """Filesystem failure while opening, reading or writing a store file."""

    def __init__(self, message: str, path: Path | None = None):
        super().__init__(message)
        self.path = path


class EmptyFileError(StoreError):
    pass


class DecodeError(StoreError):
    pass


class EncodeError(StoreError):
    pass
