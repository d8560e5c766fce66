"""Exception types for upload-renamer."""

from __future__ import annotations


class UploadRenamerError(Exception):
    """Base error for the project."""


class InvalidArgumentError(UploadRenamerError, ValueError):
    """Bad option value, unusable upload value, or target collision."""


class MoveFailedError(UploadRenamerError, RuntimeError):
    """The file could not be relocated.

    The platform error is chained as ``__cause__`` and kept on ``cause``.
    """

    def __init__(self, message: str, cause: BaseException | None = None) -> None:
        super().__init__(message)
        self.cause = cause
