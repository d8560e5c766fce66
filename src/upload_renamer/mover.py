"""Filesystem operations used by the renamer."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import PurePath

from upload_renamer.errors import MoveFailedError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PathInfo:
    dir: str
    stem: str
    extension: str


@dataclass(frozen=True)
class MoveResult:
    source: str
    destination: str
    error: OSError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def exists(path: str) -> bool:
    return os.path.exists(path)


def is_dir(path: str) -> bool:
    return os.path.isdir(path)


def path_info(path: str) -> PathInfo:
    """Split a path into directory, stem and last extension.

    A bare file name reports ``"."`` as its directory.
    """
    pure = PurePath(path)
    directory = os.path.dirname(path) or "."
    suffix = pure.suffix
    return PathInfo(dir=directory, stem=pure.stem, extension=suffix[1:])


def delete_file(path: str) -> None:
    """Remove an existing file.

    Raises:
        MoveFailedError: If the OS refuses to remove it.
    """
    try:
        os.remove(path)
    except OSError as e:
        msg = f"既存ファイルを削除できません: {path}"
        raise MoveFailedError(msg, e) from e
    logger.debug("削除: %s", path)


def move_file(source: str, destination: str) -> MoveResult:
    """Rename ``source`` to ``destination`` in a single OS call.

    Files are never copied between devices and missing parent directories
    are not created; both show up as a failed result.

    Returns:
        MoveResult carrying the OSError when the rename did not happen.
    """
    try:
        os.rename(source, destination)
    except OSError as e:
        logger.debug("移動失敗: %s → %s: %s", source, destination, e)
        return MoveResult(source, destination, error=e)
    return MoveResult(source, destination)
