"""Relocation of received uploads to their final destination."""

from __future__ import annotations

import dataclasses
import itertools
import logging
import os
import secrets
import time
from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from upload_renamer import mover
from upload_renamer.descriptor import UploadDescriptor, UploadValue, normalize, rebuild
from upload_renamer.errors import InvalidArgumentError, MoveFailedError

if TYPE_CHECKING:
    from upload_renamer.config import Config

logger = logging.getLogger(__name__)

WILDCARD_TARGET = "*"

_counter = itertools.count()


@dataclass(frozen=True)
class RenameOptions:
    target: str | None = None
    use_upload_name: bool = False
    overwrite: bool = False
    randomize: bool = False

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> RenameOptions:
        """Build options from a dict, rejecting unknown keys."""
        valid_fields = {f.name for f in dataclasses.fields(cls)}
        unknown = sorted(k for k in data if k not in valid_fields)
        if unknown:
            msg = f"不明なオプションです: {', '.join(unknown)}"
            raise InvalidArgumentError(msg)

        options = cls()
        if data.get("target") is not None:
            options = dataclasses.replace(options, target=_check_target(data["target"]))
        return dataclasses.replace(
            options,
            use_upload_name=bool(data.get("use_upload_name", False)),
            overwrite=bool(data.get("overwrite", False)),
            randomize=bool(data.get("randomize", False)),
        )


def _check_target(target: Any) -> str:
    if isinstance(target, os.PathLike):
        target = os.fspath(target)
    if not isinstance(target, str):
        msg = "ターゲットは文字列である必要があります"
        raise InvalidArgumentError(msg)
    if not target or "\0" in target:
        msg = f"ターゲットのパスが不正です: {target!r}"
        raise InvalidArgumentError(msg)
    return target


def unique_suffix() -> str:
    """Return a token that never repeats within this process.

    Microsecond clock, a process-wide counter and a few random bytes,
    hex-encoded and prefixed with an underscore.
    """
    micros = time.time_ns() // 1000
    return f"_{micros:x}{next(_counter):x}{secrets.token_hex(3)}"


def apply_random_to_filename(filename: str) -> str:
    """Insert a unique token between the stem and the extension."""
    info = mover.path_info(filename)
    randomized = info.stem + unique_suffix()
    if info.extension:
        randomized += "." + info.extension
    return randomized


def _basename(path: str) -> str:
    return os.path.basename(path)


def _strip_trailing_separators(path: str) -> str:
    stripped = path.rstrip("/\\")
    return stripped or path[:1]


def _client_basename(name: str) -> str:
    # クライアント由来の名前は / と \ の両方で区切る
    return name.replace("\\", "/").rsplit("/", 1)[-1]


class UploadRenamer:
    """Moves each received file to its configured destination once.

    Results are remembered per source path, so filtering the same upload
    again returns the earlier result without touching the filesystem.
    """

    def __init__(
        self, target_or_options: str | os.PathLike | RenameOptions | Mapping | None = None
    ) -> None:
        self._options = RenameOptions()
        self._already_filtered: dict[str, Any] = {}

        if isinstance(target_or_options, RenameOptions):
            self._options = target_or_options
        elif isinstance(target_or_options, Mapping):
            self._options = RenameOptions.from_mapping(target_or_options)
        elif target_or_options is not None:
            self.set_target(target_or_options)

    @classmethod
    def from_config(cls, config: Config) -> UploadRenamer:
        rename = config.rename
        options = RenameOptions(
            target=_check_target(rename.target) if rename.target else None,
            use_upload_name=bool(rename.use_upload_name),
            overwrite=bool(rename.overwrite),
            randomize=bool(rename.randomize),
        )
        return cls(options)

    # -- options ---------------------------------------------------------

    @property
    def options(self) -> RenameOptions:
        return self._options

    @property
    def target(self) -> str | None:
        return self._options.target

    @property
    def use_upload_name(self) -> bool:
        return self._options.use_upload_name

    @property
    def overwrite(self) -> bool:
        return self._options.overwrite

    @property
    def randomize(self) -> bool:
        return self._options.randomize

    @property
    def memo(self) -> Mapping[str, Any]:
        return MappingProxyType(self._already_filtered)

    def set_target(self, target: str | os.PathLike) -> UploadRenamer:
        """Set the target file path or directory.

        Raises:
            InvalidArgumentError: If target is not a usable path string.
        """
        self._options = dataclasses.replace(self._options, target=_check_target(target))
        return self

    def set_use_upload_name(self, flag: bool = True) -> UploadRenamer:
        self._options = dataclasses.replace(self._options, use_upload_name=bool(flag))
        return self

    def set_overwrite(self, flag: bool = True) -> UploadRenamer:
        self._options = dataclasses.replace(self._options, overwrite=bool(flag))
        return self

    def set_randomize(self, flag: bool = True) -> UploadRenamer:
        self._options = dataclasses.replace(self._options, randomize=bool(flag))
        return self

    # -- filtering -------------------------------------------------------

    def filter(self, value: UploadValue) -> Any:
        """Move the file described by ``value`` to its final target.

        Args:
            value: A path, an UploadDescriptor, or a mapping with
                ``tmp_name`` / ``name`` keys.

        Returns:
            The same shape as ``value`` pointing at the new location, or
            ``value`` itself when the source is missing or already in place.

        Raises:
            InvalidArgumentError: If the target exists and overwrite is off.
            MoveFailedError: If the OS rename fails.
        """
        normalized = normalize(value)
        source = normalized.source

        if source in self._already_filtered:
            logger.debug("処理済み: %s", source)
            return self._already_filtered[source]

        if not mover.exists(source):
            logger.debug("移動元なし: %s", source)
            return value

        target_file = self.final_target(normalized.upload)
        if os.path.normpath(source) == os.path.normpath(target_file):
            logger.debug("移動不要: %s", source)
            return value

        self._check_file_exists(target_file)
        self._move_uploaded_file(source, target_file)

        result = rebuild(normalized, value, target_file)
        self._already_filtered[source] = result
        return result

    __call__ = filter

    def final_target(self, upload: UploadDescriptor) -> str:
        """Compute the destination path for ``upload`` without moving it."""
        source = upload.temporary_path
        target = self._options.target
        if target is None or target == WILDCARD_TARGET:
            target = source

        target_is_dir = mover.is_dir(target)
        if target_is_dir:
            target_dir = target
            if not target.endswith(("/", "\\")):
                target_dir += os.sep
        else:
            target = _strip_trailing_separators(target)
            target_dir = mover.path_info(target).dir + os.sep

        if self._options.use_upload_name:
            target_file = _client_basename(upload.original_name)
            if not target_file:
                msg = f"アップロード名が空です: {upload.original_name!r}"
                raise InvalidArgumentError(msg)
        elif not target_is_dir:
            target_file = _basename(target)
        else:
            target_file = _basename(source)

        if self._options.randomize:
            target_file = apply_random_to_filename(target_file)

        return target_dir + target_file

    def _check_file_exists(self, target_file: str) -> None:
        if not mover.exists(target_file):
            return
        if not self._options.overwrite:
            msg = f"ファイル '{target_file}' は既に存在するためリネームできません"
            raise InvalidArgumentError(msg)
        logger.warning("上書き: %s", target_file)
        mover.delete_file(target_file)

    def _move_uploaded_file(self, source: str, target_file: str) -> None:
        result = mover.move_file(source, target_file)
        if not result.ok:
            msg = f"ファイル '{source}' をリネームできませんでした"
            raise MoveFailedError(msg, result.error) from result.error
        logger.info("移動: %s → %s", source, target_file)
