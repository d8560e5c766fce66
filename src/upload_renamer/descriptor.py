"""Upload value shapes accepted and returned by the renamer."""

from __future__ import annotations

import dataclasses
import enum
import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Union

from upload_renamer.errors import InvalidArgumentError


@dataclass(frozen=True)
class UploadDescriptor:
    """A received file: where it sits now and what the client called it."""

    temporary_path: str
    original_name: str
    content_type: str | None = None
    size: int | None = None
    extra: Mapping[str, Any] = field(default_factory=dict)


UploadValue = Union[str, os.PathLike, UploadDescriptor, Mapping[str, Any]]


class UploadKind(enum.Enum):
    PATH = "path"
    DESCRIPTOR = "descriptor"
    MAPPING = "mapping"


@dataclass(frozen=True)
class NormalizedUpload:
    kind: UploadKind
    source: str
    upload: UploadDescriptor


def normalize(value: UploadValue) -> NormalizedUpload:
    """Split an incoming value into its source path and upload data.

    Mappings follow the form-upload convention of ``tmp_name`` / ``name``
    keys. A bare path doubles as its own original name.

    Raises:
        InvalidArgumentError: If the value has none of the supported shapes.
    """
    if isinstance(value, UploadDescriptor):
        return NormalizedUpload(UploadKind.DESCRIPTOR, value.temporary_path, value)

    if isinstance(value, Mapping):
        tmp_name = value.get("tmp_name")
        if not isinstance(tmp_name, (str, os.PathLike)):
            msg = "アップロードデータに tmp_name がありません"
            raise InvalidArgumentError(msg)
        source = os.fspath(tmp_name)
        name = value.get("name", source)
        if name is None:
            name = ""
        elif not isinstance(name, (str, os.PathLike)):
            msg = f"アップロード名は文字列である必要があります: {name!r}"
            raise InvalidArgumentError(msg)
        upload = UploadDescriptor(
            temporary_path=source,
            original_name=os.fspath(name),
            content_type=value.get("type"),
            size=value.get("size"),
        )
        return NormalizedUpload(UploadKind.MAPPING, source, upload)

    if isinstance(value, (str, os.PathLike)):
        source = os.fspath(value)
        if not isinstance(source, str):
            msg = f"パスは文字列である必要があります: {source!r}"
            raise InvalidArgumentError(msg)
        upload = UploadDescriptor(temporary_path=source, original_name=source)
        return NormalizedUpload(UploadKind.PATH, source, upload)

    msg = f"未対応のアップロード値です: {type(value).__name__}"
    raise InvalidArgumentError(msg)


def rebuild(normalized: NormalizedUpload, value: UploadValue, target: str) -> Any:
    """Return ``value`` in its original shape, relocated to ``target``."""
    if normalized.kind is UploadKind.DESCRIPTOR:
        return dataclasses.replace(normalized.upload, temporary_path=target)
    if normalized.kind is UploadKind.MAPPING:
        result = dict(value)  # type: ignore[arg-type]
        result["tmp_name"] = target
        return result
    return target
