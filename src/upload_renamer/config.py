"""Configuration module for upload-renamer."""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

TARGET_ENV = "UPLOAD_RENAMER_TARGET"


@dataclass
class RenameConfig:
    target: str | None = None
    use_upload_name: bool = False
    overwrite: bool = False
    randomize: bool = False


@dataclass
class LoggingConfig:
    level: str = "INFO"
    file: str = "./upload-renamer.log"


@dataclass
class Config:
    rename: RenameConfig = field(default_factory=RenameConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def _build_dataclass(cls: type, data: dict[str, Any]) -> Any:
    """Build a dataclass instance from a dict, ignoring unknown keys."""
    valid_fields = {f.name for f in cls.__dataclass_fields__.values()}
    filtered = {k: v for k, v in data.items() if k in valid_fields}
    return cls(**filtered)


def load_config(path: Path) -> Config:
    """Load configuration from a TOML file."""
    if not path.exists():
        raise FileNotFoundError(f"設定ファイルが見つかりません: {path}")

    try:
        with open(path, "rb") as f:
            raw = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        msg = f"設定ファイルの解析に失敗しました: {path}: {e}"
        raise ValueError(msg) from e

    rename = _build_dataclass(RenameConfig, raw.get("rename", {}))
    logging_config = _build_dataclass(LoggingConfig, raw.get("logging", {}))

    return Config(rename=rename, logging=logging_config)


def resolve_config(
    config: Config,
    *,
    target: str | None = None,
    env_file: Path | None = None,
) -> Config:
    """Apply overrides for the rename target.

    Priority: argument > .env file > OS environment variable > config file.
    """
    from dotenv import dotenv_values

    if target is not None:
        config.rename.target = target
        return config

    if env_file is not None and env_file.exists():
        env_target = dotenv_values(env_file).get(TARGET_ENV)
        if env_target:
            config.rename.target = env_target
            return config

    env_target = os.environ.get(TARGET_ENV)
    if env_target:
        config.rename.target = env_target

    return config
