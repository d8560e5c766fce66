"""Tests for config module."""

import textwrap
from pathlib import Path

import pytest


@pytest.fixture()
def config_toml(tmp_path: Path) -> Path:
    """Create a minimal valid TOML config file."""
    config_file = tmp_path / "config.toml"
    config_file.write_text(
        textwrap.dedent("""\
            [rename]
            target = "/srv/uploads"
            use_upload_name = true
            overwrite = true
            randomize = false

            [logging]
            level = "DEBUG"
            file = "./test.log"
        """)
    )
    return config_file


@pytest.fixture(autouse=True)
def _clear_target_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("UPLOAD_RENAMER_TARGET", raising=False)


class TestLoadConfig:
    """Tests for load_config function."""

    def test_load_valid_config(self, config_toml: Path) -> None:
        from upload_renamer.config import load_config

        config = load_config(config_toml)

        assert config.rename.target == "/srv/uploads"
        assert config.rename.use_upload_name is True
        assert config.rename.overwrite is True
        assert config.rename.randomize is False
        assert config.logging.level == "DEBUG"
        assert config.logging.file == "./test.log"

    def test_default_values_applied(self, tmp_path: Path) -> None:
        from upload_renamer.config import load_config

        config_file = tmp_path / "empty.toml"
        config_file.write_text("")

        config = load_config(config_file)

        assert config.rename.target is None
        assert config.rename.use_upload_name is False
        assert config.rename.overwrite is False
        assert config.rename.randomize is False
        assert config.logging.level == "INFO"
        assert config.logging.file == "./upload-renamer.log"

    def test_unknown_keys_ignored(self, tmp_path: Path) -> None:
        from upload_renamer.config import load_config

        config_file = tmp_path / "extra.toml"
        config_file.write_text(
            textwrap.dedent("""\
                [rename]
                target = "*"
                unknown = 1

                [other]
                key = "value"
            """)
        )

        config = load_config(config_file)

        assert config.rename.target == "*"
        assert not hasattr(config.rename, "unknown")

    def test_file_not_found(self, tmp_path: Path) -> None:
        from upload_renamer.config import load_config

        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "nonexistent.toml")

    def test_invalid_toml(self, tmp_path: Path) -> None:
        from upload_renamer.config import load_config

        config_file = tmp_path / "invalid.toml"
        config_file.write_text("[[invalid toml content")

        with pytest.raises(ValueError, match="設定ファイル"):
            load_config(config_file)


class TestResolveConfig:
    """Tests for resolve_config function."""

    def test_argument_overrides_everything(
        self, config_toml: Path, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        from upload_renamer.config import load_config, resolve_config

        monkeypatch.setenv("UPLOAD_RENAMER_TARGET", "/from/env")
        env_file = tmp_path / ".env"
        env_file.write_text("UPLOAD_RENAMER_TARGET=/from/dotenv\n")
        config = load_config(config_toml)

        resolved = resolve_config(config, target="/from/arg", env_file=env_file)

        assert resolved.rename.target == "/from/arg"

    def test_none_keeps_config_value(self, config_toml: Path) -> None:
        from upload_renamer.config import load_config, resolve_config

        config = load_config(config_toml)
        resolved = resolve_config(config)

        assert resolved.rename.target == "/srv/uploads"

    def test_target_from_env_var(
        self, config_toml: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        from upload_renamer.config import load_config, resolve_config

        monkeypatch.setenv("UPLOAD_RENAMER_TARGET", "/from/env")
        config = load_config(config_toml)

        assert resolve_config(config).rename.target == "/from/env"

    def test_dotenv_overrides_env_var(
        self, config_toml: Path, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        from upload_renamer.config import load_config, resolve_config

        monkeypatch.setenv("UPLOAD_RENAMER_TARGET", "/from/env")
        env_file = tmp_path / ".env"
        env_file.write_text("UPLOAD_RENAMER_TARGET=/from/dotenv\n")
        config = load_config(config_toml)

        resolved = resolve_config(config, env_file=env_file)

        assert resolved.rename.target == "/from/dotenv"

    def test_missing_dotenv_falls_back_to_env_var(
        self, config_toml: Path, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        from upload_renamer.config import load_config, resolve_config

        monkeypatch.setenv("UPLOAD_RENAMER_TARGET", "/from/env")
        config = load_config(config_toml)

        resolved = resolve_config(config, env_file=tmp_path / "nonexistent.env")

        assert resolved.rename.target == "/from/env"

    def test_resolved_config_builds_renamer(self, config_toml: Path) -> None:
        from upload_renamer.config import load_config, resolve_config
        from upload_renamer.renamer import UploadRenamer

        config = resolve_config(load_config(config_toml), target="*")
        renamer = UploadRenamer.from_config(config)

        assert renamer.target == "*"
        assert renamer.use_upload_name is True
        assert renamer.overwrite is True
