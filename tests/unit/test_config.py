"""Tests for release settings: env-driven config and the frozen run config."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from crossforge.config import ReleaseSettings
from crossforge.models.config import ArtifactKind, FailurePolicy


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch):
    for name in (
        "CROSSFORGE_VERSION",
        "CROSSFORGE_PACKAGES_ROOT",
        "CROSSFORGE_FAILURE_POLICY",
        "CROSSFORGE_USE_ZIGBUILD",
        "CROSSFORGE_BASE_NAME",
        "CROSSFORGE_PACKAGE",
    ):
        monkeypatch.delenv(name, raising=False)


class TestReleaseSettings:
    def test_defaults(self):
        settings = ReleaseSettings(_env_file=None)
        assert settings.log_level == "INFO"
        assert settings.package == "mp4decrypt"
        assert settings.artifact_kind is ArtifactKind.CDYLIB
        assert settings.failure_policy is FailurePolicy.HALT
        assert settings.use_zigbuild is False
        assert settings.protoc_version is None

    def test_pinned_toolchain_versions(self):
        settings = ReleaseSettings(_env_file=None)
        assert settings.android_ndk_version == "r27c"
        assert settings.android_api_level == 25
        assert settings.macos_sdk_version == "15.4"
        assert settings.zig_version == "0.14.1"

    def test_default_paths(self):
        settings = ReleaseSettings(_env_file=None)
        assert settings.packages_root == Path.home() / "vsd-packages"
        assert settings.release_dir == Path.home() / "vsd" / "dist"

    def test_env_overrides(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("CROSSFORGE_VERSION", "0.5.0")
        monkeypatch.setenv("CROSSFORGE_PACKAGES_ROOT", "/opt/toolchains")
        monkeypatch.setenv("CROSSFORGE_FAILURE_POLICY", "continue")
        monkeypatch.setenv("CROSSFORGE_USE_ZIGBUILD", "true")

        settings = ReleaseSettings(_env_file=None)
        assert settings.version == "0.5.0"
        assert settings.packages_root == Path("/opt/toolchains")
        assert settings.failure_policy is FailurePolicy.CONTINUE
        assert settings.use_zigbuild is True

    def test_env_file(self, tmp_path: Path):
        env_file = tmp_path / ".env"
        env_file.write_text("CROSSFORGE_VERSION=9.9.9\nCROSSFORGE_BASE_NAME=vsd-tools\n")
        settings = ReleaseSettings(_env_file=env_file)
        assert settings.version == "9.9.9"
        assert settings.base_name == "vsd-tools"

    def test_explicit_values_beat_env(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("CROSSFORGE_VERSION", "0.5.0")
        assert ReleaseSettings(_env_file=None, version="1.0.0").version == "1.0.0"


class TestPipelineConfig:
    def test_base_name_defaults_to_package(self):
        config = ReleaseSettings(_env_file=None, package="vsd").pipeline_config()
        assert config.base_name == "vsd"
        assert config.project.package == "vsd"

    def test_explicit_base_name(self):
        config = ReleaseSettings(
            _env_file=None, package="mp4decrypt", base_name="mp4decrypt-ffi"
        ).pipeline_config()
        assert config.base_name == "mp4decrypt-ffi"

    def test_paths_are_expanded(self):
        config = ReleaseSettings(
            _env_file=None, release_dir=Path("~/out"), project_dir=Path("~/src/vsd")
        ).pipeline_config()
        assert config.release_dir == Path.home() / "out"
        assert config.project.project_dir == Path.home() / "src" / "vsd"

    def test_run_config_is_frozen(self):
        config = ReleaseSettings(_env_file=None).pipeline_config()
        with pytest.raises(ValidationError):
            config.version = "2.0.0"
