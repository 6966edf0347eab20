"""Release configuration: env-driven, with the pinned toolchain versions.

Centralized config using pydantic-settings. Reads from a .env file and
CROSSFORGE_* environment variables; command-line options override both.
"""

from __future__ import annotations

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

from crossforge.models.config import ArtifactKind, FailurePolicy, PipelineConfig, ProjectRef


class ReleaseSettings(BaseSettings):
    """Release pipeline settings with environment variable overrides.

    Examples
    --------
    Override via environment::

        export CROSSFORGE_VERSION=0.5.0
        export CROSSFORGE_PACKAGES_ROOT=/opt/toolchains
        export CROSSFORGE_FAILURE_POLICY=continue

    Or via .env file::

        CROSSFORGE_RELEASE_DIR=/srv/releases
        CROSSFORGE_USE_ZIGBUILD=true
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="CROSSFORGE_",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    log_level: str = "INFO"

    # Release identity
    version: str = "0.4.0"
    package: str = "mp4decrypt"
    base_name: str | None = None  # defaults to the package name
    artifact_kind: ArtifactKind = ArtifactKind.CDYLIB
    profile: str = "release"

    # Filesystem layout
    project_dir: Path = Path(".")
    packages_root: Path = Path.home() / "vsd-packages"
    release_dir: Path = Path.home() / "vsd" / "dist"
    cargo_home: Path = Path.home() / ".cargo"

    failure_policy: FailurePolicy = FailurePolicy.HALT

    # Pinned toolchain versions
    android_ndk_version: str = "r27c"  # https://developer.android.com/ndk/downloads
    android_api_level: int = 25
    android_ndk_host: str = "linux-x86_64"
    android_rpath: str = "/data/data/com.termux/files/usr/lib"
    macos_sdk_version: str = "15.4"  # https://github.com/joseluisq/macosx-sdks/releases
    protoc_version: str | None = None  # e.g. "31.1" for projects that need protoc
    zig_version: str = "0.14.1"  # https://ziglang.org/download
    use_zigbuild: bool = False

    # Artifact inspection
    readobj: str = "llvm-readobj"

    def pipeline_config(self) -> PipelineConfig:
        """Freeze these settings into the per-run ``PipelineConfig``."""
        project = ProjectRef(
            package=self.package,
            project_dir=self.project_dir.expanduser(),
            artifact_kind=self.artifact_kind,
            profile=self.profile,
        )
        return PipelineConfig(
            project=project,
            version=self.version,
            base_name=self.base_name or self.package,
            packages_root=self.packages_root.expanduser(),
            release_dir=self.release_dir.expanduser(),
            failure_policy=self.failure_policy,
        )
