"""Project and pipeline run configuration models."""

from __future__ import annotations

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict

from crossforge.models.targets import TargetDescriptor, TargetOS


class ArtifactKind(str, Enum):
    """What the Cargo package produces."""

    CDYLIB = "cdylib"
    BIN = "bin"


class FailurePolicy(str, Enum):
    """What the driver does after a target fails."""

    HALT = "halt"
    CONTINUE = "continue"


class ProjectRef(BaseModel):
    """The project being released, as seen by the build tool."""

    model_config = ConfigDict(frozen=True)

    package: str = "mp4decrypt"
    project_dir: Path = Path(".")
    artifact_kind: ArtifactKind = ArtifactKind.CDYLIB
    profile: str = "release"

    def artifact_filename(self, target: TargetDescriptor) -> str:
        """Filename the build tool writes for *target*.

        Library crates have ``-`` replaced by ``_`` the way Cargo does.
        """
        if self.artifact_kind is ArtifactKind.BIN:
            suffix = ".exe" if target.os is TargetOS.WINDOWS else ""
            return f"{self.package}{suffix}"

        stem = self.package.replace("-", "_")
        if target.os is TargetOS.WINDOWS:
            return f"{stem}.dll"
        if target.os is TargetOS.DARWIN:
            return f"lib{stem}.dylib"
        return f"lib{stem}.so"

    def output_dir(self, target: TargetDescriptor) -> Path:
        return self.project_dir / "target" / target.triple / self.profile

    def artifact_path(self, target: TargetDescriptor) -> Path:
        return self.output_dir(target) / self.artifact_filename(target)


class PipelineConfig(BaseModel):
    """Everything one pipeline run needs, fixed at start.

    Built from ``ReleaseSettings`` plus command-line overrides.
    """

    model_config = ConfigDict(frozen=True)

    project: ProjectRef = ProjectRef()
    version: str = "0.4.0"
    base_name: str = "mp4decrypt"
    packages_root: Path = Path("~/vsd-packages").expanduser()
    release_dir: Path = Path("~/vsd/dist").expanduser()
    failure_policy: FailurePolicy = FailurePolicy.HALT
