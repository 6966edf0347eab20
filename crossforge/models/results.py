"""Per-phase result models: build, verification and packaging outputs."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict

from crossforge.models.targets import ArchiveFormat, TargetDescriptor


class BuildResult(BaseModel):
    """Outcome of one build tool invocation.

    A result with ``succeeded=False`` must never reach the Packager.
    """

    model_config = ConfigDict(frozen=True)

    target: TargetDescriptor
    artifact_path: Path
    succeeded: bool
    diagnostics: str = ""
    return_code: int | None = None
    command: tuple[str, ...] = ()


class VerificationReport(BaseModel):
    """Runtime dependencies an artifact declares.

    Informational only; packaging is never gated on its contents.
    """

    model_config = ConfigDict(frozen=True)

    artifact_path: Path
    declared_dependencies: tuple[str, ...] = ()
    warnings: tuple[str, ...] = ()


class PackageRecord(BaseModel):
    """A release archive written to the release directory."""

    model_config = ConfigDict(frozen=True)

    source_artifact: Path
    output_archive: Path
    format: ArchiveFormat
    sha256: str = ""
