"""Target descriptor models: the static build matrix.

Each ``TargetDescriptor`` names one (OS, arch, ABI) combination, the Rust
target triple it builds for, and the archive format its release uses.
``DEFAULT_TARGETS`` is the ordered matrix; order is build order.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, model_validator


class TargetOS(str, Enum):
    """Operating systems the pipeline can build for."""

    DARWIN = "darwin"
    LINUX = "linux"
    WINDOWS = "windows"
    ANDROID = "android"


class Arch(str, Enum):
    """CPU architectures."""

    X86_64 = "x86_64"
    AARCH64 = "aarch64"


class ArchiveFormat(str, Enum):
    """Release archive formats and their file extensions."""

    TAR_XZ = "tar_xz"
    ZIP = "zip"

    @property
    def extension(self) -> str:
        return "tar.xz" if self is ArchiveFormat.TAR_XZ else "zip"


class TargetDescriptor(BaseModel):
    """One entry of the build matrix.

    Disabled entries stay in the data model so re-enabling a target is a
    one-flag change.
    """

    model_config = ConfigDict(frozen=True)

    os: TargetOS
    arch: Arch
    abi: str | None = None  # "musl", "msvc", ...
    triple: str
    archive_format: ArchiveFormat
    enabled: bool = True

    # Cargo feature selection for this target
    no_default_features: bool = False
    features: tuple[str, ...] = ()

    @model_validator(mode="after")
    def _triple_matches_arch(self) -> TargetDescriptor:
        if not self.triple.startswith(f"{self.arch.value}-"):
            raise ValueError(
                f"triple {self.triple!r} does not start with arch {self.arch.value!r}"
            )
        return self


DEFAULT_TARGETS: tuple[TargetDescriptor, ...] = (
    TargetDescriptor(
        os=TargetOS.ANDROID,
        arch=Arch.AARCH64,
        triple="aarch64-linux-android",
        archive_format=ArchiveFormat.TAR_XZ,
        enabled=False,
        no_default_features=True,
        features=("rustls-tls-webpki-roots",),
    ),
    TargetDescriptor(
        os=TargetOS.DARWIN,
        arch=Arch.AARCH64,
        triple="aarch64-apple-darwin",
        archive_format=ArchiveFormat.TAR_XZ,
    ),
    TargetDescriptor(
        os=TargetOS.DARWIN,
        arch=Arch.X86_64,
        triple="x86_64-apple-darwin",
        archive_format=ArchiveFormat.TAR_XZ,
    ),
    TargetDescriptor(
        os=TargetOS.LINUX,
        arch=Arch.AARCH64,
        abi="musl",
        triple="aarch64-unknown-linux-musl",
        archive_format=ArchiveFormat.TAR_XZ,
    ),
    TargetDescriptor(
        os=TargetOS.LINUX,
        arch=Arch.X86_64,
        abi="musl",
        triple="x86_64-unknown-linux-musl",
        archive_format=ArchiveFormat.TAR_XZ,
    ),
    TargetDescriptor(
        os=TargetOS.WINDOWS,
        arch=Arch.AARCH64,
        abi="msvc",
        triple="aarch64-pc-windows-msvc",
        archive_format=ArchiveFormat.ZIP,
    ),
    TargetDescriptor(
        os=TargetOS.WINDOWS,
        arch=Arch.X86_64,
        abi="msvc",
        triple="x86_64-pc-windows-msvc",
        archive_format=ArchiveFormat.ZIP,
    ),
)
