"""Packager: writes one release archive per built artifact.

Archive names are a pure function of ``(base_name, version, triple)``::

    {base_name}-{version}-{triple}.tar.xz   (POSIX targets)
    {base_name}-{version}-{triple}.zip      (Windows targets)

The archive holds the single artifact under its base filename. Archives
are written to a temporary file and moved into place, so a rerun
overwrites the previous archive and a failed write leaves nothing behind.
"""

from __future__ import annotations

import logging
import os
import tarfile
import zipfile
from pathlib import Path

from crossforge.core.errors import PackagingFailed
from crossforge.core.hasher import file_sha256
from crossforge.models.results import PackageRecord
from crossforge.models.targets import ArchiveFormat, TargetDescriptor

logger = logging.getLogger(__name__)


def archive_name(base_name: str, version: str, target: TargetDescriptor) -> str:
    """Deterministic release filename for *target*."""
    return f"{base_name}-{version}-{target.triple}.{target.archive_format.extension}"


def _write_tar_xz(artifact: Path, dest: Path) -> None:
    with tarfile.open(dest, "w:xz") as tar:
        tar.add(artifact, arcname=artifact.name)


def _write_zip(artifact: Path, dest: Path) -> None:
    with zipfile.ZipFile(dest, "w", compression=zipfile.ZIP_DEFLATED) as zf:
        zf.write(artifact, arcname=artifact.name)


_WRITERS = {
    ArchiveFormat.TAR_XZ: _write_tar_xz,
    ArchiveFormat.ZIP: _write_zip,
}


class Packager:
    """Writes release archives into a release directory.

    Parameters
    ----------
    release_dir:
        Destination directory. Created on first use if absent.
    """

    def __init__(self, release_dir: Path) -> None:
        self.release_dir = Path(release_dir)

    def package(
        self,
        artifact_path: Path,
        target: TargetDescriptor,
        version: str,
        base_name: str,
    ) -> PackageRecord:
        """Archive *artifact_path* for *target*.

        Raises ``PackagingFailed`` if the artifact is missing or the archive
        cannot be written.
        """
        artifact = Path(artifact_path)
        if not artifact.is_file():
            raise PackagingFailed(
                f"Artifact to package does not exist: {artifact}",
                triple=target.triple,
            )

        dest = self.release_dir / archive_name(base_name, version, target)
        partial = dest.with_name(dest.name + ".partial")

        try:
            self.release_dir.mkdir(parents=True, exist_ok=True)
            _WRITERS[target.archive_format](artifact, partial)
            os.replace(partial, dest)
        except (OSError, tarfile.TarError, zipfile.BadZipFile) as exc:
            if partial.exists():
                partial.unlink()
            raise PackagingFailed(
                f"Could not write {dest.name}: {exc}", triple=target.triple
            ) from exc

        digest = file_sha256(dest)
        logger.info("Packaged %s -> %s (sha256=%s)", artifact.name, dest, digest[:12])
        return PackageRecord(
            source_artifact=artifact,
            output_archive=dest,
            format=target.archive_format,
            sha256=digest,
        )
