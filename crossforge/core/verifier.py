"""Artifact Verifier: lists the shared libraries an artifact depends on.

Runs ``llvm-readobj --needed-libs`` and parses its ``NeededLibraries``
block. The report is advisory: the driver surfaces it but never blocks
packaging on its contents.

Example inspector output::

    File: libmp4decrypt.so
    Format: elf64-x86-64
    NeededLibraries [
      libc.so
    ]
"""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path

from crossforge.core.errors import ArtifactNotFound, ToolMissing
from crossforge.models.results import VerificationReport

logger = logging.getLogger(__name__)


def parse_needed_libs(output: str) -> tuple[str, ...]:
    """Extract library names from ``llvm-readobj --needed-libs`` output."""
    libs: list[str] = []
    inside = False
    for line in output.splitlines():
        stripped = line.strip()
        if not inside:
            if stripped.startswith("NeededLibraries") and stripped.endswith("["):
                inside = True
            continue
        if stripped == "]":
            inside = False
            continue
        if stripped:
            libs.append(stripped)
    return tuple(libs)


class ArtifactVerifier:
    """Read-only inspection of build artifacts.

    Parameters
    ----------
    readobj:
        Name or path of the ``llvm-readobj`` binary.
    """

    def __init__(self, readobj: str = "llvm-readobj") -> None:
        self._readobj = readobj

    def verify(self, artifact_path: Path) -> VerificationReport:
        """Inspect *artifact_path* and report its declared dependencies.

        Raises ``ArtifactNotFound`` if the file is absent and ``ToolMissing``
        if the inspector cannot be started.
        """
        path = Path(artifact_path)
        if not path.is_file():
            raise ArtifactNotFound(f"Expected artifact not found: {path}")

        cmd = [self._readobj, "--needed-libs", str(path)]
        try:
            proc = subprocess.run(
                cmd,
                capture_output=True,
                encoding="utf-8",
                errors="replace",
                check=False,
            )
        except OSError as exc:
            raise ToolMissing(f"Could not start {self._readobj!r}: {exc}") from exc

        warnings: list[str] = []
        if proc.returncode != 0:
            message = (
                f"{self._readobj} exited with {proc.returncode}: "
                f"{(proc.stderr or proc.stdout).strip()}"
            )
            logger.warning("Inspection of %s incomplete: %s", path.name, message)
            warnings.append(message)

        deps = parse_needed_libs(proc.stdout)
        logger.info("%s needs: %s", path.name, ", ".join(deps) or "(none)")
        return VerificationReport(
            artifact_path=path,
            declared_dependencies=deps,
            warnings=tuple(warnings),
        )
