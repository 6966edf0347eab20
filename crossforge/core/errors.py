"""Release error taxonomy.

Every error is fatal for the target it names and for no other target.
The Pipeline Driver catches them at its boundary and decides, per the
configured ``FailurePolicy``, whether the run halts or continues.
"""

from __future__ import annotations


class ReleaseError(RuntimeError):
    """Base class for per-target pipeline failures.

    Parameters
    ----------
    message:
        Human-readable description.
    triple:
        Target triple the failure belongs to, if known.
    diagnostics:
        Captured tool output to surface to the operator.
    """

    def __init__(self, message: str, *, triple: str = "", diagnostics: str = "") -> None:
        super().__init__(message)
        self.triple = triple
        self.diagnostics = diagnostics

    @property
    def reason(self) -> str:
        return type(self).__name__


class ToolchainNotFound(ReleaseError):
    """A required compiler, linker or archiver is missing for a target."""

    def __init__(self, triple: str, missing: list[str]) -> None:
        self.missing = list(missing)
        super().__init__(
            f"Toolchain for {triple} incomplete; missing: {', '.join(self.missing)}",
            triple=triple,
        )


class ToolMissing(ReleaseError):
    """An external tool could not be started at all."""


class BuildFailed(ReleaseError):
    """The external build tool reported failure."""


class ArtifactNotFound(BuildFailed):
    """The build reported success but the expected artifact is absent."""


class PackagingFailed(ReleaseError):
    """The release archive could not be written."""
