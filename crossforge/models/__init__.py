"""Crossforge data models: all Pydantic v2, all frozen (immutable)."""

from crossforge.models.config import ArtifactKind, FailurePolicy, PipelineConfig, ProjectRef
from crossforge.models.pipeline import (
    TERMINAL_STATES,
    VALID_TRANSITIONS,
    RunSummary,
    TargetOutcome,
    TargetState,
    TransitionRecord,
)
from crossforge.models.results import BuildResult, PackageRecord, VerificationReport
from crossforge.models.targets import (
    DEFAULT_TARGETS,
    Arch,
    ArchiveFormat,
    TargetDescriptor,
    TargetOS,
)
from crossforge.models.toolchain import ToolchainEnv

__all__ = [
    # targets
    "TargetOS",
    "Arch",
    "ArchiveFormat",
    "TargetDescriptor",
    "DEFAULT_TARGETS",
    # toolchain
    "ToolchainEnv",
    # results
    "BuildResult",
    "VerificationReport",
    "PackageRecord",
    # pipeline
    "TargetState",
    "VALID_TRANSITIONS",
    "TERMINAL_STATES",
    "TransitionRecord",
    "TargetOutcome",
    "RunSummary",
    # config
    "ArtifactKind",
    "FailurePolicy",
    "ProjectRef",
    "PipelineConfig",
]
