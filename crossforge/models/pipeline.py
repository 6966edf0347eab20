"""Per-target state machine models and the run summary."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from crossforge.models.results import BuildResult, PackageRecord, VerificationReport
from crossforge.models.targets import TargetDescriptor


class TargetState(str, Enum):
    """Lifecycle of one target within a run."""

    PENDING = "pending"
    RESOLVING = "resolving"
    BUILDING = "building"
    VERIFYING = "verifying"
    PACKAGING = "packaging"
    DONE = "done"
    FAILED = "failed"


# Phases run in a fixed order; FAILED is reachable from every non-terminal
# state. DONE and FAILED have no outgoing transitions.
VALID_TRANSITIONS: dict[TargetState, set[TargetState]] = {
    TargetState.PENDING: {TargetState.RESOLVING, TargetState.FAILED},
    TargetState.RESOLVING: {TargetState.BUILDING, TargetState.FAILED},
    TargetState.BUILDING: {TargetState.VERIFYING, TargetState.FAILED},
    TargetState.VERIFYING: {TargetState.PACKAGING, TargetState.FAILED},
    TargetState.PACKAGING: {TargetState.DONE, TargetState.FAILED},
    TargetState.DONE: set(),  # terminal
    TargetState.FAILED: set(),  # terminal
}

TERMINAL_STATES: frozenset[TargetState] = frozenset(
    {TargetState.DONE, TargetState.FAILED}
)


class TransitionRecord(BaseModel):
    """One state change, as surfaced on the reporting stream."""

    model_config = ConfigDict(frozen=True)

    triple: str
    from_state: TargetState
    to_state: TargetState
    reason: str | None = None  # populated when entering FAILED
    diagnostics: str = ""  # captured tool output for failures
    timestamp_utc: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )

    @property
    def transition(self) -> str:
        return f"{self.from_state.value}->{self.to_state.value}"


class TargetOutcome(BaseModel):
    """Final view of one target after the run."""

    model_config = ConfigDict(frozen=True)

    target: TargetDescriptor
    state: TargetState = TargetState.PENDING
    failure_reason: str | None = None  # error class name, e.g. "BuildFailed"
    diagnostics: str = ""
    build: BuildResult | None = None
    verification: VerificationReport | None = None
    package: PackageRecord | None = None


class RunSummary(BaseModel):
    """Everything a run produced, in registry order."""

    model_config = ConfigDict(frozen=True)

    version: str
    outcomes: list[TargetOutcome] = []
    transitions: list[TransitionRecord] = []
    interrupted: bool = False

    @property
    def done(self) -> list[TargetOutcome]:
        return [o for o in self.outcomes if o.state == TargetState.DONE]

    @property
    def failed(self) -> list[TargetOutcome]:
        return [o for o in self.outcomes if o.state == TargetState.FAILED]

    @property
    def pending(self) -> list[TargetOutcome]:
        return [o for o in self.outcomes if o.state == TargetState.PENDING]

    @property
    def succeeded(self) -> bool:
        """True only when every selected target reached DONE."""
        return bool(self.outcomes) and len(self.done) == len(self.outcomes)

    @property
    def exit_code(self) -> int:
        return 0 if self.succeeded else 1
