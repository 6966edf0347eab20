"""Per-target state machine.

Enforces:
- Valid state transitions only (VALID_TRANSITIONS table)
- Phases in fixed order: Resolving -> Building -> Verifying -> Packaging
- Failed reachable from every non-terminal state
- Every transition recorded and published to listeners
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable

from crossforge.models.pipeline import (
    VALID_TRANSITIONS,
    TargetState,
    TransitionRecord,
)
from crossforge.models.targets import TargetDescriptor

logger = logging.getLogger(__name__)

TransitionListener = Callable[[TransitionRecord], None]


class InvalidTransitionError(RuntimeError):
    """Raised when a requested state transition is not valid."""


class TargetStateMachine:
    """Tracks the state of every target in a run.

    Parameters
    ----------
    listeners:
        Callables invoked with each ``TransitionRecord`` as it happens.
    """

    def __init__(self, listeners: Iterable[TransitionListener] | None = None) -> None:
        self._listeners: list[TransitionListener] = list(listeners or [])
        self._states: dict[str, TargetState] = {}
        self._history: list[TransitionRecord] = []

    # ------------------------------------------------------------------
    # State management
    # ------------------------------------------------------------------

    def initialize(self, targets: Iterable[TargetDescriptor]) -> dict[str, TargetState]:
        """Put every target into PENDING, in the given order."""
        self._states = {t.triple: TargetState.PENDING for t in targets}
        self._history = []
        return dict(self._states)

    def get_state(self, triple: str) -> TargetState:
        try:
            return self._states[triple]
        except KeyError:
            raise KeyError(f"Target {triple!r} is not part of this run") from None

    def get_all_states(self) -> dict[str, TargetState]:
        """Return a snapshot of all target states, in run order."""
        return dict(self._states)

    @property
    def history(self) -> list[TransitionRecord]:
        return list(self._history)

    # ------------------------------------------------------------------
    # Transition logic
    # ------------------------------------------------------------------

    def transition(
        self,
        triple: str,
        target_state: TargetState,
        *,
        reason: str | None = None,
        diagnostics: str = "",
    ) -> TransitionRecord:
        """Move *triple* to *target_state*, recording and publishing it."""
        current = self.get_state(triple)

        allowed = self.get_available_transitions(triple)
        if target_state not in allowed:
            raise InvalidTransitionError(
                f"Cannot transition {triple} from {current.value} to {target_state.value}. "
                f"Allowed: {sorted(s.value for s in allowed)}"
            )

        record = TransitionRecord(
            triple=triple,
            from_state=current,
            to_state=target_state,
            reason=reason,
            diagnostics=diagnostics,
        )
        self._states[triple] = target_state
        self._history.append(record)
        logger.debug("%s %s", triple, record.transition)

        for listener in self._listeners:
            listener(record)
        return record

    def get_available_transitions(self, triple: str) -> set[TargetState]:
        """Return the set of valid next states for a target."""
        return set(VALID_TRANSITIONS.get(self.get_state(triple), set()))
