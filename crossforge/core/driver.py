"""Pipeline Driver: the central coordinator for a release run.

The driver wires the TargetRegistry, ToolchainResolver, BuildInvoker,
ArtifactVerifier and Packager together and walks each selected target
through the state machine:

    Pending -> Resolving -> Building -> Verifying -> Packaging -> Done
                                                        (or Failed)

Targets run strictly one after another in registry order. Per-target
errors are caught here; the ``FailurePolicy`` decides whether the run
halts or moves on to the next target.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence

from crossforge.config import ReleaseSettings
from crossforge.core.errors import BuildFailed, ReleaseError
from crossforge.core.invoker import BuildInvoker
from crossforge.core.packager import Packager
from crossforge.core.registry import TargetRegistry
from crossforge.core.resolver import ToolchainResolver
from crossforge.core.target_machine import TargetStateMachine, TransitionListener
from crossforge.core.verifier import ArtifactVerifier
from crossforge.models.config import FailurePolicy, PipelineConfig
from crossforge.models.pipeline import (
    TERMINAL_STATES,
    RunSummary,
    TargetOutcome,
    TargetState,
)
from crossforge.models.results import BuildResult, PackageRecord, VerificationReport
from crossforge.models.targets import TargetDescriptor

logger = logging.getLogger(__name__)


class PipelineDriver:
    """Sequential multi-target release driver.

    Parameters
    ----------
    config:
        Per-run configuration. Derived from *settings* if not provided.
    settings:
        Release settings used to build default components.
    registry, resolver, invoker, verifier, packager:
        Component overrides; defaults are built from *settings*/*config*.
    listeners:
        Callables receiving every ``TransitionRecord`` as it happens.
    """

    def __init__(
        self,
        config: PipelineConfig | None = None,
        *,
        settings: ReleaseSettings | None = None,
        registry: TargetRegistry | None = None,
        resolver: ToolchainResolver | None = None,
        invoker: BuildInvoker | None = None,
        verifier: ArtifactVerifier | None = None,
        packager: Packager | None = None,
        listeners: Iterable[TransitionListener] | None = None,
    ) -> None:
        self._settings = settings or ReleaseSettings()
        self.config = config or self._settings.pipeline_config()

        self.registry = registry if registry is not None else TargetRegistry()
        self.resolver = resolver or ToolchainResolver(self._settings)
        self.invoker = invoker or BuildInvoker()
        self.verifier = verifier or ArtifactVerifier(self._settings.readobj)
        self.packager = packager or Packager(self.config.release_dir)
        self.machine = TargetStateMachine(listeners)

        self._cancelled = False
        self._interrupted = False

    # ------------------------------------------------------------------
    # Run lifecycle
    # ------------------------------------------------------------------

    def cancel(self) -> None:
        """Stop before the next target's Resolve phase.

        A build already handed to the external tool is not killed.
        """
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def run(self, targets: Sequence[TargetDescriptor] | None = None) -> RunSummary:
        """Build, verify and package every selected target in order.

        *targets* defaults to every enabled registry entry.
        """
        selected = list(targets) if targets is not None else self.registry.list_targets()
        self.machine.initialize(selected)
        self._interrupted = False
        outcomes: dict[str, TargetOutcome] = {
            t.triple: TargetOutcome(target=t) for t in selected
        }

        logger.info(
            "Release %s %s: %d of %d registered target(s), policy=%s",
            self.config.base_name,
            self.config.version,
            len(selected),
            len(self.registry),
            self.config.failure_policy.value,
        )

        for target in selected:
            if self._cancelled:
                pending = [
                    triple
                    for triple, state in self.machine.get_all_states().items()
                    if state == TargetState.PENDING
                ]
                logger.warning("Run cancelled; left pending: %s", ", ".join(pending))
                break

            outcome = self._run_target(target)
            outcomes[target.triple] = outcome

            if (
                outcome.state == TargetState.FAILED
                and self.config.failure_policy == FailurePolicy.HALT
            ):
                logger.error(
                    "Halting after %s failed (%s)", target.triple, outcome.failure_reason
                )
                break

        summary = RunSummary(
            version=self.config.version,
            outcomes=[outcomes[t.triple] for t in selected],
            transitions=self.machine.history,
            interrupted=self._interrupted,
        )
        logger.info(
            "Release finished: %d done, %d failed, %d pending",
            len(summary.done),
            len(summary.failed),
            len(summary.pending),
        )
        return summary

    # ------------------------------------------------------------------
    # Per-target execution
    # ------------------------------------------------------------------

    def _run_target(self, target: TargetDescriptor) -> TargetOutcome:
        """Drive one target to a terminal state and return its outcome."""
        cfg = self.config
        build: BuildResult | None = None
        verification: VerificationReport | None = None
        package: PackageRecord | None = None

        try:
            self.machine.transition(target.triple, TargetState.RESOLVING)
            env = self.resolver.resolve(target, cfg.packages_root)

            self.machine.transition(target.triple, TargetState.BUILDING)
            build = self.invoker.build(target, env, cfg.project)
            if not build.succeeded:
                raise BuildFailed(
                    f"Build tool exited with code {build.return_code}",
                    triple=target.triple,
                    diagnostics=build.diagnostics,
                )

            self.machine.transition(target.triple, TargetState.VERIFYING)
            verification = self.verifier.verify(build.artifact_path)

            self.machine.transition(target.triple, TargetState.PACKAGING)
            package = self.packager.package(
                build.artifact_path, target, cfg.version, cfg.base_name
            )

            self.machine.transition(target.triple, TargetState.DONE)
        except ReleaseError as exc:
            return self._fail(
                target,
                reason=exc.reason,
                message=str(exc),
                diagnostics=exc.diagnostics or (build.diagnostics if build else ""),
                build=build,
                verification=verification,
            )
        except KeyboardInterrupt:
            self._cancelled = True
            self._interrupted = True
            return self._fail(
                target,
                reason="Interrupted",
                message="interrupted by operator",
                diagnostics=build.diagnostics if build else "",
                build=build,
                verification=verification,
            )
        except Exception as exc:
            self._fail(
                target,
                reason=type(exc).__name__,
                message=str(exc),
                diagnostics="",
                build=build,
                verification=verification,
            )
            raise

        return TargetOutcome(
            target=target,
            state=TargetState.DONE,
            diagnostics=build.diagnostics,
            build=build,
            verification=verification,
            package=package,
        )

    def _fail(
        self,
        target: TargetDescriptor,
        *,
        reason: str,
        message: str,
        diagnostics: str,
        build: BuildResult | None,
        verification: VerificationReport | None,
    ) -> TargetOutcome:
        logger.error("%s failed: %s: %s", target.triple, reason, message)
        if self.machine.get_state(target.triple) not in TERMINAL_STATES:
            self.machine.transition(
                target.triple,
                TargetState.FAILED,
                reason=f"{reason}: {message}",
                diagnostics=diagnostics,
            )
        return TargetOutcome(
            target=target,
            state=TargetState.FAILED,
            failure_reason=reason,
            diagnostics=diagnostics,
            build=build,
            verification=verification,
        )
