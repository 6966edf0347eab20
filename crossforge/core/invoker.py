"""Build Invoker: runs the external build tool for one target.

The resolved ``ToolchainEnv`` is applied to a copy of the ambient
environment and handed to the child process explicitly; the parent's
``os.environ`` is never modified, so nothing leaks between targets.
"""

from __future__ import annotations

import logging
import os
import subprocess
from collections.abc import Mapping

from crossforge.core.errors import BuildFailed, ToolMissing
from crossforge.models.config import ProjectRef
from crossforge.models.results import BuildResult
from crossforge.models.targets import TargetDescriptor
from crossforge.models.toolchain import ToolchainEnv

logger = logging.getLogger(__name__)


def build_command(
    target: TargetDescriptor, env: ToolchainEnv, project: ProjectRef
) -> list[str]:
    """The full argv for building *project* for *target*."""
    cmd = list(env.build_command)
    cmd += ["-p", project.package]
    if project.profile == "release":
        cmd.append("--release")
    else:
        cmd += ["--profile", project.profile]
    cmd += ["--target", target.triple]
    if target.no_default_features:
        cmd.append("--no-default-features")
    if target.features:
        cmd += ["--features", ",".join(target.features)]
    return cmd


class BuildInvoker:
    """Invokes the build tool; one call per target, no retries.

    Parameters
    ----------
    base_env:
        Environment the per-target overrides are layered on. Defaults to a
        snapshot of ``os.environ`` taken at each call.
    """

    def __init__(self, base_env: Mapping[str, str] | None = None) -> None:
        self._base_env = dict(base_env) if base_env is not None else None

    def build(
        self, target: TargetDescriptor, env: ToolchainEnv, project: ProjectRef
    ) -> BuildResult:
        """Build *project* for *target* under *env*.

        Returns a ``BuildResult``; ``succeeded`` is False when the tool exits
        non-zero. Raises ``ToolMissing`` if the tool cannot be started. On
        ``KeyboardInterrupt`` the child is left to honor the signal itself and
        is waited for, never killed, before the interrupt propagates.
        """
        if env.target_triple != target.triple:
            raise ValueError(
                f"ToolchainEnv for {env.target_triple} used to build {target.triple}"
            )
        if not project.project_dir.is_dir():
            raise BuildFailed(
                f"Project directory not found: {project.project_dir}",
                triple=target.triple,
            )

        cmd = build_command(target, env, project)
        base = self._base_env if self._base_env is not None else os.environ
        child_env = env.to_environ(base)

        logger.info("Building %s: %s", target.triple, " ".join(cmd))
        try:
            proc = subprocess.Popen(
                cmd,
                cwd=project.project_dir,
                env=child_env,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                encoding="utf-8",
                errors="replace",
            )
        except OSError as exc:
            raise ToolMissing(
                f"Could not start build tool {cmd[0]!r}: {exc}",
                triple=target.triple,
            ) from exc

        with proc:
            try:
                stdout, stderr = proc.communicate()
            except KeyboardInterrupt:
                # The tool received the same SIGINT; let it shut down on its own.
                logger.warning("Interrupted; waiting for %s to exit", cmd[0])
                proc.communicate()
                raise

        diagnostics = "\n".join(part for part in (stdout, stderr) if part)
        succeeded = proc.returncode == 0
        if succeeded:
            logger.info("Build for %s finished", target.triple)
        else:
            logger.error(
                "Build for %s failed with exit code %d", target.triple, proc.returncode
            )

        return BuildResult(
            target=target,
            artifact_path=project.artifact_path(target),
            succeeded=succeeded,
            diagnostics=diagnostics,
            return_code=proc.returncode,
            command=tuple(cmd),
        )
