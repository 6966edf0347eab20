"""Resolved toolchain environment: one immutable value per build attempt."""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path

from pydantic import BaseModel, ConfigDict

from crossforge.core.hasher import compute_toolchain_fingerprint


class ToolchainEnv(BaseModel):
    """Everything the build tool needs for one target, as plain data.

    The environment is applied by building a fresh mapping for the child
    process (``to_environ``); the parent's ``os.environ`` is never touched.
    A ``None`` tool path means the host default toolchain is used.
    """

    model_config = ConfigDict(frozen=True)

    target_triple: str
    path_prepend: tuple[Path, ...] = ()
    archiver: Path | None = None
    c_compiler: Path | None = None
    cxx_compiler: Path | None = None
    linker_flags: tuple[str, ...] = ()
    extra_vars: dict[str, str] = {}
    build_command: tuple[str, ...] = ("cargo", "build")

    @property
    def declared_tools(self) -> tuple[Path, ...]:
        """Tool paths this env promises exist."""
        return tuple(
            p for p in (self.archiver, self.c_compiler, self.cxx_compiler) if p is not None
        )

    @property
    def rustflags(self) -> str:
        return " ".join(self.linker_flags)

    @property
    def fingerprint(self) -> str:
        return compute_toolchain_fingerprint(self.model_dump(mode="json"))

    def overrides(self) -> dict[str, str]:
        """Variables this env sets, excluding ``PATH``."""
        env: dict[str, str] = {}
        if self.archiver is not None:
            env["AR"] = str(self.archiver)
        if self.c_compiler is not None:
            env["CC"] = str(self.c_compiler)
        if self.cxx_compiler is not None:
            env["CXX"] = str(self.cxx_compiler)
        if self.linker_flags:
            env["RUSTFLAGS"] = self.rustflags
        env.update(self.extra_vars)
        return env

    def search_path(self, base_path: str | None = None) -> str:
        """The ``PATH`` value for the build: prepends first, then *base_path*."""
        parts = [str(p) for p in self.path_prepend]
        if base_path:
            parts.append(base_path)
        return os.pathsep.join(parts)

    def to_environ(self, base: Mapping[str, str] | None = None) -> dict[str, str]:
        """Return a new environment mapping for a single build invocation.

        *base* is copied, never modified.
        """
        env = dict(base) if base is not None else {}
        env["PATH"] = self.search_path(env.get("PATH"))
        env.update(self.overrides())
        return env
