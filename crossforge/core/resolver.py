"""Toolchain Resolver: TargetDescriptor + packages root -> ToolchainEnv.

Resolution is table-driven per OS (``_rules``). Each rule computes the
tool directory, tool paths, linker flags and extra variables for a target,
and lists any further paths it requires. If a declared tool or required
path is missing the whole resolution fails with ``ToolchainNotFound``; a
partially valid environment is never returned.

Layout under the packages root::

    osxcross/target/bin/{arch}-apple-darwin{kernel}-{ar,clang,clang++}
    android-ndk-{ver}/toolchains/llvm/prebuilt/{host}/bin/...
    protoc-{ver}/bin/protoc                 (only if protoc_version is set)
    zig-x86_64-linux-{ver}/zig              (only with zigbuild)
"""

from __future__ import annotations

import logging
import os
import shutil
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

from crossforge.config import ReleaseSettings
from crossforge.core.errors import ToolchainNotFound
from crossforge.models.targets import TargetDescriptor, TargetOS
from crossforge.models.toolchain import ToolchainEnv

logger = logging.getLogger(__name__)


def darwin_kernel_version(sdk_version: str) -> str:
    """Map a macOS SDK version to the Darwin version osxcross tools carry.

    macOS 11+ is Darwin ``major + 9`` with the same minor (``15.4`` ->
    ``24.4``); macOS 10.x is Darwin ``minor + 4``.
    """
    major, _, minor = sdk_version.partition(".")
    major_num = int(major)
    minor_num = int(minor.split(".")[0]) if minor else 0
    if major_num == 10:
        return str(minor_num + 4)
    return f"{major_num + 9}.{minor_num}"


@dataclass
class _Plan:
    """Mutable scratch space for one resolution; frozen into ToolchainEnv."""

    path_prepend: list[Path] = field(default_factory=list)
    required: list[Path] = field(default_factory=list)
    required_on_path: list[str] = field(default_factory=list)
    archiver: Path | None = None
    c_compiler: Path | None = None
    cxx_compiler: Path | None = None
    linker_flags: list[str] = field(default_factory=list)
    extra_vars: dict[str, str] = field(default_factory=dict)
    build_command: tuple[str, ...] = ("cargo", "build")


class ToolchainResolver:
    """Resolves a self-contained ``ToolchainEnv`` per target.

    Parameters
    ----------
    settings:
        Pinned toolchain versions and options. Defaults are used if omitted.
    base_path:
        The ambient search path used to locate wrapper tools such as
        ``cargo-xwin``. Defaults to the current ``PATH``; it is read, never
        modified.
    """

    def __init__(
        self,
        settings: ReleaseSettings | None = None,
        *,
        base_path: str | None = None,
    ) -> None:
        self._settings = settings or ReleaseSettings()
        self._base_path = base_path if base_path is not None else os.environ.get("PATH", "")
        self._rules: dict[TargetOS, Callable[[TargetDescriptor, Path, _Plan], None]] = {
            TargetOS.DARWIN: self._resolve_darwin,
            TargetOS.LINUX: self._resolve_linux,
            TargetOS.WINDOWS: self._resolve_windows,
            TargetOS.ANDROID: self._resolve_android,
        }

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def resolve(self, target: TargetDescriptor, packages_root: Path) -> ToolchainEnv:
        """Build a fresh ``ToolchainEnv`` for *target*.

        Raises ``ToolchainNotFound`` listing every missing tool.
        """
        root = Path(packages_root).expanduser()
        plan = _Plan()

        self._add_common(root, plan)
        self._rules[target.os](target, root, plan)

        env = ToolchainEnv(
            target_triple=target.triple,
            path_prepend=tuple(plan.path_prepend),
            archiver=plan.archiver,
            c_compiler=plan.c_compiler,
            cxx_compiler=plan.cxx_compiler,
            linker_flags=tuple(plan.linker_flags),
            extra_vars=dict(plan.extra_vars),
            build_command=plan.build_command,
        )

        missing = [str(p) for p in (*env.declared_tools, *plan.required) if not p.exists()]
        search_path = os.pathsep.join(
            [str(p) for p in env.path_prepend] + ([self._base_path] if self._base_path else [])
        )
        for tool in plan.required_on_path:
            if shutil.which(tool, path=search_path) is None:
                missing.append(f"{tool} (not on search path)")

        if missing:
            logger.error("Toolchain for %s incomplete: %s", target.triple, missing)
            raise ToolchainNotFound(target.triple, missing)

        logger.info(
            "Resolved toolchain for %s (%s) fingerprint=%s",
            target.triple,
            " ".join(env.build_command),
            env.fingerprint[:12],
        )
        return env

    # ------------------------------------------------------------------
    # Per-OS rules
    # ------------------------------------------------------------------

    def _add_common(self, root: Path, plan: _Plan) -> None:
        cargo_bin = self._settings.cargo_home.expanduser() / "bin"
        if cargo_bin.is_dir():
            plan.path_prepend.append(cargo_bin)

        if self._settings.protoc_version:
            protoc_bin = root / f"protoc-{self._settings.protoc_version}" / "bin"
            plan.path_prepend.insert(0, protoc_bin)
            plan.required.append(protoc_bin / "protoc")

    def _resolve_darwin(self, target: TargetDescriptor, root: Path, plan: _Plan) -> None:
        bin_dir = root / "osxcross" / "target" / "bin"
        kernel = darwin_kernel_version(self._settings.macos_sdk_version)
        prefix = f"{target.arch.value}-apple-darwin{kernel}"

        plan.path_prepend.insert(0, bin_dir)
        plan.archiver = bin_dir / f"{prefix}-ar"
        plan.c_compiler = bin_dir / f"{prefix}-clang"
        plan.cxx_compiler = bin_dir / f"{prefix}-clang++"
        plan.linker_flags.extend(["-C", f"linker={plan.c_compiler}"])
        # Keep the cc crate from substituting the host's default sysroot.
        plan.extra_vars["CRATE_CC_NO_DEFAULTS"] = "true"

    def _resolve_linux(self, target: TargetDescriptor, root: Path, plan: _Plan) -> None:
        if not self._settings.use_zigbuild:
            return
        zig_dir = root / f"zig-x86_64-linux-{self._settings.zig_version}"
        plan.path_prepend.insert(0, zig_dir)
        plan.required.append(zig_dir / "zig")
        plan.required_on_path.append("cargo-zigbuild")
        plan.build_command = ("cargo", "zigbuild")

    def _resolve_windows(self, target: TargetDescriptor, root: Path, plan: _Plan) -> None:
        plan.required_on_path.append("cargo-xwin")
        plan.build_command = ("cargo", "xwin", "build")

    def _resolve_android(self, target: TargetDescriptor, root: Path, plan: _Plan) -> None:
        s = self._settings
        bin_dir = (
            root
            / f"android-ndk-{s.android_ndk_version}"
            / "toolchains"
            / "llvm"
            / "prebuilt"
            / s.android_ndk_host
            / "bin"
        )
        prefix = f"{target.arch.value}-linux-android{s.android_api_level}"

        plan.path_prepend.insert(0, bin_dir)
        plan.archiver = bin_dir / "llvm-ar"
        plan.c_compiler = bin_dir / f"{prefix}-clang"
        plan.cxx_compiler = bin_dir / f"{prefix}-clang++"
        plan.linker_flags.extend([
            "-C",
            f"linker={plan.c_compiler}",
            "-C",
            f"link-args=-Wl,-rpath={s.android_rpath}",
        ])
