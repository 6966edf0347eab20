"""Shared test fixtures for Crossforge.

End-to-end tests run the real subprocess paths against small shell
scripts standing in for ``cargo``, ``cargo-xwin`` and ``llvm-readobj``.
"""

from __future__ import annotations

import os
import signal
import stat
import threading
from collections.abc import Callable
from pathlib import Path

import pytest

from crossforge.config import ReleaseSettings
from crossforge.core.registry import TargetRegistry
from crossforge.models.config import ProjectRef

FAKE_CARGO = r"""#!/bin/sh
# Records its invocation and writes the artifact cargo would produce.
target=""
prev=""
for arg in "$@"; do
  if [ "$prev" = "--target" ]; then target="$arg"; fi
  prev="$arg"
done
echo "$* | AR=${AR:-} CC=${CC:-} CXX=${CXX:-} RUSTFLAGS=${RUSTFLAGS:-} CRATE_CC_NO_DEFAULTS=${CRATE_CC_NO_DEFAULTS:-}" >> invocations.log
if [ -e "fail-$target" ]; then
  echo "error: could not compile \`mp4decrypt\` for $target" >&2
  exit 101
fi
if [ -e "garbled-$target" ]; then
  printf 'cc: warning \377\376 in legacy locale\n' >&2
  exit 101
fi
if [ -e "slow-$target" ]; then
  # Ctrl-C reaches the whole process group; cargo finishes its step first.
  trap '' INT
  sleep 1
  touch build-finished
fi
if [ -e "noartifact-$target" ]; then
  echo "    Finished release [optimized] target(s)"
  exit 0
fi
out="target/$target/release"
mkdir -p "$out"
case "$target" in
  *windows*) name="mp4decrypt.dll" ;;
  *darwin*) name="libmp4decrypt.dylib" ;;
  *) name="libmp4decrypt.so" ;;
esac
printf 'artifact for %s\n' "$target" > "$out/$name"
echo "   Compiling mp4decrypt v0.4.0"
echo "    Finished release [optimized] target(s)"
"""

FAKE_READOBJ = r"""#!/bin/sh
# Mimics `llvm-readobj --needed-libs FILE`.
file="$2"
echo ""
echo "File: $file"
echo "Format: elf64-x86-64"
echo "NeededLibraries ["
case "$file" in
  *.dll)
    echo "  KERNEL32.dll"
    echo "  bcrypt.dll"
    ;;
  *.dylib)
    echo "  /usr/lib/libSystem.B.dylib"
    ;;
  *)
    echo "  libc.so"
    ;;
esac
echo "]"
"""

FAKE_XWIN = "#!/bin/sh\nexit 0\n"


def write_script(path: Path, body: str) -> Path:
    """Write an executable script and return its path."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(body)
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return path


def interrupt_self_after(seconds: float) -> threading.Timer:
    """Deliver SIGINT to this process after *seconds*, as Ctrl-C would."""
    timer = threading.Timer(seconds, os.kill, (os.getpid(), signal.SIGINT))
    timer.start()
    return timer


@pytest.fixture
def tmp_dir(tmp_path: Path) -> Path:
    """Provide a temporary directory for test artifacts."""
    return tmp_path


@pytest.fixture
def packages_root(tmp_dir: Path) -> Path:
    root = tmp_dir / "packages"
    root.mkdir()
    return root


@pytest.fixture
def cargo_home(tmp_dir: Path) -> Path:
    """A CARGO_HOME whose bin/ holds fake cargo and cargo-xwin."""
    home = tmp_dir / "cargo-home"
    write_script(home / "bin" / "cargo", FAKE_CARGO)
    write_script(home / "bin" / "cargo-xwin", FAKE_XWIN)
    return home


@pytest.fixture
def readobj(tmp_dir: Path) -> Path:
    return write_script(tmp_dir / "tools" / "llvm-readobj", FAKE_READOBJ)


@pytest.fixture
def project_dir(tmp_dir: Path) -> Path:
    path = tmp_dir / "workspace"
    path.mkdir()
    return path


@pytest.fixture
def release_dir(tmp_dir: Path) -> Path:
    return tmp_dir / "dist"


@pytest.fixture
def settings(
    packages_root: Path,
    cargo_home: Path,
    readobj: Path,
    project_dir: Path,
    release_dir: Path,
) -> ReleaseSettings:
    """Settings pointing every path at the temp sandbox."""
    return ReleaseSettings(
        _env_file=None,
        version="1.2.3",
        package="mp4decrypt",
        packages_root=packages_root,
        cargo_home=cargo_home,
        readobj=str(readobj),
        project_dir=project_dir,
        release_dir=release_dir,
    )


@pytest.fixture
def project(project_dir: Path) -> ProjectRef:
    return ProjectRef(package="mp4decrypt", project_dir=project_dir)


@pytest.fixture
def registry() -> TargetRegistry:
    return TargetRegistry()


@pytest.fixture
def make_osxcross(packages_root: Path) -> Callable[..., Path]:
    """Factory fixture: lay out osxcross tools for the given arch prefixes."""

    def _factory(*archs: str, kernel: str = "24.4") -> Path:
        bin_dir = packages_root / "osxcross" / "target" / "bin"
        for arch in archs or ("aarch64", "x86_64"):
            for tool in ("ar", "clang", "clang++"):
                write_script(bin_dir / f"{arch}-apple-darwin{kernel}-{tool}", "#!/bin/sh\n")
        return bin_dir

    return _factory


@pytest.fixture
def make_ndk(packages_root: Path) -> Callable[..., Path]:
    """Factory fixture: lay out an Android NDK llvm toolchain."""

    def _factory(version: str = "r27c", api: int = 25) -> Path:
        bin_dir = (
            packages_root
            / f"android-ndk-{version}"
            / "toolchains"
            / "llvm"
            / "prebuilt"
            / "linux-x86_64"
            / "bin"
        )
        write_script(bin_dir / "llvm-ar", "#!/bin/sh\n")
        for tool in ("clang", "clang++"):
            write_script(bin_dir / f"aarch64-linux-android{api}-{tool}", "#!/bin/sh\n")
        return bin_dir

    return _factory
