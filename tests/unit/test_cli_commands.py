"""Unit tests for the CLI: Typer command registration and basic behavior.

Exercises command registration, help output and the read-only
``targets``/``resolve`` commands via typer.testing.CliRunner.
"""

from __future__ import annotations

from pathlib import Path

from typer.testing import CliRunner

from crossforge.cli.app import app, release_build_app

runner = CliRunner()


# ---------------------------------------------------------------------------
# Test: CLI help and registration
# ---------------------------------------------------------------------------


class TestCliApp:
    """The CLI must register all expected commands and show help."""

    def test_no_args_shows_help(self):
        """Running 'crossforge' with no args should show help (exit code 0 or 2)."""
        result = runner.invoke(app, [])
        # Typer's no_args_is_help may exit with 0 or 2 depending on version
        assert result.exit_code in (0, 2)
        assert "usage" in result.output.lower()

    def test_help_flag(self):
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        assert "build" in result.output
        assert "targets" in result.output
        assert "resolve" in result.output

    def test_build_command_exists(self):
        result = runner.invoke(app, ["build", "--help"])
        assert result.exit_code == 0
        assert "--targets" in result.output

    def test_release_build_entry_point(self):
        result = runner.invoke(release_build_app, ["--help"])
        assert result.exit_code == 0
        assert "--continue-on-failure" in result.output


# ---------------------------------------------------------------------------
# Test: targets
# ---------------------------------------------------------------------------


class TestTargetsCommand:
    def test_lists_enabled_targets(self):
        result = runner.invoke(app, ["targets"])
        assert result.exit_code == 0
        assert "x86_64-unknown-linux-musl" in result.output
        assert "aarch64-linux-android" not in result.output

    def test_all_includes_disabled(self):
        result = runner.invoke(app, ["targets", "--all"])
        assert result.exit_code == 0
        assert "aarch64-linux-android" in result.output

    def test_filter(self):
        result = runner.invoke(app, ["targets", "--targets", "windows"])
        assert result.exit_code == 0
        assert "aarch64-pc-windows-msvc" in result.output
        assert "apple-darwin" not in result.output

    def test_no_match(self):
        result = runner.invoke(app, ["targets", "--targets", "freebsd"])
        assert result.exit_code == 0
        assert "No targets match" in result.output


# ---------------------------------------------------------------------------
# Test: resolve
# ---------------------------------------------------------------------------


class TestResolveCommand:
    def test_unknown_triple(self):
        result = runner.invoke(app, ["resolve", "riscv64gc-unknown-linux-gnu"])
        assert result.exit_code == 2
        assert "Unknown target" in result.output

    def test_missing_toolchain_lists_paths(self, packages_root: Path):
        result = runner.invoke(
            app,
            ["resolve", "aarch64-apple-darwin", "--packages-root", str(packages_root)],
        )
        assert result.exit_code == 1
        assert "aarch64-apple-darwin24.4-clang" in result.output

    def test_resolved_toolchain_panel(self, packages_root: Path, make_osxcross):
        make_osxcross("x86_64")
        result = runner.invoke(
            app,
            ["resolve", "x86_64-apple-darwin", "--packages-root", str(packages_root)],
            env={"CROSSFORGE_MACOS_SDK_VERSION": "15.4"},
        )
        assert result.exit_code == 0
        assert "CRATE_CC_NO_DEFAULTS" in result.output

    def test_disabled_target_warns(self, packages_root: Path, make_ndk):
        make_ndk()
        result = runner.invoke(
            app,
            ["resolve", "aarch64-linux-android", "--packages-root", str(packages_root)],
        )
        assert result.exit_code == 0
        assert "disabled" in result.output
