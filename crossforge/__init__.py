"""Crossforge: multi-target native release pipeline.

Builds a Cargo package for a fixed matrix of (OS, arch, ABI) targets,
each with its own cross toolchain, lists every artifact's runtime
library dependencies, and packages each one as
``{name}-{version}-{triple}.tar.xz`` (or ``.zip`` for Windows) in a
release directory.
"""

__version__ = "0.1.0"
__description__ = "Multi-target native release pipeline"

from crossforge.core.driver import PipelineDriver
from crossforge.core.registry import TargetRegistry
from crossforge.cli.app import app as cli

__all__ = ["PipelineDriver", "TargetRegistry", "cli", "__version__"]
