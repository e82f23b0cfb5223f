"""Dependency installation and cleanup for the application."""

from .artifacts import SCRATCH_DIRS, clean_artifacts
from .dependencies import (
    DependencyInstaller,
    ScopedTempDir,
    build_install_env,
    filter_env,
    read_env_file,
)

__all__ = [
    "DependencyInstaller",
    "SCRATCH_DIRS",
    "ScopedTempDir",
    "build_install_env",
    "clean_artifacts",
    "filter_env",
    "read_env_file",
]
