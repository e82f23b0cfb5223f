"""Runtime configuration emitted for the deployed app."""

from .procfile import DEFAULT_PROCESS, ensure_procfile
from .profile import PROFILE_SCRIPT, write_profile

__all__ = [
    "DEFAULT_PROCESS",
    "PROFILE_SCRIPT",
    "ensure_procfile",
    "write_profile",
]
