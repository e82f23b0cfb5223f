"""Build failures that abort the compile step."""

from __future__ import annotations

from typing import List, Optional


class BuildError(Exception):
    """Base class for fatal build errors.

    Attributes:
        exit_code: Process exit code the CLI should terminate with
    """

    exit_code: int = 1


class ManifestError(BuildError):
    """Raised when package.json cannot be parsed."""


class ResolutionError(BuildError):
    """Raised when the version resolver returns something that is not a version."""

    def __init__(self, subject: str, requested: str, response: str):
        self.subject = subject
        self.requested = requested
        self.response = response
        super().__init__(
            f"Unable to resolve {subject} version for range {requested!r}: "
            f"resolver answered {response!r}"
        )


class CommandError(BuildError):
    """Raised when an external command exits non-zero.

    A command killed by a signal (negative ``returncode``) maps to the shell
    convention of ``128 + signum``.
    """

    def __init__(self, cmd: List[str], returncode: int, detail: Optional[str] = None):
        self.cmd = cmd
        self.returncode = returncode
        if returncode > 0:
            self.exit_code = returncode
        elif returncode < 0:
            self.exit_code = 128 - returncode
        else:
            self.exit_code = 1
        message = f"Command failed with exit code {returncode}: {' '.join(cmd)}"
        if detail:
            message = f"{message}\n{detail}"
        super().__init__(message)
