"""Binary search path handling.

The compile step never mutates the process-wide ``PATH``. Stages that spawn
processes receive a :class:`SearchPath` and build their child environment
from it.
"""

from __future__ import annotations

import os
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Mapping, Optional, Tuple, Union


@dataclass(frozen=True)
class SearchPath:
    """An ordered, immutable list of directories searched for executables.

    Attributes:
        entries: Directories in precedence order (first wins)
    """

    entries: Tuple[str, ...] = field(default_factory=tuple)

    @classmethod
    def from_environ(cls, environ: Optional[Mapping[str, str]] = None) -> "SearchPath":
        """Build a search path from an environment's ``PATH``."""
        env = os.environ if environ is None else environ
        raw = env.get("PATH", "")
        return cls(tuple(part for part in raw.split(os.pathsep) if part))

    def prepend(self, directory: Union[str, Path]) -> "SearchPath":
        """Return a new search path with ``directory`` taking precedence.

        An existing occurrence of the same directory is moved to the front
        rather than duplicated.
        """
        entry = str(directory)
        rest = tuple(e for e in self.entries if e != entry)
        return SearchPath((entry,) + rest)

    def as_env_value(self) -> str:
        return os.pathsep.join(self.entries)

    def which(self, command: str) -> Optional[str]:
        """Locate ``command`` on this search path only."""
        return shutil.which(command, path=self.as_env_value())


def child_env(
    search_path: SearchPath,
    base: Optional[Mapping[str, str]] = None,
    extra: Optional[Mapping[str, str]] = None,
) -> Dict[str, str]:
    """Compose an environment for a child process.

    ``PATH`` always comes from ``search_path``, regardless of what ``base`` or
    ``extra`` contain.

    Args:
        search_path: Executable search path for the child
        base: Starting environment (defaults to the current process environment)
        extra: Variables layered on top of ``base``

    Returns:
        New environment mapping
    """
    env: Dict[str, str] = dict(os.environ if base is None else base)
    if extra:
        env.update(extra)
    env["PATH"] = search_path.as_env_value()
    return env


def remove_tree(path: Union[str, Path]) -> bool:
    """Remove a directory tree if it exists.

    Returns:
        True if something was removed
    """
    target = Path(path)
    if target.is_symlink() or target.is_file():
        target.unlink()
        return True
    if target.is_dir():
        shutil.rmtree(target)
        return True
    return False
