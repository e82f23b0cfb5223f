"""Application dependency installation.

Runs ``npm install --production`` inside the build directory with a private
temporary directory and, optionally, the app's config vars imported from an
env file.
"""

from __future__ import annotations

import logging
import shutil
import signal
import tempfile
import threading
from pathlib import Path
from typing import Any, Dict, Iterable, Mapping, Optional, Union

from dotenv import dotenv_values

from nodepack.config.settings import DENIED_ENV_VARS, BuildpackConfig
from nodepack.errors import CommandError
from nodepack.utils import output
from nodepack.utils.path import SearchPath, child_env
from nodepack.utils.process import run_indented

logger = logging.getLogger(__name__)

NPM_DEBUG_LOG = "npm-debug.log"


class ScopedTempDir:
    """A temporary directory that is removed however its scope ends.

    Removal happens on normal exit, on an exception and on SIGINT/SIGTERM,
    and happens exactly once. While the scope is active the previous signal
    handlers are replaced; they are restored on release and the signal is
    then re-delivered to them.
    """

    def __init__(
        self,
        prefix: str = "nodepack-",
        signals: Iterable[int] = (signal.SIGINT, signal.SIGTERM),
    ):
        self.prefix = prefix
        self.signals = tuple(signals)
        self.path: Optional[Path] = None
        self._released = False
        self._previous: Dict[int, Any] = {}

    def acquire(self) -> Path:
        self.path = Path(tempfile.mkdtemp(prefix=self.prefix))
        # Signal handlers can only be installed from the main thread
        if threading.current_thread() is threading.main_thread():
            for signum in self.signals:
                self._previous[signum] = signal.getsignal(signum)
                signal.signal(signum, self._handle_signal)
        logger.debug("Created temporary directory %s", self.path)
        return self.path

    def release(self) -> None:
        if self._released:
            return
        self._released = True

        for signum, handler in self._previous.items():
            signal.signal(signum, handler if handler is not None else signal.SIG_DFL)
        self._previous.clear()

        if self.path is not None:
            shutil.rmtree(self.path, ignore_errors=True)
            logger.debug("Removed temporary directory %s", self.path)

    @property
    def released(self) -> bool:
        return self._released

    def _handle_signal(self, signum, frame):
        self.release()
        signal.raise_signal(signum)

    def __enter__(self) -> Path:
        return self.acquire()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()


def read_env_file(path: Optional[Union[str, Path]]) -> Dict[str, str]:
    """Read ``KEY=VALUE`` assignments from an env file.

    A missing file yields an empty mapping. Keys without a value are skipped.
    """
    if path is None or not Path(path).is_file():
        return {}
    values = dotenv_values(path, interpolate=False)
    return {key: value for key, value in values.items() if value is not None}


def filter_env(
    values: Mapping[str, str],
    denied: Iterable[str] = DENIED_ENV_VARS,
) -> Dict[str, str]:
    """Drop variables that may not be overridden by app config."""
    blocked = set(denied)
    return {key: value for key, value in values.items() if key not in blocked}


def build_install_env(
    search_path: SearchPath,
    imported: Mapping[str, str],
    tmpdir: Union[str, Path],
    base: Optional[Mapping[str, str]] = None,
) -> Dict[str, str]:
    """Compose the environment of the dependency install.

    Args:
        search_path: Search path with the vendored runtime first
        imported: Filtered config vars from the env file
        tmpdir: Private temporary directory for the install
        base: Starting environment (defaults to the current process environment)

    Returns:
        Environment mapping for ``npm install``
    """
    extra = dict(imported)
    extra["TMPDIR"] = str(tmpdir)
    return child_env(search_path, base=base, extra=extra)


class DependencyInstaller:
    """Installs production dependencies with npm."""

    def __init__(self, config: BuildpackConfig):
        self.config = config

    def load_env(self, env_file: Optional[Union[str, Path]]) -> Dict[str, str]:
        values = read_env_file(env_file)
        imported = filter_env(values, self.config.denied_env)
        dropped = sorted(set(values) - set(imported))
        if dropped:
            logger.debug(
                "Ignoring protected variables from %s: %s", env_file, ", ".join(dropped)
            )
        return imported

    def install(
        self,
        build_dir: Union[str, Path],
        search_path: SearchPath,
        env_file: Optional[Union[str, Path]] = None,
    ) -> Path:
        """Run ``npm install --production`` in the build directory.

        Args:
            build_dir: Application build directory
            search_path: Search path with the vendored runtime first
            env_file: Optional file of config vars to import

        Returns:
            Path of the (already removed) temporary directory

        Raises:
            CommandError: If npm fails
        """
        build = Path(build_dir)
        imported = self.load_env(env_file)

        output.status("Installing dependencies")
        with ScopedTempDir() as tmpdir:
            env = build_install_env(search_path, imported, tmpdir)
            try:
                run_indented(
                    ["npm", "install", "--production"],
                    search_path=search_path,
                    env=env,
                    cwd=build,
                )
            except CommandError:
                relay_debug_log(build)
                raise

        return tmpdir


def relay_debug_log(build_dir: Path) -> bool:
    """Print npm's debug log, if npm left one behind.

    Returns:
        True if a log was printed
    """
    log = build_dir / NPM_DEBUG_LOG
    if not log.is_file():
        return False
    output.status(NPM_DEBUG_LOG)
    with open(log, encoding="utf-8", errors="replace") as f:
        output.indent_lines(f)
    return True
