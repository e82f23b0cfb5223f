"""Running external commands with buildpack-style output."""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import List, Mapping, Optional, Union

from nodepack.errors import CommandError
from nodepack.utils.output import indent_lines
from nodepack.utils.path import SearchPath

logger = logging.getLogger(__name__)


def resolve_command(cmd: List[str], search_path: SearchPath) -> List[str]:
    """Resolve the executable of ``cmd`` against ``search_path``.

    Raises:
        CommandError: If the executable is not on the search path
    """
    executable = search_path.which(cmd[0])
    if executable is None:
        raise CommandError(cmd, 127, f"{cmd[0]}: command not found")
    return [executable] + list(cmd[1:])


def run_indented(
    cmd: List[str],
    *,
    search_path: SearchPath,
    env: Mapping[str, str],
    cwd: Optional[Union[str, Path]] = None,
    discard_stdout: bool = False,
) -> None:
    """Run a command, relaying its output indented as it is produced.

    By default stdout and stderr are combined. With ``discard_stdout`` only
    stderr is relayed.

    Raises:
        CommandError: If the command exits non-zero
    """
    argv = resolve_command(cmd, search_path)
    logger.debug("Running %s (cwd=%s)", argv, cwd)

    if discard_stdout:
        stdout, stderr = subprocess.DEVNULL, subprocess.PIPE
    else:
        stdout, stderr = subprocess.PIPE, subprocess.STDOUT

    with subprocess.Popen(
        argv,
        cwd=cwd,
        env=dict(env),
        stdout=stdout,
        stderr=stderr,
        text=True,
        errors="replace",
    ) as process:
        stream = process.stderr if discard_stdout else process.stdout
        if stream is not None:
            indent_lines(stream)
        returncode = process.wait()

    if returncode != 0:
        raise CommandError(cmd, returncode)


def capture(
    cmd: List[str],
    *,
    search_path: SearchPath,
    env: Mapping[str, str],
    cwd: Optional[Union[str, Path]] = None,
) -> str:
    """Run a command and return its stripped stdout.

    Raises:
        CommandError: If the command exits non-zero
    """
    argv = resolve_command(cmd, search_path)
    result = subprocess.run(
        argv,
        cwd=cwd,
        env=dict(env),
        capture_output=True,
        text=True,
    )
    if result.returncode != 0:
        raise CommandError(cmd, result.returncode, result.stderr.strip() or None)
    return result.stdout.strip()
