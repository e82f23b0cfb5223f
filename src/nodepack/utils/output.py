"""Buildpack-style build output.

Status lines start with an arrow, everything else is indented so it lines up
underneath them in the platform's build log.
"""

from __future__ import annotations

import sys
from typing import Iterable, Optional, TextIO

INDENT = "       "

PROTIP_LINK = "See https://devcenter.heroku.com/articles/nodejs-support"


def _stream(stream: Optional[TextIO]) -> TextIO:
    return stream if stream is not None else sys.stdout


def status(message: str, stream: Optional[TextIO] = None) -> None:
    """Print a top-level build step."""
    print(f"-----> {message}", file=_stream(stream), flush=True)


def indent(line: str) -> str:
    return f"{INDENT}{line}"


def info(message: str, stream: Optional[TextIO] = None) -> None:
    """Print an indented detail line."""
    print(indent(message), file=_stream(stream), flush=True)


def indent_lines(lines: Iterable[str], stream: Optional[TextIO] = None) -> None:
    """Relay lines from a subprocess, indented, as they arrive."""
    out = _stream(stream)
    for line in lines:
        print(indent(line.rstrip("\r\n")), file=out, flush=True)


def protip(tip: str, stream: Optional[TextIO] = None) -> None:
    """Print an advisory. Advisories never fail the build."""
    out = _stream(stream)
    print("", file=out)
    info(f"PRO TIP: {tip}", out)
    info(PROTIP_LINK, out)
    print("", file=out, flush=True)


def error(message: str, stream: Optional[TextIO] = None) -> None:
    out = sys.stderr if stream is None else stream
    for line in message.splitlines() or [""]:
        print(f" !     {line}", file=out)
    out.flush()
