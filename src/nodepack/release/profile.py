"""Startup hook that puts the vendored runtime on PATH at run time."""

from __future__ import annotations

from pathlib import Path
from typing import Union

from nodepack.utils import output

PROFILE_SUBPATH = Path(".profile.d") / "nodejs.sh"

# $HOME is the app root once deployed
PROFILE_SCRIPT = (
    'export PATH="$HOME/vendor/node/bin:$HOME/bin:$HOME/node_modules/.bin:$PATH";\n'
)


def write_profile(build_dir: Union[str, Path]) -> Path:
    """(Over)write ``.profile.d/nodejs.sh`` in the build directory."""
    output.status("Building runtime environment")
    profile = Path(build_dir) / PROFILE_SUBPATH
    profile.parent.mkdir(parents=True, exist_ok=True)
    profile.write_text(PROFILE_SCRIPT)
    return profile
