"""Procfile generation."""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Union

from nodepack.config.manifest import Manifest, is_unset
from nodepack.utils import output

PROCFILE_NAME = "Procfile"
DEFAULT_PROCESS = "web: npm start\n"


def ensure_procfile(
    build_dir: Union[str, Path],
    manifest: Manifest,
    default_entry: str = "server.js",
) -> Optional[Path]:
    """Create a Procfile running ``npm start`` if the app has none.

    npm falls back to ``node server.js`` when no start script is declared, so
    either a start script or a ``server.js`` is enough.

    Args:
        build_dir: Application build directory
        manifest: The app's package.json
        default_entry: Entry file npm starts when there is no start script

    Returns:
        Path of the Procfile written, or None if none was written
    """
    build = Path(build_dir)
    procfile = build / PROCFILE_NAME
    if procfile.exists():
        return None

    if is_unset(manifest.start_script) and not (build / default_entry).exists():
        output.protip("Create a Procfile or specify a start script in package.json")
        return None

    output.status("No Procfile found; Adding npm start to new Procfile")
    procfile.write_text(DEFAULT_PROCESS)
    return procfile
