"""Removal of build scratch directories."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional, Union

from nodepack.utils import output
from nodepack.utils.path import remove_tree

logger = logging.getLogger(__name__)

# Left behind by node-gyp native builds and by npm's own cache
SCRATCH_DIRS = (".node-gyp", ".npm")


def clean_artifacts(
    build_dir: Union[str, Path],
    tmpdir: Optional[Union[str, Path]] = None,
) -> List[Path]:
    """Remove node-gyp/npm scratch directories and the install tmpdir.

    Safe to call repeatedly; missing paths are ignored.

    Returns:
        Paths that were actually removed
    """
    build = Path(build_dir)
    output.status("Cleaning up node-gyp and npm artifacts")

    targets = [build / name for name in SCRATCH_DIRS]
    if tmpdir is not None:
        targets.append(Path(tmpdir))

    removed = [target for target in targets if remove_tree(target)]
    for path in removed:
        logger.debug("Removed %s", path)
    return removed
