"""Command line entry point: ``nodepack-compile BUILD_DIR CACHE_DIR [ENV_FILE]``."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

import httpx

from nodepack.config import load_config
from nodepack.errors import BuildError
from nodepack.pipeline import compile_app
from nodepack.utils import output


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="nodepack-compile",
        description="Install Node.js and an app's dependencies into its build directory",
    )
    parser.add_argument("build_dir", type=Path, help="Application build directory")
    parser.add_argument("cache_dir", type=Path, help="Directory persisted between builds")
    parser.add_argument(
        "env_file",
        type=Path,
        nargs="?",
        default=None,
        help="Optional KEY=VALUE file of config vars (may not exist)",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    config = load_config()

    logging.basicConfig(
        level=getattr(logging, config.log_level, logging.WARNING),
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        compile_app(args.build_dir, args.cache_dir, args.env_file, config=config)
    except BuildError as e:
        output.error(str(e))
        return e.exit_code
    except httpx.HTTPError as e:
        output.error(f"{type(e).__name__}: {e}")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
