"""The compile step: every stage, once, in order.

Any failure propagates immediately. Stages that already completed are not
rolled back.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

import httpx

from nodepack.bootstrap import DependencyInstaller, clean_artifacts
from nodepack.config import BuildpackConfig, Manifest, load_config
from nodepack.release import ensure_procfile, write_profile
from nodepack.runtime import ResolvedVersions, RuntimeFetcher, RuntimeInstall, VersionResolver
from nodepack.utils.path import SearchPath

logger = logging.getLogger(__name__)


@dataclass
class CompileResult:
    """What a compile run produced."""

    versions: ResolvedVersions
    runtime: RuntimeInstall
    npm_version: str
    procfile: Optional[Path]
    profile: Path


def make_client(config: BuildpackConfig) -> httpx.Client:
    return httpx.Client(
        timeout=httpx.Timeout(config.http_timeout),
        follow_redirects=True,
    )


def compile_app(
    build_dir: Union[str, Path],
    cache_dir: Union[str, Path],
    env_file: Optional[Union[str, Path]] = None,
    config: Optional[BuildpackConfig] = None,
    client: Optional[httpx.Client] = None,
    search_path: Optional[SearchPath] = None,
) -> CompileResult:
    """Compile a Node.js application in place.

    Args:
        build_dir: Application source tree, compiled in place
        cache_dir: Directory persisted between builds
        env_file: Optional ``KEY=VALUE`` file of app config vars
        config: Buildpack configuration (defaults to ``load_config()``)
        client: HTTP client (one is created and closed if omitted)
        search_path: Initial executable search path (defaults to ``$PATH``)

    Returns:
        CompileResult describing the build
    """
    config = config or load_config()
    build = Path(build_dir)
    cache = Path(cache_dir)
    if search_path is None:
        search_path = SearchPath.from_environ()

    owns_client = client is None
    http = client if client is not None else make_client(config)
    try:
        manifest = Manifest.load(build)

        versions = VersionResolver(config, http).resolve_versions(manifest)

        fetcher = RuntimeFetcher(config, http)
        runtime = fetcher.install(versions.node, build, cache, search_path)
        npm_version = fetcher.install_npm(versions.npm, runtime)
    finally:
        if owns_client:
            http.close()

    tmpdir = DependencyInstaller(config).install(build, runtime.search_path, env_file)
    clean_artifacts(build, tmpdir)

    procfile = ensure_procfile(build, manifest, config.default_entry)
    profile = write_profile(build)

    logger.debug("Compiled %s with %r", build, runtime)
    return CompileResult(
        versions=versions,
        runtime=runtime,
        npm_version=npm_version,
        procfile=procfile,
        profile=profile,
    )
