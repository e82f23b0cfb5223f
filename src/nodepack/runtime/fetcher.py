"""Download, cache and install the Node.js runtime."""

from __future__ import annotations

import logging
import os
import shutil
import stat
import tarfile
from pathlib import Path
from typing import BinaryIO, Iterator, Optional, Union

import httpx

from nodepack.config.settings import BuildpackConfig
from nodepack.errors import BuildError
from nodepack.utils import output
from nodepack.utils.path import SearchPath, child_env, remove_tree
from nodepack.utils.process import capture, run_indented

from .types import RuntimeInstall

logger = logging.getLogger(__name__)

VENDOR_SUBPATH = Path("vendor") / "node"


class TeeReader:
    """File-like reader that copies every chunk it pulls into a sink.

    Each chunk is read from the source exactly once, written to ``sink`` and
    then handed to whoever is reading (the tar extractor). Call :meth:`drain`
    once the reader is done so the sink also receives any trailing bytes the
    reader did not need.
    """

    def __init__(self, chunks: Iterator[bytes], sink: BinaryIO):
        self._chunks = chunks
        self._sink = sink
        self._pending = b""
        self.bytes_read = 0

    def _pull(self) -> bytes:
        for chunk in self._chunks:
            if chunk:
                self._sink.write(chunk)
                self.bytes_read += len(chunk)
                return chunk
        return b""

    def read(self, size: Optional[int] = -1) -> bytes:
        if size is None or size < 0:
            data = self._pending + b"".join(iter(self._pull, b""))
            self._pending = b""
            return data

        while len(self._pending) < size:
            chunk = self._pull()
            if not chunk:
                break
            self._pending += chunk

        data, self._pending = self._pending[:size], self._pending[size:]
        return data

    def drain(self) -> None:
        while self._pull():
            pass


class RuntimeFetcher:
    """Installs a Node.js release into the build directory.

    Archives are cached as ``<cache>/node-v<version>-<platform>.tar.gz``. A
    cached archive is extracted without touching the network.
    """

    def __init__(self, config: BuildpackConfig, client: httpx.Client):
        self.config = config
        self.client = client

    def cache_key(self, version: str) -> str:
        return f"node-v{version}-{self.config.platform}.tar.gz"

    def cache_path(self, cache_dir: Union[str, Path], version: str) -> Path:
        return Path(cache_dir) / self.cache_key(version)

    def install(
        self,
        version: str,
        build_dir: Union[str, Path],
        cache_dir: Union[str, Path],
        search_path: SearchPath,
    ) -> RuntimeInstall:
        """Download (or reuse) and install a node release.

        Args:
            version: Resolved node version
            build_dir: Application build directory
            cache_dir: Persistent cache directory
            search_path: Search path of the caller

        Returns:
            RuntimeInstall whose search path has the runtime's bin directory first
        """
        build = Path(build_dir)
        entry = self.cache_path(cache_dir, version)

        if entry.is_file():
            output.status(f"Using cached node {version}")
            logger.debug("Cache hit: %s", entry)
            with open(entry, "rb") as archive:
                self._extract(archive, build)
            from_cache = True
        else:
            output.status(f"Downloading and installing node {version}")
            logger.debug("Cache miss: %s", entry)
            self._download(version, build, entry)
            from_cache = False

        home = self._relocate(version, build)
        self._mark_executable(home / "bin")

        return RuntimeInstall(
            version=version,
            home=home,
            search_path=search_path.prepend(home / "bin"),
            from_cache=from_cache,
        )

    def _download(self, version: str, build: Path, entry: Path) -> None:
        """Stream the archive once, extracting it while it is written to the cache.

        The cache entry is written under a temporary name and only renamed into
        place after the whole archive has been received.
        """
        url = self.config.download_url(version)
        entry.parent.mkdir(parents=True, exist_ok=True)
        partial = entry.with_name(entry.name + ".partial")

        logger.debug("Downloading %s", url)
        try:
            with self.client.stream("GET", url) as response:
                response.raise_for_status()
                with open(partial, "wb") as sink:
                    tee = TeeReader(response.iter_raw(), sink)
                    self._extract(tee, build)
                    tee.drain()
            os.replace(partial, entry)
        except BaseException:
            partial.unlink(missing_ok=True)
            raise

        logger.debug("Cached %s (%d bytes)", entry, tee.bytes_read)

    def _extract(self, source: BinaryIO, build: Path) -> None:
        try:
            with tarfile.open(fileobj=source, mode="r|gz") as tar:
                tar.extractall(build, filter="data")
        except tarfile.TarError as e:
            raise BuildError(f"Unable to extract node archive: {e}") from e

    def _relocate(self, version: str, build: Path) -> Path:
        extracted = build / f"node-v{version}-{self.config.platform}"
        if not extracted.is_dir():
            raise BuildError(f"Node archive did not contain {extracted.name}/")

        home = build / VENDOR_SUBPATH
        home.parent.mkdir(parents=True, exist_ok=True)
        remove_tree(home)
        shutil.move(str(extracted), str(home))
        return home

    @staticmethod
    def _mark_executable(bin_dir: Path) -> None:
        if not bin_dir.is_dir():
            return
        for item in bin_dir.iterdir():
            # Broken links are left alone
            if not item.exists():
                continue
            mode = item.stat().st_mode
            item.chmod(mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)

    def install_npm(self, requested: str, runtime: RuntimeInstall) -> str:
        """Replace the bundled npm if a different version was requested.

        Args:
            requested: Resolved npm version, or "" to keep the bundled one
            runtime: Installed node runtime

        Returns:
            The npm version in use afterwards
        """
        env = child_env(runtime.search_path)
        bundled = capture(["npm", "--version"], search_path=runtime.search_path, env=env)

        if not requested:
            output.status(f"Using default npm version: {bundled}")
            return bundled

        if requested == bundled:
            output.status(f"npm {bundled} already bundled with node")
            return bundled

        output.status(
            f"Downloading and installing npm {requested} (replacing version {bundled})"
        )
        # npm prints its own install summary on stdout; only errors are relayed
        run_indented(
            ["npm", "install", "--unsafe-perm", "--quiet", "-g", f"npm@{requested}"],
            search_path=runtime.search_path,
            env=env,
            discard_stdout=True,
        )
        return requested
