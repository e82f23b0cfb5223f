"""Pytest configuration and shared fixtures."""

import io
import json
import tarfile
import tempfile
from pathlib import Path
from typing import Callable, Dict, Generator, List, Optional

import httpx
import pytest

from nodepack.config import BuildpackConfig
from nodepack.utils.path import SearchPath

NODE_VERSION = "0.10.32"
BUNDLED_NPM = "1.4.28"

# Stand-in for npm. Records what it was asked to do next to the files it
# would normally touch so tests can inspect them.
FAKE_NPM = """#!/bin/sh
case "$1" in
  --version)
    echo "{bundled_npm}"
    ;;
  install)
    if [ "$2" = "--production" ]; then
      env > "$PWD/.install-env"
      echo "$TMPDIR" > "$PWD/.install-tmpdir"
      [ -d "$TMPDIR" ] || exit 3
      if [ -n "$NPM_FAIL" ]; then
        echo "npm ERR! install failed"
        echo "0 info it worked if it ends with ok" > "$PWD/npm-debug.log"
        exit 7
      fi
      mkdir -p "$PWD/node_modules" "$PWD/.npm" "$PWD/.node-gyp"
      echo "express@4.0.0 node_modules/express"
    else
      echo "$@" > "$(dirname "$0")/../.global-install"
      echo "$5 /usr/local/lib/node_modules/npm"
      echo "npm WARN global install" >&2
    fi
    ;;
esac
"""

FAKE_NODE = """#!/bin/sh
echo "v{version}"
"""


def write_fake_npm(bin_dir: Path, bundled_npm: str = BUNDLED_NPM) -> Path:
    """Write an executable fake npm into ``bin_dir``."""
    bin_dir.mkdir(parents=True, exist_ok=True)
    npm = bin_dir / "npm"
    npm.write_text(FAKE_NPM.format(bundled_npm=bundled_npm))
    npm.chmod(0o755)
    return npm


def make_node_archive(
    version: str = NODE_VERSION,
    platform: str = "linux-x64",
    bundled_npm: str = BUNDLED_NPM,
) -> bytes:
    """Build a node-v<version>-<platform>.tar.gz in memory.

    Binaries are stored without execute bits so installs must fix them up.
    """
    root = f"node-v{version}-{platform}"
    files = {
        f"{root}/bin/node": FAKE_NODE.format(version=version),
        f"{root}/bin/npm": FAKE_NPM.format(bundled_npm=bundled_npm),
        f"{root}/README.md": "Node.js\n",
    }

    buffer = io.BytesIO()
    with tarfile.open(fileobj=buffer, mode="w:gz") as tar:
        for name in (root, f"{root}/bin"):
            info = tarfile.TarInfo(name)
            info.type = tarfile.DIRTYPE
            info.mode = 0o755
            tar.addfile(info)
        for name, content in files.items():
            data = content.encode()
            info = tarfile.TarInfo(name)
            info.size = len(data)
            info.mode = 0o644
            tar.addfile(info, io.BytesIO(data))
    return buffer.getvalue()


class FakeServices:
    """Resolver and download host served through httpx.MockTransport.

    Attributes:
        requests: Every request received, in order
        versions: Subject -> version answered by the resolver
        archives: Download URL -> archive bytes
    """

    def __init__(self, config: BuildpackConfig):
        self.config = config
        self.requests: List[httpx.Request] = []
        self.versions: Dict[str, str] = {"node": NODE_VERSION, "npm": "2.1.0"}
        self.archives: Dict[str, bytes] = {}
        self.status_code = 200
        self.archive_headers: Dict[str, str] = {}

    def add_archive(self, version: str = NODE_VERSION, data: Optional[bytes] = None) -> bytes:
        data = data if data is not None else make_node_archive(version, self.config.platform)
        self.archives[self.config.download_url(version)] = data
        return data

    def resolve_requests(self, subject: str) -> List[httpx.Request]:
        return [r for r in self.requests if r.url.path == f"/{subject}/resolve"]

    def download_requests(self) -> List[httpx.Request]:
        return [r for r in self.requests if r.url.host == "dist.test"]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.status_code != 200:
            return httpx.Response(self.status_code, text="unavailable")

        for subject, version in self.versions.items():
            if request.url.path == f"/{subject}/resolve":
                return httpx.Response(200, text=f"{version}\n")

        archive = self.archives.get(str(request.url))
        if archive is not None:
            return httpx.Response(200, headers=self.archive_headers, content=iter([archive]))
        return httpx.Response(404, text="Not Found")

    def client(self) -> httpx.Client:
        return httpx.Client(transport=httpx.MockTransport(self.handler))


@pytest.fixture
def config() -> BuildpackConfig:
    return BuildpackConfig(
        resolver_url="https://resolver.test",
        download_url_template="https://dist.test/v{version}/node-v{version}-{platform}.tar.gz",
    )


@pytest.fixture
def services(config: BuildpackConfig) -> FakeServices:
    return FakeServices(config)


@pytest.fixture
def http_client(services: FakeServices) -> Generator[httpx.Client, None, None]:
    client = services.client()
    yield client
    client.close()


@pytest.fixture
def build_dir() -> Generator[Path, None, None]:
    """Create a temporary app build directory with a minimal package.json."""
    with tempfile.TemporaryDirectory() as tmp_dir:
        build = Path(tmp_dir)
        (build / "package.json").write_text(json.dumps({"name": "app", "version": "1.0.0"}))
        yield build


@pytest.fixture
def cache_dir() -> Generator[Path, None, None]:
    with tempfile.TemporaryDirectory() as tmp_dir:
        yield Path(tmp_dir)


@pytest.fixture
def write_manifest(build_dir: Path) -> Callable[[dict], Path]:
    def _write(data: dict) -> Path:
        path = build_dir / "package.json"
        path.write_text(json.dumps(data))
        return path

    return _write


@pytest.fixture
def base_search_path() -> SearchPath:
    """The test process's own PATH (for /bin/sh helpers like env and mkdir)."""
    return SearchPath.from_environ()


@pytest.fixture
def fake_runtime(base_search_path: SearchPath) -> Generator[SearchPath, None, None]:
    """A search path whose first entry holds a fake npm."""
    with tempfile.TemporaryDirectory() as tmp_dir:
        bin_dir = Path(tmp_dir) / "bin"
        write_fake_npm(bin_dir)
        yield base_search_path.prepend(bin_dir)


@pytest.fixture
def node_archive() -> Callable[..., bytes]:
    """Factory for in-memory node release archives."""
    return make_node_archive


@pytest.fixture
def fake_npm() -> Callable[..., Path]:
    """Factory writing a fake npm into a bin directory."""
    return write_fake_npm
