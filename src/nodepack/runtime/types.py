"""Data types for runtime resolution and installation."""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from nodepack.utils.path import SearchPath


@dataclass(frozen=True)
class ResolvedVersions:
    """Concrete versions obtained from the resolver.

    Attributes:
        node: Resolved Node.js version (e.g. "0.10.32")
        npm: Resolved npm version, or "" to keep the one bundled with node
        node_range: Range sent to the resolver for node ("" means latest stable)
        npm_range: Range requested for npm (None if not set)
    """

    node: str
    npm: str = ""
    node_range: str = ""
    npm_range: Optional[str] = None

    def __repr__(self) -> str:
        npm_str = f" npm {self.npm}" if self.npm else " npm (bundled)"
        return f"<ResolvedVersions node {self.node}{npm_str}>"


@dataclass
class RuntimeInstall:
    """Information about an installed runtime.

    Attributes:
        version: Installed Node.js version
        home: Vendored runtime directory (``<build>/vendor/node``)
        search_path: Search path with the runtime's bin directory first
        from_cache: Whether the archive came from the cache
    """

    version: str
    home: Path
    search_path: SearchPath
    from_cache: bool = False

    @property
    def bin_dir(self) -> Path:
        return self.home / "bin"

    def __repr__(self) -> str:
        source = "cache" if self.from_cache else "download"
        return f"<RuntimeInstall node v{self.version} @ {self.home} ({source})>"
