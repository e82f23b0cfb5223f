"""Node.js runtime resolution and installation."""

from .fetcher import RuntimeFetcher, TeeReader
from .resolver import VersionResolver, range_advisory
from .types import ResolvedVersions, RuntimeInstall

__all__ = [
    "ResolvedVersions",
    "RuntimeFetcher",
    "RuntimeInstall",
    "TeeReader",
    "VersionResolver",
    "range_advisory",
]
