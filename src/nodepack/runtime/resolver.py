"""Resolve semver ranges from package.json to concrete versions."""

from __future__ import annotations

import logging
from typing import Optional

import httpx
import semver

from nodepack.config.manifest import Manifest, is_unset
from nodepack.config.settings import BuildpackConfig
from nodepack.errors import ResolutionError
from nodepack.utils import output

from .types import ResolvedVersions

logger = logging.getLogger(__name__)


def range_advisory(semver_range: Optional[str]) -> Optional[str]:
    """Return advice for a risky ``engines.node`` range, if any.

    Args:
        semver_range: Raw range from package.json (the "null" sentinel if unset)

    Returns:
        Advisory text, or None if the range looks reasonable
    """
    if semver_range is None or is_unset(semver_range):
        return "Specify a node version in package.json"
    if semver_range == "*":
        return "Avoid using semver ranges like '*' in engines.node"
    if semver_range.startswith(">"):
        return "Avoid using semver ranges starting with '>' in engines.node"
    return None


class VersionResolver:
    """Client for the semver resolution service.

    ``GET <resolver_url>/<subject>/resolve?range=<range>`` answers with a single
    version string in the response body.
    """

    def __init__(self, config: BuildpackConfig, client: httpx.Client):
        """Initialize resolver.

        Args:
            config: Buildpack configuration
            client: HTTP client used for resolver requests
        """
        self.config = config
        self.client = client

    def resolve(self, subject: str, semver_range: str) -> str:
        """Resolve a range for one subject ("node" or "npm").

        Args:
            subject: What to resolve
            semver_range: Range to satisfy; "" asks for the latest stable release

        Returns:
            Concrete version string

        Raises:
            httpx.HTTPError: On transport failure or a non-2xx response
            ResolutionError: If the response is not a version
        """
        url = self.config.resolve_url(subject)
        logger.debug("Resolving %s range %r via %s", subject, semver_range, url)

        response = self.client.get(url, params={"range": semver_range})
        response.raise_for_status()

        version = response.text.strip()
        try:
            semver.Version.parse(version)
        except ValueError as e:
            raise ResolutionError(subject, semver_range, version) from e
        return version

    def resolve_versions(self, manifest: Manifest) -> ResolvedVersions:
        """Resolve node and npm versions for an application.

        An unset node range resolves to the latest stable release. npm is only
        resolved when package.json asks for a specific range; otherwise the
        npm bundled with node is kept.
        """
        node_range = manifest.node_range
        tip = range_advisory(node_range)
        if tip:
            output.protip(tip)
        if is_unset(node_range):
            node_range = ""

        node_version = self.resolve("node", node_range)
        output.status(f"Requested node range:  {node_range}")
        output.status(f"Resolved node version: {node_version}")

        npm_range = manifest.npm_range
        npm_version = ""
        if is_unset(npm_range) or not npm_range:
            requested_npm = None
        else:
            requested_npm = npm_range
            npm_version = self.resolve("npm", npm_range)
            output.status(f"Requested npm range:   {npm_range}")
            output.status(f"Resolved npm version:  {npm_version}")

        versions = ResolvedVersions(
            node=node_version,
            npm=npm_version,
            node_range=node_range,
            npm_range=requested_npm,
        )
        logger.debug("Resolved %r", versions)
        return versions
