"""Buildpack settings.

Defaults target the public semver resolver and the Heroku mirror of the
nodejs.org distribution. Each can be overridden from the environment, which is
how the platform (or a test harness) points the compile step elsewhere.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Mapping, Optional, Tuple

DEFAULT_RESOLVER_URL = "https://semver.io"
DEFAULT_DOWNLOAD_URL = (
    "https://s3pository.heroku.com/node/v{version}/node-v{version}-{platform}.tar.gz"
)
DEFAULT_PLATFORM = "linux-x64"

# Variables an app's config may not override during the dependency install
DENIED_ENV_VARS: Tuple[str, ...] = (
    "PATH",
    "GIT_DIR",
    "CPATH",
    "CPPATH",
    "LD_PRELOAD",
    "LIBRARY_PATH",
)


@dataclass
class BuildpackConfig:
    """Complete buildpack configuration."""

    resolver_url: str = DEFAULT_RESOLVER_URL
    download_url_template: str = DEFAULT_DOWNLOAD_URL
    platform: str = DEFAULT_PLATFORM
    default_entry: str = "server.js"
    denied_env: Tuple[str, ...] = field(default_factory=lambda: DENIED_ENV_VARS)
    http_timeout: Optional[float] = None  # None disables client timeouts
    log_level: str = "WARNING"

    def download_url(self, version: str) -> str:
        """Expand the download URL template for a resolved runtime version."""
        return self.download_url_template.format(version=version, platform=self.platform)

    def resolve_url(self, subject: str) -> str:
        return f"{self.resolver_url.rstrip('/')}/{subject}/resolve"


def load_config(environ: Optional[Mapping[str, str]] = None) -> BuildpackConfig:
    """Load configuration from environment overrides or use defaults.

    Recognised variables:
        NODEPACK_RESOLVER_URL, NODEPACK_DOWNLOAD_URL, NODEPACK_PLATFORM,
        NODEPACK_HTTP_TIMEOUT (seconds), NODEPACK_LOG_LEVEL

    Args:
        environ: Environment to read (defaults to ``os.environ``)

    Returns:
        BuildpackConfig with loaded or default values

    Raises:
        ValueError: If NODEPACK_HTTP_TIMEOUT is not a number
    """
    env = os.environ if environ is None else environ
    config = BuildpackConfig()

    config.resolver_url = env.get("NODEPACK_RESOLVER_URL") or config.resolver_url
    config.download_url_template = (
        env.get("NODEPACK_DOWNLOAD_URL") or config.download_url_template
    )
    config.platform = env.get("NODEPACK_PLATFORM") or config.platform
    config.log_level = (env.get("NODEPACK_LOG_LEVEL") or config.log_level).upper()

    timeout = env.get("NODEPACK_HTTP_TIMEOUT")
    if timeout:
        config.http_timeout = float(timeout)

    return config
