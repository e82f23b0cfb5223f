"""Configuration and manifest handling for nodepack."""

from .manifest import UNSET, Manifest, is_unset
from .settings import DENIED_ENV_VARS, BuildpackConfig, load_config

__all__ = [
    "BuildpackConfig",
    "DENIED_ENV_VARS",
    "Manifest",
    "UNSET",
    "is_unset",
    "load_config",
]
