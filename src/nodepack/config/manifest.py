"""package.json reader."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Union

from nodepack.errors import ManifestError

# What a lookup of a missing (or JSON null) field yields
UNSET = "null"

MANIFEST_NAME = "package.json"


def is_unset(value: Optional[str]) -> bool:
    """True for the ``"null"`` sentinel (and for None)."""
    return value is None or value == UNSET


@dataclass
class Manifest:
    """The application's package.json.

    Attributes:
        path: Location of the file
        data: Parsed JSON document
    """

    path: Path
    data: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def load(cls, path: Union[str, Path]) -> "Manifest":
        """Parse a package.json file.

        Args:
            path: Path to package.json, or to the directory containing it

        Returns:
            Parsed Manifest

        Raises:
            FileNotFoundError: If the manifest does not exist
            ManifestError: If the file is not a JSON object
        """
        manifest_path = Path(path)
        if manifest_path.is_dir():
            manifest_path = manifest_path / MANIFEST_NAME

        text = manifest_path.read_text(encoding="utf-8")
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise ManifestError(f"Unable to parse {manifest_path}: {e}") from e

        if not isinstance(data, dict):
            raise ManifestError(f"{manifest_path} must contain a JSON object")

        return cls(path=manifest_path, data=data)

    def lookup(self, dotted_key: str) -> str:
        """Look up a nested field by dotted key (e.g. ``"engines.node"``).

        Strings are returned as-is, other values JSON-encoded. A missing field,
        or one set to JSON null, yields the ``"null"`` sentinel instead of
        raising.
        """
        value: Any = self.data
        for key in dotted_key.split("."):
            if not isinstance(value, dict):
                return UNSET
            value = value.get(key)
            if value is None:
                return UNSET

        if isinstance(value, str):
            return value
        return json.dumps(value)

    @property
    def node_range(self) -> str:
        return self.lookup("engines.node")

    @property
    def npm_range(self) -> str:
        return self.lookup("engines.npm")

    @property
    def start_script(self) -> str:
        return self.lookup("scripts.start")
