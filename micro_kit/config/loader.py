"""
YAML configuration files.

A ``ConfigFile`` wraps the first document of a YAML file and offers typed
accessors over dotted paths, so adjacent subsystems (API server, broker
clients, logging) can pull the values they need and report exactly which
component is missing.
"""

import logging
from pathlib import Path
from typing import Any

import yaml

from micro_kit.exceptions import BadYamlError, ConfigError, ConfigIOError, MissingComponentError

logger = logging.getLogger(__name__)

_MISSING = object()


def _component_path(path: str) -> str:
    """Render a dotted path the way error messages name components."""
    return " -> ".join(path.split("."))


class ConfigFile:
    """Parsed YAML configuration."""

    def __init__(self, document: Any, source: str | None = None):
        self._document = document if document is not None else {}
        self.source = source

    @classmethod
    def open(cls, path: str | Path) -> "ConfigFile":
        """
        Load a configuration file.

        Args:
            path: Path of the YAML file

        Returns:
            ConfigFile wrapping the first YAML document

        Raises:
            ConfigIOError: If the file cannot be read
            BadYamlError: If the file is not valid YAML
        """
        config_path = Path(path)
        try:
            text = config_path.read_text(encoding="utf-8")
        except OSError as e:
            raise ConfigIOError(str(config_path), e.strerror or str(e)) from e

        config = cls.from_string(text, source=str(config_path))
        logger.info(f"Loaded configuration from {config_path}")
        return config

    @classmethod
    def from_string(cls, text: str, source: str | None = None) -> "ConfigFile":
        """Parse configuration from YAML text. Only the first document is kept."""
        try:
            documents = list(yaml.safe_load_all(text))
        except yaml.YAMLError as e:
            raise BadYamlError(str(e)) from e

        return cls(documents[0] if documents else None, source=source)

    def get_config(self) -> Any:
        """Return the raw parsed document."""
        return self._document

    def __getitem__(self, key: str) -> Any:
        if not isinstance(self._document, dict):
            raise KeyError(key)
        return self._document[key]

    def __contains__(self, path: str) -> bool:
        return self._lookup(path) is not _MISSING

    def _lookup(self, path: str) -> Any:
        node = self._document
        for part in path.split("."):
            if not isinstance(node, dict) or part not in node:
                return _MISSING
            node = node[part]
        return node

    def get(self, path: str, default: Any = None) -> Any:
        """Return the value at a dotted path, or ``default`` if absent."""
        value = self._lookup(path)
        return default if value is _MISSING or value is None else value

    def _require(self, path: str, default: Any) -> Any:
        value = self._lookup(path)
        if value is _MISSING or value is None:
            if default is not _MISSING:
                return default
            raise MissingComponentError(_component_path(path))
        return value

    def get_str(self, path: str, default: Any = _MISSING) -> str:
        """Return a string value; scalars are converted, mappings are rejected."""
        value = self._require(path, default)
        if isinstance(value, (dict, list)):
            raise ConfigError(
                f"{_component_path(path)} must be a string", config_key=path
            )
        return str(value)

    def get_int(self, path: str, default: Any = _MISSING) -> int:
        """Return an integer value."""
        value = self._require(path, default)
        if isinstance(value, bool):
            raise ConfigError(
                f"{_component_path(path)} must be an integer", config_key=path
            )
        try:
            return int(value)
        except (TypeError, ValueError) as e:
            raise ConfigError(
                f"{_component_path(path)} must be an integer", config_key=path
            ) from e

    def get_list(self, path: str, default: Any = _MISSING) -> list[Any]:
        """Return a sequence value. A single scalar is wrapped in a list."""
        value = self._require(path, default)
        if isinstance(value, dict):
            raise ConfigError(
                f"{_component_path(path)} must be a sequence", config_key=path
            )
        if isinstance(value, (list, tuple)):
            return list(value)
        return [value]

    def __repr__(self) -> str:
        return f"ConfigFile(source={self.source!r})"
