"""
Config file discovery and loading.

A Restify config file is YAML or JSON::

    database:
      host: localhost
      user: shop
      pass: secret
      db: shop
    schema:
      User:
        name: {type: string}
        profile: {type: Profile, relation: OneToOne, as: owner}
      Profile:
        bio: {type: string}

Both parsers normally keep the last of two equal keys. Here a repeated
collection or field name is rejected with
:class:`~restify.core.errors.DuplicateNameError`.

Tags:
    restify, configuration, yaml, json, loader
"""

from __future__ import annotations

import json
import os
from collections.abc import Hashable
from pathlib import Path
from typing import Any

import yaml

from restify.core.errors import ConfigError, DuplicateNameError, MissingConfigError

from .settings import RestifyConfig

CONFIG_ENV_VAR = "RESTIFY_CONFIG"
DEFAULT_CONFIG_FILES = ("restify.yaml", "restify.yml", "restify.json")


class _UniqueKeyLoader(yaml.SafeLoader):
    """SafeLoader that refuses duplicate mapping keys."""

    def construct_mapping(self, node: yaml.MappingNode, deep: bool = False) -> dict[Any, Any]:
        seen: set[Any] = set()
        for key_node, _value_node in node.value:
            key = self.construct_object(key_node, deep=deep)
            if not isinstance(key, Hashable):
                continue
            if key in seen:
                raise DuplicateNameError(key)
            seen.add(key)
        return super().construct_mapping(node, deep=deep)


def _unique_pairs(pairs: list[tuple[str, Any]]) -> dict[str, Any]:
    result: dict[str, Any] = {}
    for key, value in pairs:
        if key in result:
            raise DuplicateNameError(key)
        result[key] = value
    return result


def parse_document(text: str, fmt: str = "yaml") -> dict[str, Any]:
    """Parse config text (``fmt`` is ``"yaml"`` or ``"json"``).

    Raises:
        DuplicateNameError: A mapping repeats a key.
        ConfigError: The text is not valid or not a mapping.
    """
    try:
        if fmt == "json":
            data = json.loads(text, object_pairs_hook=_unique_pairs)
        else:
            data = yaml.load(text, Loader=_UniqueKeyLoader)  # noqa: S506 - SafeLoader subclass
    except (yaml.YAMLError, json.JSONDecodeError) as e:
        raise ConfigError(f"Invalid {fmt.upper()} config: {e}", cause=e) from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config must be a mapping, got {type(data).__name__}")
    return data


def find_config(directory: Path | None = None) -> Path:
    """Locate the config file.

    ``RESTIFY_CONFIG`` wins; otherwise the first of ``restify.yaml``,
    ``restify.yml``, ``restify.json`` found in ``directory`` (default: cwd).

    Raises:
        MissingConfigError: No config file could be found.
    """
    explicit = os.environ.get(CONFIG_ENV_VAR)
    if explicit:
        return Path(explicit)

    root = (directory or Path.cwd()).resolve()
    for name in DEFAULT_CONFIG_FILES:
        candidate = root / name
        if candidate.is_file():
            return candidate
    raise MissingConfigError(
        CONFIG_ENV_VAR,
        f"No config file found in {root} (looked for {', '.join(DEFAULT_CONFIG_FILES)})",
    )


def load_config(path: Path | str) -> RestifyConfig:
    """Read and validate a YAML or JSON config file."""
    path = Path(path)
    if not path.is_file():
        raise MissingConfigError(str(path), f"Config file not found: {path}")

    fmt = "json" if path.suffix.lower() == ".json" else "yaml"
    data = parse_document(path.read_text(encoding="utf-8"), fmt)
    return RestifyConfig.from_mapping(data)


__all__ = [
    "CONFIG_ENV_VAR",
    "DEFAULT_CONFIG_FILES",
    "find_config",
    "load_config",
    "parse_document",
]
