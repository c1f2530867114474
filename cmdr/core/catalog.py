"""
Named command catalogs.

A catalog is a YAML file mapping human-friendly names to command templates::

    commands:
      listing:
        path: /bin/ls
        params: "-l [{{WHAT}}]"
        dir: /tmp
"""
from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Union

import yaml
from pydantic import ValidationError

from cmdr.core.base import Command
from cmdr.core.exceptions import ConfigError


class CommandCatalog:
    """A fixed set of named Command templates."""

    def __init__(self, commands: Dict[str, Command] | None = None) -> None:
        self.commands: Dict[str, Command] = dict(commands or {})

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CommandCatalog":
        entries = (data or {}).get("commands") or {}
        if not isinstance(entries, dict):
            raise ConfigError("catalog 'commands' must be a mapping")
        commands: Dict[str, Command] = {}
        for name, entry in entries.items():
            if isinstance(entry, str):
                entry = {"path": entry}
            try:
                commands[str(name)] = Command.model_validate(entry)
            except ValidationError as e:
                raise ConfigError(
                    f"invalid catalog entry {name!r}: {e}", details={"name": name}
                ) from e
        return cls(commands)

    @classmethod
    def load(cls, path: Union[str, Path]) -> "CommandCatalog":
        path = Path(path)
        if not path.exists():
            raise ConfigError(f"Catalog file not found: {path}")
        try:
            data = yaml.safe_load(path.read_text()) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Failed to parse catalog {path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError(f"Catalog {path} must contain a mapping")
        return cls.from_dict(data)

    def names(self) -> List[str]:
        return sorted(self.commands)

    def get(self, name: str) -> Command:
        try:
            return self.commands[name]
        except KeyError:
            raise ConfigError(
                f"Unknown command: {name}", details={"available": self.names()}
            ) from None

    def __contains__(self, name: str) -> bool:
        return name in self.commands

    def __len__(self) -> int:
        return len(self.commands)
