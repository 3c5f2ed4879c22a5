"""
Shim table loader.

Loads the identifier -> shim module registry from YAML. The default table
ships next to this module.
"""
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterator, Optional

import yaml

from browserpack.config import ConfigError
from browserpack.naming import NODE_MODULES


DEFAULT_SHIMS_PATH = Path(__file__).parent / 'shims.yaml'


@dataclass(frozen=True)
class ShimSpec:
    """One global and the module that polyfills it."""
    identifier: str
    module: str                    # file-based name, e.g. process/browser.js
    export: Optional[str] = None   # named export to bind instead of the module


class ShimTable:
    """Read-only registry of global shims."""

    def __init__(self, shims: Dict[str, ShimSpec]):
        self._shims = dict(shims)

    @classmethod
    def from_yaml(cls, yaml_path: Path) -> 'ShimTable':
        """
        Load a shim table from YAML.

        Args:
            yaml_path: Path to a YAML file with a top-level `shims` mapping

        Returns:
            ShimTable instance

        Raises:
            ConfigError: If the file is missing or malformed
        """
        yaml_path = Path(yaml_path)
        if not yaml_path.exists():
            raise ConfigError(f"Shim table not found: {yaml_path}")

        with open(yaml_path, 'r') as f:
            try:
                data = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ConfigError(f"Invalid YAML in shim table {yaml_path}: {e}") from e

        if not isinstance(data, dict) or not isinstance(data.get('shims'), dict):
            raise ConfigError(f"Invalid shim table in {yaml_path}: expected a 'shims' mapping")

        shims = {}
        for identifier, entry in data['shims'].items():
            if not isinstance(entry, dict) or not entry.get('module'):
                raise ConfigError(f"Invalid shim '{identifier}' in {yaml_path}: missing 'module'")
            shims[str(identifier)] = ShimSpec(
                identifier=str(identifier),
                module=str(entry['module']),
                export=entry.get('export'),
            )
        return cls(shims)

    @classmethod
    def default(cls) -> 'ShimTable':
        """The shim table bundled with browserpack."""
        return cls.from_yaml(DEFAULT_SHIMS_PATH)

    def __contains__(self, identifier: str) -> bool:
        return identifier in self._shims

    def __getitem__(self, identifier: str) -> ShimSpec:
        return self._shims[identifier]

    def __iter__(self) -> Iterator[str]:
        return iter(self._shims)

    def __len__(self) -> int:
        return len(self._shims)

    def file_path(self, identifier: str, project_root: Path) -> Path:
        """Where the shim's own source lives in a project."""
        return Path(project_root) / NODE_MODULES / self._shims[identifier].module

    def module_names(self) -> Dict[str, str]:
        """Identifier -> shim module name."""
        return {identifier: spec.module for identifier, spec in self._shims.items()}
