"""
Configuration for browserpack.

Loads from a YAML file or from environment variables.
"""
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import yaml


class ConfigError(Exception):
    """Raised when configuration or shim table files are unusable."""
    pass


LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')


@dataclass
class BundlerConfig:
    """Settings for one bundling session."""
    project_root: Path
    shims_path: Optional[Path] = None
    log_level: str = 'WARNING'

    def __post_init__(self):
        self.project_root = Path(self.project_root).expanduser()
        if self.shims_path is not None:
            self.shims_path = Path(self.shims_path).expanduser()
            if not self.shims_path.is_absolute():
                self.shims_path = self.project_root / self.shims_path
        self.log_level = str(self.log_level).upper()
        if self.log_level not in LOG_LEVELS:
            raise ConfigError(f"Invalid log_level '{self.log_level}', expected one of {', '.join(LOG_LEVELS)}")

    @classmethod
    def from_yaml(cls, yaml_path: Path) -> 'BundlerConfig':
        """
        Load configuration from a YAML file.

        A relative project_root is resolved against the file's directory,
        a relative shims_path against project_root.

        Args:
            yaml_path: Path to YAML config file

        Returns:
            BundlerConfig instance

        Raises:
            ConfigError: If the file is missing, malformed, or required fields are absent
        """
        yaml_path = Path(yaml_path)
        if not yaml_path.exists():
            raise ConfigError(f"Config not found: {yaml_path}")

        with open(yaml_path, 'r') as f:
            try:
                data = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ConfigError(f"Invalid YAML in config {yaml_path}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigError(f"Invalid config in {yaml_path}: must be a YAML dict")
        if 'project_root' not in data:
            raise ConfigError(f"Missing required field in {yaml_path}: project_root")

        project_root = Path(data['project_root']).expanduser()
        if not project_root.is_absolute():
            project_root = yaml_path.parent / project_root

        return cls(
            project_root=project_root,
            shims_path=data.get('shims_path'),
            log_level=data.get('log_level', 'WARNING'),
        )

    @classmethod
    def from_env(cls) -> 'BundlerConfig':
        """Load configuration from BROWSERPACK_* environment variables."""
        return cls(
            project_root=Path(os.getenv('BROWSERPACK_PROJECT_ROOT', os.getcwd())),
            shims_path=os.getenv('BROWSERPACK_SHIMS_PATH') or None,
            log_level=os.getenv('BROWSERPACK_LOG_LEVEL', 'WARNING'),
        )
