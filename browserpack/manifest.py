"""
Package descriptors and the default package.json reader.

The core only needs `name`, `main` and the `browser`/`browserify` fields;
anything else in a manifest is carried along untouched.
"""
import json
import logging
import posixpath
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from browserpack.naming import module_root, module_root_name


logger = logging.getLogger(__name__)

MANIFEST_NAME = 'package.json'


class PackageDescriptor(BaseModel):
    """Parsed package manifest."""
    name: str = ''
    main: Optional[str] = None
    browser: Any = None
    browserify: Any = None

    model_config = ConfigDict(extra='allow', frozen=True)

    @field_validator('main', mode='before')
    @classmethod
    def drop_non_string_main(cls, value):
        # A main that is not a string cannot be resolved; treat it as absent
        return value if isinstance(value, str) and value else None

    @property
    def browser_field(self) -> Any:
        """The browser override declaration, `browser` taking precedence."""
        return self.browser or self.browserify


class PackageJsonReader:
    """
    Default manifest collaborator.

    Callable with any path under a package; reads that package's
    package.json once and serves later lookups from memory.
    """

    def __init__(self):
        self._descriptors: Dict[str, PackageDescriptor] = {}

    def __call__(self, path: str) -> PackageDescriptor:
        root = module_root(path)
        descriptor = self._descriptors.get(root)
        if descriptor is None:
            descriptor = self._load(root, module_root_name(path))
            self._descriptors[root] = descriptor
        return descriptor

    def _load(self, root: str, fallback_name: str) -> PackageDescriptor:
        manifest_path = posixpath.join(root, MANIFEST_NAME)
        try:
            with open(manifest_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except FileNotFoundError:
            logger.warning(f"No {MANIFEST_NAME} for package '{fallback_name}' at {root}")
            return PackageDescriptor(name=fallback_name)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            logger.warning(f"Unreadable {MANIFEST_NAME} at {manifest_path}: {e}")
            return PackageDescriptor(name=fallback_name)

        if not isinstance(data, dict):
            logger.warning(f"Ignoring {manifest_path}: expected an object, got {type(data).__name__}")
            return PackageDescriptor(name=fallback_name)

        data.setdefault('name', fallback_name)
        try:
            return PackageDescriptor(**data)
        except ValidationError as e:
            logger.warning(f"Invalid {manifest_path}, using defaults: {e}")
            return PackageDescriptor(name=fallback_name)
