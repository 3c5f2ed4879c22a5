"""
Browser field overrides.

A package's `browser` (or legacy `browserify`) field redirects specifiers
when the package is delivered to a browser. The mapping is split into:
- relative overrides: `./lib/node.js -> ./lib/browser.js`, aliased bundle-wide
- global overrides: `fs -> false`, `http -> ./lib/xhr.js`, passed to each module
- disabled relative overrides: `./lib/server.js -> false`, re-expressed
  relative to the requiring module
"""
import logging
import posixpath
from enum import Enum
from typing import Any, Dict, Optional

from browserpack.manifest import PackageDescriptor
from browserpack.naming import (
    file_based_name,
    module_full_root_name,
    module_root,
    relative_to_root,
    root_based_name,
)


logger = logging.getLogger(__name__)


class Disabled(Enum):
    """Mapping value for a specifier stubbed out as an empty module."""
    DISABLED = 'disabled'


DISABLED = Disabled.DISABLED

BrowserMapping = Dict[str, Any]


def is_relative(specifier: Any) -> bool:
    """Check if a specifier is package-relative (`./x`, `../x`)."""
    if not isinstance(specifier, str):
        return False
    return specifier in ('.', '..') or specifier.startswith('./') or specifier.startswith('../')


def is_disabled(value: Any) -> bool:
    return value is DISABLED


def _normalize_value(value: Any) -> Any:
    if value is DISABLED or not value:
        return DISABLED
    return value


def browser_mapping(path: str, descriptor: PackageDescriptor, default_main: Optional[str]) -> BrowserMapping:
    """
    Build the browser override mapping for the package owning `path`.

    Args:
        path: Any file inside the package
        descriptor: The package's manifest
        default_main: The package's resolved main file, if already known

    Returns:
        Ordered mapping of specifier to replacement or DISABLED
    """
    browser = descriptor.browser_field

    if isinstance(browser, dict):
        return {str(key): _normalize_value(value) for key, value in browser.items()}

    if isinstance(browser, str) and browser:
        # Legacy shorthand: the string replaces the default main
        if not default_main:
            return {}
        main = posixpath.relpath(posixpath.normpath(default_main), module_root(path))
        mapping = posixpath.normpath(posixpath.join('.', browser))
        if main == mapping:
            return {}
        return {f"./{main}": f"./{mapping}"}

    if browser:
        logger.debug(f"Ignoring browser field of unexpected type {type(browser).__name__} "
                     f"in package '{descriptor.name}'")
    return {}


def relative_overrides(path: str, mapping: BrowserMapping) -> Dict[str, str]:
    """
    Alias table entries for relative overrides.

    Both canonical names of each overridden file point at the file-based
    name of its replacement. Disabled entries are left to the wrapper.
    """
    overrides: Dict[str, str] = {}
    for key, value in mapping.items():
        if not is_relative(key) or not isinstance(value, str):
            continue
        target = relative_to_root(path, key)
        source = file_based_name(relative_to_root(path, value))
        overrides[root_based_name(target)] = source
        overrides[file_based_name(target)] = source
    return overrides


def global_overrides(path: str, mapping: BrowserMapping) -> Dict[str, Any]:
    """
    Per-module table entries for bare specifiers.

    Relative replacement values are canonicalized to root-based names;
    disabled values become `False`.
    """
    overrides: Dict[str, Any] = {}
    for key, value in mapping.items():
        if is_relative(key):
            continue
        if is_disabled(value):
            overrides[key] = False
        elif is_relative(value):
            overrides[key] = root_based_name(relative_to_root(path, value))
        else:
            overrides[key] = value
    return overrides


def disabled_relative_overrides(path: str, mapping: BrowserMapping) -> Dict[str, bool]:
    """
    Disabled relative keys, re-expressed relative to the module at `path`.

    `{"./lib/server.js": false}` seen from `pkg/lib/a.js` becomes
    `{"./server.js": False}`, the form that module will actually request.
    """
    module_dir = posixpath.dirname(file_based_name(path))
    package = module_full_root_name(path)

    overrides: Dict[str, bool] = {}
    for key, value in mapping.items():
        if not is_relative(key) or not is_disabled(value):
            continue
        target = posixpath.normpath(posixpath.join(package, key))
        rel = posixpath.relpath(target, module_dir)
        if not (rel.startswith('./') or rel.startswith('../')):
            rel = f"./{rel}"
        overrides[rel] = False
    return overrides
