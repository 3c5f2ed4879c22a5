"""
Canonical naming for modules that live under node_modules.

Everything here is lexical: no filesystem access, no state. Paths are
normalized to forward slashes before any other processing.
"""
import posixpath
from typing import List, Tuple


NODE_MODULES = 'node_modules'


class ModuleRootError(ValueError):
    """Raised when a path does not sit inside a node_modules package."""
    pass


def slashes(path: str) -> str:
    """Normalize path separators to forward slashes."""
    return path.replace('\\', '/')


def _parts(path: str) -> List[str]:
    return posixpath.normpath(slashes(str(path))).split('/')


def _package_span(parts: List[str]) -> Tuple[int, int, int]:
    """
    Locate the package segments of a split path.

    Returns:
        (first, last, end) where first/last are the indices of the outermost
        and innermost node_modules segments and end is the index just past
        the package name (two segments for @scope/name).
    """
    indices = [i for i, part in enumerate(parts) if part == NODE_MODULES]
    if not indices or indices[-1] + 1 >= len(parts):
        raise ModuleRootError(f"Not inside a node_modules package: {'/'.join(parts)}")

    first, last = indices[0], indices[-1]
    end = last + 2
    if parts[last + 1].startswith('@'):
        if last + 2 >= len(parts):
            raise ModuleRootError(f"Incomplete scoped package path: {'/'.join(parts)}")
        end = last + 3
    return first, last, end


def is_module_path(path: str) -> bool:
    """Check whether a path belongs to a node_modules package."""
    try:
        _package_span(_parts(path))
    except ModuleRootError:
        return False
    return True


def module_root(path: str) -> str:
    """Directory of the package that owns `path`."""
    parts = _parts(path)
    _, _, end = _package_span(parts)
    return '/'.join(parts[:end]) or '/'


def module_root_name(path: str) -> str:
    """Package name as it appears on disk, e.g. `foo` or `@scope/foo`."""
    parts = _parts(path)
    _, last, end = _package_span(parts)
    return '/'.join(parts[last + 1:end])


def module_full_root_name(path: str) -> str:
    """File-based name of the package root, e.g. `a/node_modules/b`."""
    parts = _parts(path)
    first, _, end = _package_span(parts)
    return '/'.join(parts[first + 1:end])


def relative_to_root(path: str, rel: str) -> str:
    """Join a package-relative specifier onto the root owning `path`."""
    return posixpath.normpath(posixpath.join(module_root(path), slashes(rel)))


def root_based_name(path: str) -> str:
    """`<package>/<path relative to the package root>`."""
    rel = posixpath.relpath(posixpath.normpath(slashes(str(path))), module_root(path))
    return f"{module_root_name(path)}/{rel}"


def file_based_name(path: str) -> str:
    """
    Registration identity of a file.

    The path below the outermost node_modules directory, so every physical
    file gets exactly one name no matter which specifier reached it.
    """
    parts = _parts(path)
    first, _, _ = _package_span(parts)
    return '/'.join(parts[first + 1:])
