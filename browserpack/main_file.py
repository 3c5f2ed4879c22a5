"""
Main-file resolution for packages.

Determines the file that stands for a package's public entry point, honoring
`main`, implicit index files, and the package's own browser override of its
main. Results are memoized per package root in a caller-owned RootMainCache.
"""
import asyncio
import logging
import posixpath
from typing import Awaitable, Callable, Dict, Iterator, Optional, Tuple

from browserpack.browser_overrides import BrowserMapping, browser_mapping
from browserpack.fs import AsyncFileSystem
from browserpack.manifest import PackageDescriptor
from browserpack.naming import module_root, slashes


logger = logging.getLogger(__name__)

DEFAULT_MAIN = 'index.js'

DescriptorLookup = Callable[[str], PackageDescriptor]


def _join(root: str, rel: str) -> str:
    return posixpath.normpath(posixpath.join(root, slashes(rel)))


class RootMainCache:
    """
    Package root -> resolved main file, for the lifetime of one build.

    Concurrent lookups for a root that is still resolving share the same
    in-flight task, so each root is resolved at most once.
    """

    def __init__(self):
        self._mains: Dict[str, str] = {}
        self._in_flight: Dict[str, asyncio.Task] = {}

    def get(self, root: str) -> Optional[str]:
        return self._mains.get(root)

    def __contains__(self, root: str) -> bool:
        return root in self._mains

    def __len__(self) -> int:
        return len(self._mains)

    def __iter__(self) -> Iterator[str]:
        return iter(self._mains)

    def items(self) -> Iterator[Tuple[str, str]]:
        return iter(self._mains.items())

    async def get_or_compute(self, root: str, compute: Callable[[], Awaitable[str]]) -> str:
        """
        Return the cached main for `root`, computing it at most once.

        Args:
            root: Package root directory
            compute: Coroutine factory producing the main file path

        Returns:
            Resolved main file path
        """
        if root in self._mains:
            return self._mains[root]

        task = self._in_flight.get(root)
        if task is None:
            # Registered before the first await so later callers find it
            task = asyncio.ensure_future(self._settle(root, compute))
            self._in_flight[root] = task
        return await task

    async def _settle(self, root: str, compute: Callable[[], Awaitable[str]]) -> str:
        try:
            main = await compute()
            self._mains[root] = main
            logger.debug(f"Resolved main for {root}: {main}")
            return main
        finally:
            self._in_flight.pop(root, None)


def mapped_main_file(mapping: BrowserMapping, root: str, file_path: str) -> str:
    """Apply a package's relative browser overrides to its own main file."""
    for key, value in mapping.items():
        if key and isinstance(value, str) and file_path == _join(root, key):
            file_path = _join(root, value)
    return file_path


class MainFileResolver:
    """Resolves and caches package main files."""

    def __init__(self, get_package_descriptor: DescriptorLookup, fs: Optional[AsyncFileSystem] = None):
        """
        Args:
            get_package_descriptor: Manifest lookup for any path in a package
            fs: Async filesystem predicates (defaults to the real filesystem)
        """
        self.get_package_descriptor = get_package_descriptor
        self.fs = fs or AsyncFileSystem()

    async def resolve(self, path: str, cache: RootMainCache) -> str:
        """Main file of the package owning `path`, via the cache."""
        root = module_root(path)
        return await cache.get_or_compute(root, lambda: self._main_file(path))

    async def _main_file_name(self, declared: Optional[str], root: str) -> str:
        candidate = posixpath.normpath(posixpath.join(root, declared or DEFAULT_MAIN))
        if await self.fs.is_dir(candidate):
            return posixpath.join(candidate, DEFAULT_MAIN)
        if await self.fs.exists(f"{candidate}.js"):
            return f"{candidate}.js"
        return candidate

    async def _main_file(self, path: str) -> str:
        root = module_root(path)
        descriptor = self.get_package_descriptor(path)

        main = await self._main_file_name(descriptor.main, root)

        # A package may redirect its own main for the browser
        main = mapped_main_file(browser_mapping(path, descriptor, main), root, main)

        if await self.fs.exists(main) or posixpath.relpath(main, root) == DEFAULT_MAIN:
            return main

        logger.warning(f"Main file for package '{descriptor.name}' does not exist ({main}), "
                       f"assuming {DEFAULT_MAIN}")
        return posixpath.join(root, DEFAULT_MAIN)
