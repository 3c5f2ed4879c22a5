"""
Bundle session.

One session per build: it owns the root main cache and the collaborators
that share it. Start a new session for a fresh build, since manifests may
have changed between builds.
"""
import asyncio
import logging
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Set

from browserpack.aliases import AliasTableBuilder
from browserpack.config import BundlerConfig
from browserpack.fs import AsyncFileSystem
from browserpack.main_file import DescriptorLookup, RootMainCache
from browserpack.manifest import PackageJsonReader
from browserpack.naming import file_based_name
from browserpack.runtime import RELATIVE_REQUIRE_HELPER, render_aliases
from browserpack.shims.binder import GlobalShimBinder
from browserpack.shims.table import ShimTable
from browserpack.wrapper import ModuleWrapper


logger = logging.getLogger(__name__)


class BundleSession:
    """Wraps the files of one bundle and builds its alias table."""

    def __init__(
        self,
        config: BundlerConfig,
        get_package_descriptor: Optional[DescriptorLookup] = None,
        fs: Optional[AsyncFileSystem] = None,
    ):
        self.config = config
        self.cache = RootMainCache()
        self.get_package_descriptor = get_package_descriptor or PackageJsonReader()

        if config.shims_path is not None:
            self.shim_table = ShimTable.from_yaml(config.shims_path)
        else:
            self.shim_table = ShimTable.default()

        self.binder = GlobalShimBinder(self.shim_table)
        self.wrapper = ModuleWrapper(self.get_package_descriptor, self.cache, self.binder, fs)
        self.used_shims: Set[str] = set()

    def _path(self, path) -> str:
        path = Path(path)
        if not path.is_absolute():
            path = self.config.project_root / path
        return path.as_posix()

    async def wrap(self, path, source: str) -> str:
        """Wrap one file and record the shims it needs."""
        path = self._path(path)
        wrapped = await self.wrapper.wrap(path, source)
        if not path.endswith('.json'):
            self.used_shims.update(self.binder.used_shims([(file_based_name(path), source)]))
        return wrapped

    async def wrap_files(self, paths: Iterable) -> Dict[str, str]:
        """
        Read and wrap files concurrently.

        Returns:
            Path -> wrapped text, in input order
        """
        paths = [self._path(p) for p in paths]
        sources = await asyncio.gather(*(asyncio.to_thread(Path(p).read_text, encoding='utf-8') for p in paths))
        wrapped = await asyncio.gather(*(self.wrap(p, s) for p, s in zip(paths, sources)))
        logger.info(f"Wrapped {len(paths)} modules from {len(self.cache)} packages")
        return dict(zip(paths, wrapped))

    def aliases(self, bundle_files: Iterable) -> Dict[str, str]:
        """Alias table for the files in this bundle."""
        builder = AliasTableBuilder(self.get_package_descriptor, self.shim_table, self.config.project_root)
        return builder.build(self.cache, [self._path(p) for p in bundle_files], self.used_shims)

    def render(self, wrapped: Dict[str, str]) -> str:
        """Runtime helper, wrapped modules and alias registration, in that order."""
        parts: List[str] = [RELATIVE_REQUIRE_HELPER]
        parts.extend(wrapped.values())
        parts.append('\n' + render_aliases(self.aliases(wrapped.keys())))
        return '\n'.join(parts)
