"""
Module wrapping.

Turns one source file into a self-registering unit for the bundle runtime:

    require.register("<file-based name>", function(exports, require, module) {
      require = __makeRelativeRequire(require, <per-module table>, "<package>");
      <global shim wrapper around the source>
    });

JSON files are registered as plain values.
"""
import json
import logging
from typing import Any, Dict, Optional

from browserpack.browser_overrides import browser_mapping, disabled_relative_overrides, global_overrides
from browserpack.fs import AsyncFileSystem
from browserpack.main_file import DescriptorLookup, MainFileResolver, RootMainCache
from browserpack.naming import file_based_name, module_full_root_name, module_root
from browserpack.shims.binder import GlobalShimBinder
from browserpack.shims.table import ShimTable


logger = logging.getLogger(__name__)


def _compact(value: Any) -> str:
    return json.dumps(value, separators=(',', ':'), ensure_ascii=False)


def json_definition(module_name: str, source: str) -> str:
    """Register a JSON file as a module whose exports are its parsed content."""
    try:
        body = _compact(json.loads(source))
    except json.JSONDecodeError as e:
        logger.warning(f"Could not parse JSON module {module_name}, embedding as-is: {e}")
        body = source.strip()
    return (
        f"\nrequire.register({json.dumps(module_name)}, function(exports, require, module) {{\n"
        f"  module.exports = {body};\n"
        f"}});"
    )


class ModuleWrapper:
    """Wraps bundle files, resolving package mains on first use."""

    def __init__(
        self,
        get_package_descriptor: DescriptorLookup,
        cache: RootMainCache,
        binder: Optional[GlobalShimBinder] = None,
        fs: Optional[AsyncFileSystem] = None,
    ):
        """
        Args:
            get_package_descriptor: Manifest lookup for any path in a package
            cache: Root main cache owned by the current build
            binder: Global shim binder (defaults to the bundled shim table)
            fs: Async filesystem predicates
        """
        self.get_package_descriptor = get_package_descriptor
        self.cache = cache
        self.binder = binder or GlobalShimBinder(ShimTable.default())
        self.resolver = MainFileResolver(get_package_descriptor, fs)

    async def wrap(self, path: str, source: str) -> str:
        """
        Wrap one source file.

        Args:
            path: Path of the file inside node_modules
            source: File content

        Returns:
            Registration unit text
        """
        await self.resolver.resolve(path, self.cache)
        return self.generate(path, source)

    def module_table(self, path: str) -> Dict[str, Any]:
        """Specifier resolution table private to the module at `path`."""
        descriptor = self.get_package_descriptor(path)
        mapping = browser_mapping(path, descriptor, self.cache.get(module_root(path)))
        table = global_overrides(path, mapping)
        # Relative disables behave like `{"events": false}`: require yields {}
        table.update(disabled_relative_overrides(path, mapping))
        return table

    def generate(self, path: str, source: str) -> str:
        """Emit the registration unit; the package main must already be cached."""
        module_name = file_based_name(path)
        if str(path).endswith('.json'):
            return json_definition(module_name, source)

        table = self.module_table(path)
        wrapper = self.binder.select(source, module_name)
        body = wrapper.wrap(source.strip())
        return (
            f"\nrequire.register({json.dumps(module_name)}, function(exports, require, module) {{\n"
            f"  require = __makeRelativeRequire(require, {_compact(table)}, "
            f"{json.dumps(module_full_root_name(path))});\n"
            f"  {body}\n"
            f"}});"
        )
