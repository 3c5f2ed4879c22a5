"""
Bundle-wide alias table.

Built once per bundle after every file is wrapped. Maps requestable
specifiers (bare package names, overridden relative targets, shimmed
globals) to file-based module names.
"""
import logging
from pathlib import Path
from typing import Dict, Iterable, Set

from browserpack.browser_overrides import browser_mapping, relative_overrides
from browserpack.main_file import DEFAULT_MAIN, DescriptorLookup, RootMainCache
from browserpack.naming import file_based_name, is_module_path, module_full_root_name
from browserpack.shims.table import ShimTable


logger = logging.getLogger(__name__)


def bundle_module_names(bundle_files: Iterable[str]) -> Set[str]:
    """File-based names of the node_modules files in a bundle."""
    return {file_based_name(str(path)) for path in bundle_files if is_module_path(str(path))}


class AliasTableBuilder:
    """Builds the alias table for one bundle."""

    def __init__(self, get_package_descriptor: DescriptorLookup, shim_table: ShimTable, project_root: Path):
        self.get_package_descriptor = get_package_descriptor
        self.shim_table = shim_table
        self.project_root = Path(project_root)

    def package_aliases(self, root: str, main: str) -> Dict[str, str]:
        """Candidate aliases for one package: its bare name plus relative overrides."""
        mapping = browser_mapping(root, self.get_package_descriptor(root), main)
        aliases = relative_overrides(root, mapping)

        package = module_full_root_name(root)
        name = file_based_name(main)
        if name != f"{package}/{DEFAULT_MAIN}":
            aliases[package] = name
        return aliases

    def shim_aliases(self, used_shims: Iterable[str]) -> Dict[str, str]:
        aliases: Dict[str, str] = {}
        for identifier in sorted(used_shims):
            if identifier not in self.shim_table:
                continue
            shim_path = self.shim_table.file_path(identifier, self.project_root)
            aliases[identifier] = file_based_name(str(shim_path))
        return aliases

    def build(self, cache: RootMainCache, bundle_files: Iterable[str], used_shims: Iterable[str]) -> Dict[str, str]:
        """
        Build the alias table.

        Args:
            cache: Root main cache populated while wrapping the bundle
            bundle_files: Paths of every file in the bundle
            used_shims: Shim identifiers bound while wrapping

        Returns:
            Flat mapping of specifier to file-based module name
        """
        in_bundle = bundle_module_names(bundle_files)

        aliases: Dict[str, str] = {}
        for root, main in cache.items():
            for specifier, target in self.package_aliases(root, main).items():
                # Partial bundles routinely leave some targets out
                if target not in in_bundle:
                    logger.debug(f"Skipping alias {specifier} -> {target}: not in bundle")
                    continue
                aliases[specifier] = target

        aliases.update(self.shim_aliases(used_shims))
        return aliases


def required_aliases(
    cache: RootMainCache,
    bundle_files: Iterable[str],
    used_shims: Iterable[str],
    get_package_descriptor: DescriptorLookup,
    shim_table: ShimTable,
    project_root: Path,
) -> Dict[str, str]:
    """Functional form of AliasTableBuilder.build."""
    builder = AliasTableBuilder(get_package_descriptor, shim_table, project_root)
    return builder.build(cache, bundle_files, used_shims)
