"""
Pytest configuration for unit tests.

Provides package-tree builders and a filesystem that counts its calls.
"""
import asyncio
import json
import os

import pytest

from browserpack.fs import AsyncFileSystem

# Keep tests independent of the developer's environment
for _var in ("BROWSERPACK_PROJECT_ROOT", "BROWSERPACK_SHIMS_PATH", "BROWSERPACK_LOG_LEVEL"):
    os.environ.pop(_var, None)


class CountingFileSystem(AsyncFileSystem):
    """Real filesystem checks, counted, with a yield to force interleaving."""

    def __init__(self):
        self.calls = []

    async def exists(self, path):
        self.calls.append(("exists", path))
        await asyncio.sleep(0)
        return await super().exists(path)

    async def is_dir(self, path):
        self.calls.append(("is_dir", path))
        await asyncio.sleep(0)
        return await super().is_dir(path)


@pytest.fixture
def counting_fs():
    return CountingFileSystem()


@pytest.fixture
def project(tmp_path):
    """Empty project directory with a node_modules folder."""
    (tmp_path / "node_modules").mkdir()
    return tmp_path


@pytest.fixture
def make_package(project):
    """
    Create a package under node_modules.

    Usage: make_package("foo", {"main": "lib/x.js"}, {"lib/x.js": "..."})
    Returns the package root as a Path.
    """
    def _make(name, manifest=None, files=None, parent=None):
        base = parent if parent is not None else project / "node_modules"
        root = base / name
        root.mkdir(parents=True, exist_ok=True)
        data = {"name": name}
        data.update(manifest or {})
        (root / "package.json").write_text(json.dumps(data))
        for rel, content in (files or {}).items():
            file_path = root / rel
            file_path.parent.mkdir(parents=True, exist_ok=True)
            file_path.write_text(content)
        return root

    return _make
