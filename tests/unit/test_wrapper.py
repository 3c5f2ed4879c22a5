"""
Unit tests for module wrapping.
"""
import json
import logging

import pytest

from browserpack.main_file import RootMainCache
from browserpack.manifest import PackageJsonReader
from browserpack.wrapper import ModuleWrapper, json_definition


def _wrapper(cache=None, fs=None):
    return ModuleWrapper(PackageJsonReader(), cache if cache is not None else RootMainCache(), fs=fs)


class TestModuleWrapper:
    """Test registration unit generation."""

    @pytest.mark.asyncio
    async def test_plain_module_shape(self, make_package):
        root = make_package("foo", files={"index.js": "module.exports = 42;\n"})

        wrapped = await _wrapper().wrap(str(root / "index.js"), "module.exports = 42;\n")

        assert wrapped == (
            '\nrequire.register("foo/index.js", function(exports, require, module) {\n'
            '  require = __makeRelativeRequire(require, {}, "foo");\n'
            '  (function() {\n'
            '    module.exports = 42;\n'
            '  })();\n'
            '});'
        )

    @pytest.mark.asyncio
    async def test_wrap_populates_cache_for_root(self, make_package):
        root = make_package("foo", {"main": "lib/main.js"}, {"lib/main.js": "", "lib/a.js": ""})
        cache = RootMainCache()

        await _wrapper(cache).wrap(str(root / "lib" / "a.js"), "")

        assert cache.get(root.as_posix()) == (root / "lib" / "main.js").as_posix()

    @pytest.mark.asyncio
    async def test_global_and_disabled_relative_overrides_in_table(self, make_package):
        root = make_package(
            "pkg",
            {"browser": {"fs": False, "http": "./lib/xhr.js", "./a.js": False, "./b.js": "./c.js"}},
            {"index.js": "", "a.js": "", "lib/xhr.js": ""},
        )

        wrapped = await _wrapper().wrap(str(root / "a.js"), "require('fs');")

        expected_table = json.dumps(
            {"fs": False, "http": "pkg/lib/xhr.js", "./a.js": False}, separators=(',', ':'))
        assert f"__makeRelativeRequire(require, {expected_table}, \"pkg\")" in wrapped

    @pytest.mark.asyncio
    async def test_disabled_relative_keyed_from_module_directory(self, make_package):
        root = make_package("pkg", {"browser": {"./lib/server.js": False}}, {"index.js": "", "lib/x/a.js": ""})

        wrapper = _wrapper()
        await wrapper.wrap(str(root / "lib" / "x" / "a.js"), "")

        assert wrapper.module_table(str(root / "lib" / "x" / "a.js")) == {"../server.js": False}

    @pytest.mark.asyncio
    async def test_shimmed_globals_are_injected(self, make_package):
        root = make_package("foo", files={"index.js": ""})

        wrapped = await _wrapper().wrap(str(root / "index.js"), "process.nextTick(cb);")

        assert '(function(process) {\n    process.nextTick(cb);\n  })(require("process"));' in wrapped

    @pytest.mark.asyncio
    async def test_nested_package_uses_file_based_identity(self, make_package, project):
        outer = make_package("a", files={"index.js": ""})
        inner = make_package("b", files={"index.js": ""}, parent=outer / "node_modules")

        wrapped = await _wrapper().wrap(str(inner / "index.js"), "")

        assert wrapped.startswith('\nrequire.register("a/node_modules/b/index.js"')
        assert '"a/node_modules/b");' in wrapped

    @pytest.mark.asyncio
    async def test_wrap_is_idempotent(self, make_package):
        root = make_package("pkg", {"browser": {"fs": False}}, {"index.js": ""})
        cache = RootMainCache()
        wrapper = _wrapper(cache)
        source = "var fs = require('fs'); Buffer.from('a');"

        first = await wrapper.wrap(str(root / "index.js"), source)
        second = await wrapper.wrap(str(root / "index.js"), source)

        assert first == second

    @pytest.mark.asyncio
    async def test_json_module(self, make_package):
        root = make_package("data", files={"index.js": "", "table.json": '{"a": [1, 2]}'})

        wrapped = await _wrapper().wrap(str(root / "table.json"), '{"a": [1, 2]}')

        assert wrapped == (
            '\nrequire.register("data/table.json", function(exports, require, module) {\n'
            '  module.exports = {"a":[1,2]};\n'
            '});'
        )
        assert "__makeRelativeRequire" not in wrapped

    @pytest.mark.asyncio
    async def test_unexpected_browser_shape_degrades(self, make_package):
        root = make_package("odd", {"browser": ["./a.js"]}, {"index.js": ""})

        wrapped = await _wrapper().wrap(str(root / "index.js"), "")

        assert '__makeRelativeRequire(require, {}, "odd")' in wrapped


class TestJsonDefinition:
    """Test JSON module definitions."""

    def test_invalid_json_embedded_with_warning(self, caplog):
        with caplog.at_level(logging.WARNING, logger="browserpack.wrapper"):
            wrapped = json_definition("x/bad.json", "{not json}\n")

        assert "module.exports = {not json};" in wrapped
        assert "x/bad.json" in caplog.text
