"""
Unit tests for the shim table and global shim binder.
"""
import pytest
import yaml
from pathlib import Path

from browserpack.config import ConfigError
from browserpack.shims.binder import NO_GLOBALS, GlobalShimBinder
from browserpack.shims.table import ShimSpec, ShimTable


@pytest.fixture
def binder():
    return GlobalShimBinder(ShimTable.default())


class TestShimTable:
    """Test shim table loading."""

    def test_default_table(self):
        table = ShimTable.default()

        assert "process" in table
        assert "Buffer" in table
        assert table["Buffer"].export == "Buffer"
        assert table.module_names() == {"process": "process/browser.js", "Buffer": "buffer/index.js"}

    def test_file_path(self, tmp_path):
        table = ShimTable.default()

        assert table.file_path("process", tmp_path) == tmp_path / "node_modules" / "process" / "browser.js"

    def test_from_yaml(self, tmp_path):
        shims_file = tmp_path / "shims.yaml"
        with open(shims_file, 'w') as f:
            yaml.dump({'shims': {'setImmediate': {'module': 'timers-browserify/main.js',
                                                  'export': 'setImmediate'}}}, f)

        table = ShimTable.from_yaml(shims_file)

        assert list(table) == ["setImmediate"]
        assert table["setImmediate"] == ShimSpec("setImmediate", "timers-browserify/main.js", "setImmediate")

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(ConfigError, match="not found"):
            ShimTable.from_yaml(tmp_path / "nope.yaml")

    def test_entry_without_module_raises(self, tmp_path):
        shims_file = tmp_path / "shims.yaml"
        shims_file.write_text("shims:\n  process: {}\n")

        with pytest.raises(ConfigError, match="missing 'module'"):
            ShimTable.from_yaml(shims_file)


class TestGlobalShimBinder:
    """Test static global detection and wrapper selection."""

    def test_scan_finds_globals(self, binder):
        source = "if (process.env.NODE_ENV) { var b = Buffer.from('x'); }"

        assert binder.scan(source) == {"process", "Buffer"}

    def test_scan_ignores_property_access_and_longer_names(self, binder):
        source = "obj.process(); var processor = 1; var $Buffer = 2; var Buffers;"

        assert binder.scan(source) == set()

    @pytest.mark.parametrize("source,expected", [
        ("var e = {...process.env};", {"process"}),
        ("var bytes = [...Buffer.from(x)];", {"Buffer"}),
        ("f(...process.argv, a.Buffer)", {"process"}),
    ])
    def test_scan_finds_globals_after_spread(self, binder, source, expected):
        assert binder.scan(source) == expected

    def test_scan_is_conservative_about_comments_and_strings(self, binder):
        assert binder.scan("// uses process later\nvar s = 'Buffer';") == {"process", "Buffer"}

    @pytest.mark.parametrize("source", ["", "\x00\x01", "var a = /process(/;"])
    def test_scan_never_throws(self, binder, source):
        binder.scan(source)

    def test_select_no_globals_is_plain_iife(self, binder):
        wrapper = binder.select("module.exports = 1;")

        assert wrapper is NO_GLOBALS
        assert wrapper.wrap("BODY") == "(function() {\n    BODY\n  })();"

    def test_select_binds_exactly_used_globals(self, binder):
        wrapper = binder.select("Buffer.alloc(1); process.nextTick(f);")

        assert wrapper.identifiers == ("Buffer", "process")
        assert wrapper.wrap("BODY") == (
            '(function(Buffer, process) {\n'
            '    BODY\n'
            '  })(require("Buffer")["Buffer"], require("process"));'
        )

    def test_shim_module_is_not_bound_to_itself(self, binder):
        wrapper = binder.select("var process = module.exports = {};", "process/browser.js")

        assert wrapper is NO_GLOBALS

    def test_used_shims_accumulates(self, binder):
        sources = [
            ("a/index.js", "process.env"),
            ("b/index.js", "nothing here"),
            ("c/index.js", "Buffer.isBuffer(x)"),
            ("process/browser.js", "var process = {};"),
        ]

        assert binder.used_shims(sources) == {"process", "Buffer"}

    def test_empty_table_binds_nothing(self):
        binder = GlobalShimBinder(ShimTable({}))

        assert binder.scan("process.env") == set()
        assert binder.select("process.env") is NO_GLOBALS

    def test_used_shims_accepts_plain_sources(self, binder):
        assert binder.used_shims(["process.env", "x = 1"]) == {"process"}
