"""
Bundle runtime snippets.

Wrapped modules call `__makeRelativeRequire`, so the bundle must define it
before the first registration. The alias table is embedded as a literal
object and handed to `require.alias` one entry at a time.
"""
import json
from typing import Dict


RELATIVE_REQUIRE_HELPER = """\
var __makeRelativeRequire = function(require, mappings, pref) {
  var none = {};
  var tryReq = function(name, pref) {
    var val;
    try {
      val = require(pref + '/node_modules/' + name);
      return val;
    } catch (e) {
      if (e.toString().indexOf('Cannot find module') === -1) {
        throw e;
      }

      if (pref.indexOf('node_modules') !== -1) {
        var s = pref.split('/');
        var i = s.lastIndexOf('node_modules');
        var newPref = s.slice(0, i).join('/');
        return tryReq(name, newPref);
      }
    }
    return none;
  };
  return function(name) {
    if (name in mappings) name = mappings[name];
    if (name === false) return {};
    if (!name) return;
    if (name[0] !== '.' && pref) {
      var val = tryReq(name, pref);
      if (val !== none) return val;
    }
    return require(name);
  };
};
"""


def serialize_aliases(aliases: Dict[str, str]) -> str:
    """Alias table as a flat JSON object with sorted keys."""
    for specifier, target in aliases.items():
        if not isinstance(specifier, str) or not isinstance(target, str):
            raise TypeError(f"Alias entries must be strings: {specifier!r} -> {target!r}")
    return json.dumps(aliases, sort_keys=True, ensure_ascii=False)


def render_aliases(aliases: Dict[str, str]) -> str:
    """Script registering every alias with the bundle runtime."""
    return (
        "(function() {\n"
        f"  var aliases = {serialize_aliases(aliases)};\n"
        "  Object.keys(aliases).forEach(function(from) {\n"
        "    require.alias(from, aliases[from]);\n"
        "  });\n"
        "})();\n"
    )
