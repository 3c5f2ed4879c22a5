"""
Static detection of shimmed globals.

A lexical scan, not a parse: an identifier counts as used wherever it appears
as a standalone token, comments and strings included. Over-reporting only
costs an unused shim; under-reporting breaks the module at runtime.
"""
import json
import re
from dataclasses import dataclass
from typing import FrozenSet, Iterable, Optional, Set, Tuple, Union

from browserpack.shims.table import ShimTable


@dataclass(frozen=True)
class GlobalWrapper:
    """Wraps a module body so shimmed globals are in scope."""
    shims: Tuple[Tuple[str, str], ...] = ()   # (identifier, value expression)

    @property
    def identifiers(self) -> Tuple[str, ...]:
        return tuple(identifier for identifier, _ in self.shims)

    def wrap(self, body: str) -> str:
        params = ', '.join(identifier for identifier, _ in self.shims)
        args = ', '.join(value for _, value in self.shims)
        return (
            f"(function({params}) {{\n"
            f"    {body}\n"
            f"  }})({args});"
        )


NO_GLOBALS = GlobalWrapper()


class GlobalShimBinder:
    """Chooses the global wrapper for a module's source."""

    def __init__(self, table: ShimTable):
        self.table = table
        names = sorted(table, key=len, reverse=True)
        if names:
            alternatives = '|'.join(re.escape(name) for name in names)
            # Not preceded by an identifier character or a single property dot;
            # a spread (`...process`) still counts as a use
            self._pattern: Optional[re.Pattern] = re.compile(
                rf"(?<![\w$])(?:(?<=\.\.\.)|(?<!\.))({alternatives})(?![\w$])"
            )
        else:
            self._pattern = None

    def scan(self, source: str) -> FrozenSet[str]:
        """Shim identifiers referenced anywhere in `source`."""
        if self._pattern is None or not source:
            return frozenset()
        return frozenset(match.group(1) for match in self._pattern.finditer(source))

    def select(self, source: str, module_name: Optional[str] = None) -> GlobalWrapper:
        """
        Wrapper injecting exactly the globals `source` references.

        Args:
            source: Module source text
            module_name: File-based name of the module; a shim module is never
                bound to itself

        Returns:
            GlobalWrapper (NO_GLOBALS when nothing needs shimming)
        """
        found = self._bindable(source, module_name)
        if not found:
            return NO_GLOBALS
        return GlobalWrapper(tuple((identifier, self._value(identifier)) for identifier in found))

    def used_shims(self, sources: Iterable[Union[str, Tuple[str, str]]]) -> Set[str]:
        """Every identifier bound across source texts or (module_name, source) pairs."""
        used: Set[str] = set()
        for item in sources:
            module_name, source = (None, item) if isinstance(item, str) else item
            used.update(self._bindable(source, module_name))
        return used

    def _bindable(self, source: str, module_name: Optional[str]) -> Tuple[str, ...]:
        return tuple(sorted(
            identifier for identifier in self.scan(source)
            if self.table[identifier].module != module_name
        ))

    def _value(self, identifier: str) -> str:
        spec = self.table[identifier]
        expression = f"require({json.dumps(identifier)})"
        if spec.export:
            expression = f"{expression}[{json.dumps(spec.export)}]"
        return expression
