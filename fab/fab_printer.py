"""
Formatting for FabLang values and AST nodes.
"""
import collections.abc
import math

from fab.fab_datatypes import (
    InternalInvariantViolation,
    Echo, Assign, StringLiteral, NumberLiteral, VarRef, PathAccess, MapLiteral,
    FabMap,
)
from fab.fab_extensions import NativeFunction

MAX_FRACTION_DIGITS = 8

_SOURCE_ESCAPES = {'\\': '\\\\', '"': '\\"', '\n': '\\n', '\r': '\\r', '\t': '\\t'}


def format_number(n: float) -> str:
    """Fixed-point text with at most 8 fractional digits and no trailing zeros."""
    if math.isnan(n):
        return "NaN"
    if math.isinf(n):
        return "Infinity" if n > 0 else "-Infinity"
    text = f"{n:.{MAX_FRACTION_DIGITS}f}".rstrip('0').rstrip('.')
    return "0" if text == "-0" else text


class Printer:
    """Renders values in their canonical print form (what `echo` writes),
    and AST nodes back into FabLang source."""

    def __init__(self):
        self._handlers = self._create_handlers()
        self._source_handlers = self._create_source_handlers()

    def pformat(self, obj) -> str:
        """Public entry point to format a runtime value."""
        handler = self._get_handler(obj)
        return handler(obj)

    def pformat_source(self, node) -> str:
        """Formats a statement or expression node as FabLang source."""
        handler = self._source_handlers.get(type(node))
        if handler is None:
            raise InternalInvariantViolation(f"Cannot format node of type {type(node).__name__}")
        return handler(node)

    def _get_handler(self, obj):
        obj_type = type(obj)
        if obj_type in self._handlers:
            return self._handlers[obj_type]
        # bool is an int subclass; it is not a FabLang value.
        if isinstance(obj, (int, float)) and not isinstance(obj, bool):
            return self._pformat_number
        if isinstance(obj, str):
            return self._pformat_str
        if isinstance(obj, collections.abc.Mapping):
            return self._pformat_map
        raise InternalInvariantViolation(f"Cannot print value of type {obj_type.__name__}")

    def _create_handlers(self):
        return {
            type(None): self._pformat_null,
            float: self._pformat_number,
            int: self._pformat_number,
            str: self._pformat_str,
            FabMap: self._pformat_map,
            NativeFunction: self._pformat_native,
        }

    def _create_source_handlers(self):
        return {
            Echo: lambda n: f"echo {self.pformat_source(n.expr)}",
            Assign: lambda n: f"${n.name} = {self.pformat_source(n.expr)}",
            StringLiteral: self._source_string,
            NumberLiteral: lambda n: format_number(n.value),
            VarRef: lambda n: f"${n.name}",
            PathAccess: lambda n: f"{self.pformat_source(n.base)}.${n.key}",
            MapLiteral: self._source_map,
        }

    # --- Values ---

    def _pformat_null(self, obj):
        return 'null'

    def _pformat_number(self, obj):
        return format_number(float(obj))

    def _pformat_str(self, obj):
        return str(obj)

    def _pformat_map(self, obj):
        items = [f"${k} = {self.pformat(v)}" for k, v in obj.items()]
        return f"[{', '.join(items)}]"

    def _pformat_native(self, obj):
        return f"[native method {obj.name}]"

    # --- Source ---

    def _source_string(self, node):
        body = "".join(_SOURCE_ESCAPES.get(c, c) for c in node.text)
        return f'"{body}"'

    def _source_map(self, node):
        items = [f"${k} = {self.pformat_source(v)}" for k, v in node.entries]
        return f"[{', '.join(items)}]"
