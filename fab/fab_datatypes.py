"""
Defines the core data types for the FabLang runtime.

This module provides the AST node classes produced by the parser, the
Environment the evaluator binds variables into, and the error types
raised by each stage of the pipeline.
"""

from abc import ABC
from collections import UserDict
from typing import List, Dict, Any, Optional, Tuple
import collections.abc


# =================================================================
# Errors
# =================================================================

class FabError(Exception):
    """Base class for every error the pipeline reports to the user."""
    kind = "FabError"

    def __init__(self, message: str, line: Optional[int] = None, col: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.line = line
        self.col = col

    def __str__(self) -> str:
        if self.line is not None and self.col is not None:
            return f"{self.message} at {self.line}:{self.col}"
        return self.message


class LexicalError(FabError):
    """An unrecognized character (or unterminated literal) in the source."""
    kind = "LexicalError"

    def __init__(self, line: int, col: int, char: Optional[str], reason: Optional[str] = None):
        self.char = char
        self.reason = reason or "unexpected character"
        if char:
            message = f"{self.reason[0].upper()}{self.reason[1:]} {char!r}"
        else:
            message = f"{self.reason[0].upper()}{self.reason[1:]}"
        super().__init__(message, line, col)


class FabSyntaxError(FabError):
    """A grammar violation: what the parser expected and the token it found instead."""
    kind = "SyntaxError"

    def __init__(self, line: int, col: int, expected: str, found: str):
        self.expected = expected
        self.found = found
        super().__init__(f"Expected {expected}, found {found}", line, col)


class InternalInvariantViolation(FabError):
    """A node or value reached a point that should be structurally unreachable."""
    kind = "InternalError"


# =================================================================
# Abstract Base Classes
# =================================================================

class Node(ABC):
    """Abstract base class for all AST nodes.

    Nodes may carry a `loc` dict ({'line': .., 'col': ..}) attached by the
    parser. Equality compares structure only, never location.
    """
    loc: Optional[Dict[str, int]] = None

    def __repr__(self) -> str:
        from fab.fab_printer import Printer
        return f"<{type(self).__name__} {Printer().pformat_source(self)}>"


class Stmt(Node):
    """Abstract base class for statements."""
    pass


class Expr(Node):
    """Abstract base class for expressions."""
    pass


# =================================================================
# Statements
# =================================================================

class Echo(Stmt):
    """`echo <expr>`: print the canonical form of a value."""
    def __init__(self, expr: Expr):
        self.expr = expr

    def __eq__(self, other):
        return isinstance(other, Echo) and self.expr == other.expr


class Assign(Stmt):
    """`$name = <expr>`: bind a value into the environment."""
    def __init__(self, name: str, expr: Expr):
        self.name = name
        self.expr = expr

    def __eq__(self, other):
        return isinstance(other, Assign) and self.name == other.name and self.expr == other.expr


# =================================================================
# Expressions
# =================================================================

class StringLiteral(Expr):
    def __init__(self, text: str):
        self.text = text

    def __eq__(self, other):
        return isinstance(other, StringLiteral) and self.text == other.text


class NumberLiteral(Expr):
    def __init__(self, value: float):
        self.value = value

    def __eq__(self, other):
        return isinstance(other, NumberLiteral) and self.value == other.value


class VarRef(Expr):
    """A variable reference, e.g. `$user`."""
    def __init__(self, name: str):
        self.name = name

    def __eq__(self, other):
        return isinstance(other, VarRef) and self.name == other.name


class PathAccess(Expr):
    """A single `.$key` lookup applied to a base expression.

    Chains are left-associative: `$a.$b.$c` is
    PathAccess(PathAccess(VarRef('a'), 'b'), 'c').
    """
    def __init__(self, base: Expr, key: str):
        self.base = base
        self.key = key

    def __eq__(self, other):
        return isinstance(other, PathAccess) and self.base == other.base and self.key == other.key


class MapLiteral(Expr):
    """A bracketed `[$key = expr, ...]` literal.

    Entries keep their written order. Duplicate keys are legal here; they are
    collapsed when the literal is evaluated.
    """
    def __init__(self, entries: Optional[List[Tuple[str, Expr]]] = None):
        self.entries: List[Tuple[str, Expr]] = list(entries or [])

    def __eq__(self, other):
        return isinstance(other, MapLiteral) and self.entries == other.entries


# =================================================================
# Core Runtime Types
# =================================================================

class FabMap(UserDict):
    """The runtime map value built from a map literal.

    Keys are unique and iterate in insertion order. Rebinding an existing key
    overwrites its value in place; the key keeps its original position.
    """

    def __setitem__(self, key: str, value: Any):
        if not isinstance(key, str):
            raise TypeError(f"FabMap key must be a str, not {type(key)}")
        self.data[key] = value

    def __repr__(self):
        from fab.fab_printer import Printer
        return Printer().pformat(self)


class Environment:
    """The single mutable name -> value mapping of one interpreter run.

    There is no parent chain: every variable lives here, and a later
    assignment simply overwrites the earlier binding.
    """
    def __init__(self, bindings: Optional[Dict[str, Any]] = None):
        self.bindings: Dict[str, Any] = dict(bindings or {})

    def __setitem__(self, key: str, value: Any):
        if not isinstance(key, str):
            raise TypeError(f"Environment key must be a str, not {type(key)}")
        self.bindings[key] = value

    def __getitem__(self, key: str) -> Any:
        return self.bindings[key]

    def __contains__(self, key: Any) -> bool:
        return key in self.bindings

    def __len__(self) -> int:
        return len(self.bindings)

    def get(self, key: str, default: Any = None) -> Any:
        """Gets a value, returning a default if not bound."""
        return self.bindings.get(key, default)

    def keys(self) -> collections.abc.KeysView:
        return self.bindings.keys()

    def items(self) -> collections.abc.ItemsView:
        return self.bindings.items()

    def __eq__(self, other):
        return isinstance(other, Environment) and self.bindings == other.bindings

    def __repr__(self) -> str:
        keys = ', '.join(self.bindings.keys())
        return f"<Environment bindings=[{keys}]>"
