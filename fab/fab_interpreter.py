"""
The core FabLang interpreter: a tree-walking Evaluator over parsed statements.
"""
import os
import sys
from typing import Any, Iterable, List, Optional, TextIO

from fab.fab_datatypes import (
    Environment, FabMap, InternalInvariantViolation,
    Stmt, Expr, Echo, Assign, StringLiteral, NumberLiteral, VarRef, PathAccess, MapLiteral,
)
from fab.fab_printer import Printer


class Evaluator:
    """The FabLang execution engine.

    Holds no variables itself: the Environment is passed into every call.
    Echo output is recorded in `side_effects` and, when `output` is given,
    written to that stream as soon as it is produced.
    """
    def __init__(self, output: Optional[TextIO] = None):
        self.printer = Printer()
        self.output = output
        self.side_effects: List[dict] = []
        self.current_node = None

    def _dbg(self, *parts):
        if os.environ.get("FAB_DEBUG"):
            print("[DBG]", *parts, file=sys.stderr)

    def _emit(self, text: str):
        self.side_effects.append({'topics': ['stdout'], 'message': text})
        if self.output is not None:
            self.output.write(text + "\n")
            self.output.flush()

    def execute(self, statements: Iterable[Stmt], env: Environment) -> None:
        """Runs statements strictly in order against `env`."""
        for stmt in statements:
            self.exec_stmt(stmt, env)

    def exec_stmt(self, stmt: Stmt, env: Environment) -> None:
        self.current_node = stmt
        self._dbg("exec", stmt)
        match stmt:
            case Echo(expr=expr):
                self._emit(self.printer.pformat(self.eval(expr, env)))
            case Assign(name=name, expr=expr):
                env[name] = self.eval(expr, env)
            case _:
                raise InternalInvariantViolation(f"Unknown statement {type(stmt).__name__}")

    def eval(self, expr: Expr, env: Environment) -> Any:
        match expr:
            case StringLiteral(text=text):
                return text
            case NumberLiteral(value=value):
                return value
            case VarRef(name=name):
                # Unbound variables read as null.
                return env.get(name)
            case PathAccess(base=base, key=key):
                container = self.eval(base, env)
                if isinstance(container, FabMap):
                    return container.get(key)
                return None
            case MapLiteral(entries=entries):
                result = FabMap()
                for key, value_expr in entries:
                    result[key] = self.eval(value_expr, env)
                return result
            case _:
                raise InternalInvariantViolation(f"Unknown expression {type(expr).__name__}")
