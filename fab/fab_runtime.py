# fab_runtime.py

from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, Optional, TextIO

from fab.fab_lexer import tokenize
from fab.fab_parser import parse
from fab.fab_interpreter import Evaluator
from fab.fab_datatypes import Environment, FabError
from fab.fab_extensions import ExtensionLibrary, builtin_library, register_library
from fab.fab_config import FabConfig

# ===================================================================
# Script Execution
# ===================================================================

ErrorLocation = Dict[str, Any]


@dataclass
class ExecutionResult:
    """The structured result of a script execution."""
    status: Literal['success', 'error']
    error_message: Optional[str] = None
    error_token: Optional[ErrorLocation] = None
    side_effects: List[Dict] = field(default_factory=list)

    @property
    def output(self) -> List[str]:
        """Lines written by `echo`, in order."""
        return [e['message'] for e in self.side_effects if e.get('topics') == ['stdout']]

    def format_error(self) -> str:
        """The user-facing error line(s), prefixed with 'Error: '."""
        if self.status != 'error':
            return ""
        return f"Error: {self.error_message or 'Unknown error'}"


class ScriptRunner:
    """Tokenizes, parses, and executes FabLang code against one Environment.

    Extension libraries are registered into the environment when the runner
    is created, before any script statement runs.
    """

    def __init__(self, config: Optional[FabConfig] = None,
                 libraries: Optional[List[ExtensionLibrary]] = None,
                 output: Optional[TextIO] = None):
        self.config = config or FabConfig()
        self.environment = Environment()
        self.evaluator = Evaluator(output=output)
        for name in self.config.extensions:
            register_library(self.environment, builtin_library(name))
        for library in libraries or []:
            register_library(self.environment, library)

    def _source_context(self, source: str, line: int, col: Optional[int], radius: int = 2) -> str:
        lines = source.splitlines()
        if line == len(lines) + 1 and (not source or source.endswith('\n')):
            # Positions at end of input may sit on the empty line after a final newline.
            lines.append("")
        if not line or line < 1 or line > len(lines):
            return ""
        start = max(1, line - radius)
        end = min(len(lines), line + radius)
        width = len(str(end))
        out = []
        for i in range(start, end + 1):
            prefix = ">" if i == line else " "
            ln = str(i).rjust(width)
            content = lines[i - 1]
            out.append(f"{prefix} {ln} | {content}")
            if i == line and col is not None:
                caret = " " * max(col - 1, 0)
                out.append(f"  {' ' * width} | {caret}^")
        return "\n".join(out)

    def _format_error(self, e: Exception, source: str) -> tuple[str, Optional[ErrorLocation]]:
        match e:
            case FabError():
                msg = f"{e.kind}: {e.message}"
                line, col = e.line, e.col
                if line is None and self.evaluator.current_node is not None:
                    loc = self.evaluator.current_node.loc or {}
                    line, col = loc.get('line'), loc.get('col')
            case _:
                msg = f"InternalError: {type(e).__name__}: {e}"
                loc = getattr(self.evaluator.current_node, 'loc', None) or {}
                line, col = loc.get('line'), loc.get('col')

        token = None
        if line is not None:
            token = {'line': line, 'col': col}
            msg = f"{msg} (line {line}, col {col})"
            context = self._source_context(source, line, col)
            if context:
                msg = f"{msg}\n{context}"
        return msg, token

    def handle_script(self, source_code: str) -> ExecutionResult:
        """The main entry point to execute a script."""
        self.evaluator.side_effects = []
        self.evaluator.current_node = None
        try:
            tokens = tokenize(source_code)
            self.evaluator._dbg("tokens", len(tokens))
            statements = parse(tokens)
            self.evaluator._dbg("statements", len(statements))
            self.evaluator.execute(statements, self.environment)
        except Exception as e:
            err_msg, err_token = self._format_error(e, source_code)
            self.evaluator.side_effects.append({'topics': ['stderr'], 'message': err_msg})
            return ExecutionResult(
                status='error',
                error_message=err_msg,
                error_token=err_token,
                side_effects=self.evaluator.side_effects,
            )
        return ExecutionResult(status='success', side_effects=self.evaluator.side_effects)
