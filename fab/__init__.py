from fab.fab_datatypes import (
    FabError, LexicalError, FabSyntaxError, InternalInvariantViolation,
    Environment, FabMap,
)
from fab.fab_lexer import Token, TokenType, tokenize
from fab.fab_parser import Parser, parse
from fab.fab_interpreter import Evaluator
from fab.fab_printer import Printer
from fab.fab_extensions import NativeFunction, ExtensionLibrary, register_library
from fab.fab_config import FabConfig, ConfigError, load_config
from fab.fab_runtime import ScriptRunner, ExecutionResult

__version__ = "0.1.0"
