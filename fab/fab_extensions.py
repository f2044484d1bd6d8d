"""
Native extension libraries.

Host code registers a fixed set of (name, arity, implementation) entries under
a namespace before any user statement runs. The namespace is bound into the
Environment as an ordinary FabMap, so `echo $math.$sqrt` resolves like any
other path access.
"""
import math
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List

from fab.fab_datatypes import Environment, FabMap


@dataclass(frozen=True)
class NativeFunction:
    """A host-implemented callable entry exposed through an extension namespace."""
    name: str
    arity: int
    impl: Callable[..., Any] = field(compare=False)

    def __call__(self, *args):
        if len(args) != self.arity:
            raise TypeError(f"{self.name} expects {self.arity} argument(s), got {len(args)}")
        return self.impl(*args)


@dataclass
class ExtensionLibrary:
    namespace: str
    functions: List[NativeFunction] = field(default_factory=list)

    def add(self, name: str, arity: int, impl: Callable[..., Any]) -> 'ExtensionLibrary':
        if any(fn.name == name for fn in self.functions):
            raise ValueError(f"'{name}' is already registered in '{self.namespace}'")
        self.functions.append(NativeFunction(name, arity, impl))
        return self

    def to_map(self) -> FabMap:
        entries = FabMap()
        for fn in self.functions:
            entries[fn.name] = fn
        return entries


def register_library(env: Environment, library: ExtensionLibrary) -> FabMap:
    """Binds `library` into `env` under its namespace name and returns the bound map."""
    entries = library.to_map()
    env[library.namespace] = entries
    return entries


def _math_library() -> ExtensionLibrary:
    lib = ExtensionLibrary("math")
    lib.add("abs", 1, lambda x: float(abs(x)))
    lib.add("ceil", 1, lambda x: float(math.ceil(x)))
    lib.add("floor", 1, lambda x: float(math.floor(x)))
    lib.add("max", 2, lambda a, b: float(max(a, b)))
    lib.add("min", 2, lambda a, b: float(min(a, b)))
    lib.add("pow", 2, lambda b, e: float(math.pow(b, e)))
    lib.add("round", 1, lambda x: float(round(x)))
    lib.add("sqrt", 1, lambda x: math.sqrt(x))
    return lib


# Built-in libraries selectable from configuration, by namespace name.
BUILTIN_LIBRARIES: Dict[str, Callable[[], ExtensionLibrary]] = {
    "math": _math_library,
}


def builtin_library(name: str) -> ExtensionLibrary:
    try:
        factory = BUILTIN_LIBRARIES[name]
    except KeyError:
        raise KeyError(f"Unknown extension library: '{name}'") from None
    return factory()
