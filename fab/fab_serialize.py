from __future__ import annotations

import json
from typing import Any
import collections.abc

import yaml

from fab.fab_datatypes import Environment
from fab.fab_extensions import NativeFunction


# --------------------------
# Helpers
# --------------------------

def _to_builtin(obj: Any) -> Any:
    # FabMap/Environment -> plain dicts; integral floats -> int so dumps read naturally
    if isinstance(obj, Environment):
        return {k: _to_builtin(v) for k, v in obj.items()}
    if isinstance(obj, collections.abc.Mapping):
        return {k: _to_builtin(v) for k, v in obj.items()}
    if isinstance(obj, NativeFunction):
        return f"[native method {obj.name}]"
    if isinstance(obj, float) and obj.is_integer():
        return int(obj)
    return obj


# --------------------------
# Public API
# --------------------------

def serialize(value: Any, *, fmt: str, pretty: bool = True) -> str:
    """
    Convert a FabLang value (or a whole Environment) into text.
    - fmt: 'json' | 'yaml'
    """
    f = (fmt or '').lower()
    built = _to_builtin(value)
    if f == 'json':
        return json.dumps(built, ensure_ascii=False, indent=2 if pretty else None)
    if f == 'yaml':
        return yaml.safe_dump(built, sort_keys=False, allow_unicode=True)
    raise ValueError(f"Unsupported serialization format: {fmt!r}")


__all__ = [
    "serialize",
]
