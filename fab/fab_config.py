"""
Loads the optional `fab.yaml` run configuration.

    extensions: [math]     # built-in libraries registered before the script runs
    dump-env: yaml         # print the final environment (json | yaml) after a run
"""
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

import yaml

from fab.fab_extensions import BUILTIN_LIBRARIES

CONFIG_FILENAME = "fab.yaml"
CONFIG_ENV_VAR = "FAB_CONFIG"
DUMP_FORMATS = ("json", "yaml")


class ConfigError(Exception):
    pass


@dataclass
class FabConfig:
    extensions: List[str] = field(default_factory=list)
    dump_env: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> 'FabConfig':
        if data is None:
            return cls()
        if not isinstance(data, dict):
            raise ConfigError(f"Configuration must be a mapping, not {type(data).__name__}")
        unknown = set(data) - {"extensions", "dump-env"}
        if unknown:
            raise ConfigError(f"Unknown configuration key(s): {', '.join(sorted(map(str, unknown)))}")

        extensions = data.get("extensions")
        if extensions is None:
            extensions = []
        if not isinstance(extensions, list) or not all(isinstance(e, str) for e in extensions):
            raise ConfigError("'extensions' must be a list of library names")
        for name in extensions:
            if name not in BUILTIN_LIBRARIES:
                raise ConfigError(f"Unknown extension library: '{name}'")

        dump_env = data.get("dump-env")
        if dump_env is not None and dump_env not in DUMP_FORMATS:
            raise ConfigError(f"'dump-env' must be one of {', '.join(DUMP_FORMATS)}")
        return cls(extensions=list(extensions), dump_env=dump_env)


def load_config(path: Optional[str] = None, source_dir: Optional[str] = None) -> FabConfig:
    """Reads configuration from `path`, $FAB_CONFIG, or fab.yaml beside the script.

    An explicitly named file must exist; the fab.yaml fallback is optional.
    """
    explicit = path or os.environ.get(CONFIG_ENV_VAR)
    if explicit:
        candidate = Path(explicit)
        if not candidate.is_file():
            raise ConfigError(f"Configuration file not found: {explicit}")
    else:
        candidate = Path(source_dir or os.getcwd()) / CONFIG_FILENAME
        if not candidate.is_file():
            return FabConfig()
    try:
        data = yaml.safe_load(candidate.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {candidate}: {e}") from e
    return FabConfig.from_dict(data)
