"""
config.py — optional YAML settings file.

  include_python: false   # also strip .py files
  include_yaml: false     # also strip .yml / .yaml files
  exclude: []             # fnmatch patterns on file/directory base names
  jobs: 1                 # worker threads
  verbose: false
"""
from __future__ import annotations
import os
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

import yaml

from .formats import FormatTable, build_format_table

CONFIG_FILE = "commentpurger.yml"

DEFAULT_CONFIG: Dict[str, Any] = {
    "include_python": False,
    "include_yaml": False,
    "exclude": [],
    "jobs": 1,
    "verbose": False,
}


class ConfigError(ValueError):
    pass


def _validate(cfg: Dict[str, Any], source: str) -> Dict[str, Any]:
    unknown = sorted(set(cfg) - set(DEFAULT_CONFIG))
    if unknown:
        raise ConfigError(f"{source}: unknown setting(s): {', '.join(unknown)}")
    for key in ("include_python", "include_yaml", "verbose"):
        if not isinstance(cfg[key], bool):
            raise ConfigError(f"{source}: '{key}' must be true or false")
    jobs = cfg["jobs"]
    if isinstance(jobs, bool) or not isinstance(jobs, int) or jobs < 1:
        raise ConfigError(f"{source}: 'jobs' must be a positive integer")
    exclude = cfg["exclude"]
    if not isinstance(exclude, list) or not all(isinstance(p, str) for p in exclude):
        raise ConfigError(f"{source}: 'exclude' must be a list of glob patterns")
    return cfg


def load_config(path: Optional[str] = None) -> Dict[str, Any]:
    """
    Merge the YAML file at *path* over DEFAULT_CONFIG.

    With no path, CONFIG_FILE in the working directory is used when present.
    An explicit path that does not exist is an error.
    """
    if path is None:
        if not os.path.exists(CONFIG_FILE):
            return dict(DEFAULT_CONFIG)
        path = CONFIG_FILE
    try:
        with open(path, "r", encoding="utf-8") as f:
            cfg = yaml.safe_load(f) or {}
    except OSError as e:
        raise ConfigError(f"Cannot read config file {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e
    if not isinstance(cfg, dict):
        raise ConfigError(f"{path}: expected a mapping at the top level")
    return _validate({**DEFAULT_CONFIG, **cfg}, path)


@dataclass(frozen=True)
class PurgeOptions:
    table: FormatTable = field(default_factory=build_format_table)
    exclude: Tuple[str, ...] = ()
    jobs: int = 1
    verbose: bool = False

    @classmethod
    def from_config(cls, cfg: Dict[str, Any]) -> "PurgeOptions":
        return cls(
            table=build_format_table(
                include_python=cfg["include_python"],
                include_yaml=cfg["include_yaml"],
            ),
            exclude=tuple(cfg["exclude"]),
            jobs=cfg["jobs"],
            verbose=cfg["verbose"],
        )
