"""Locating and loading build configurations.

Two formats are supported, chosen by file name:
- ``buildconfig``: line-oriented (see parser)
- ``buildconfig.yaml`` / ``buildconfig.yml``: YAML (see yaml_config)
"""

from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Union

from ..exceptions import ConfigNotFoundError
from ..fingerprint import DEFAULT_WORKERS
from ..store import DEFAULT_CACHE_DIR
from ..task import Task
from .parser import parse_config_file, parse_config_string
from .yaml_config import YAMLConfig, parse_yaml_file, parse_yaml_string

DEFAULT_BUILDFILE = 'buildconfig'
CONFIG_NAMES = (DEFAULT_BUILDFILE, 'buildconfig.yaml', 'buildconfig.yml')
YAML_SUFFIXES = ('.yaml', '.yml')


@dataclass
class RunOptions:
    """Runtime options. CLI flags override the YAML ``config:`` mapping."""
    cache_dir: str = DEFAULT_CACHE_DIR
    max_passes: Optional[int] = None
    jobs: int = DEFAULT_WORKERS

    def merged(self, **overrides) -> 'RunOptions':
        """Return a copy with every non-None override applied."""
        values = dict(self.__dict__)
        values.update({k: v for k, v in overrides.items() if v is not None})
        return RunOptions(**values)


@dataclass
class LoadedConfig:
    """A configuration file and everything read from it."""
    path: Path
    tasks: List[Task]
    options: RunOptions

    @property
    def base_dir(self) -> Path:
        return self.path.parent

    @property
    def cache_dir(self) -> Path:
        return self.base_dir / self.options.cache_dir


def find_config_file(start_dir: Union[str, Path, None] = None) -> Path:
    """Search start_dir and its parents for a configuration file.

    Raises:
        ConfigNotFoundError: If no directory up to the root has one
    """
    start = Path(start_dir) if start_dir is not None else Path.cwd()
    start = start.resolve()
    for directory in (start, *start.parents):
        for name in CONFIG_NAMES:
            candidate = directory / name
            if candidate.is_file():
                return candidate
    raise ConfigNotFoundError(
        f"No '{DEFAULT_BUILDFILE}' file found in {start} or one of its "
        f"parent directories"
    )


def load_config(path: Union[str, Path]) -> LoadedConfig:
    """Load tasks and options from a config file of either format."""
    path = Path(path).resolve()
    if not path.is_file():
        raise ConfigNotFoundError(f"Config file not found: {path}")
    if path.suffix in YAML_SUFFIXES:
        parsed = parse_yaml_file(path)
        options = RunOptions().merged(**parsed.config)
        return LoadedConfig(path, parsed.tasks, options)
    return LoadedConfig(path, parse_config_file(path), RunOptions())


__all__ = [
    'CONFIG_NAMES',
    'DEFAULT_BUILDFILE',
    'LoadedConfig',
    'RunOptions',
    'YAMLConfig',
    'find_config_file',
    'load_config',
    'parse_config_file',
    'parse_config_string',
    'parse_yaml_file',
    'parse_yaml_string',
]
