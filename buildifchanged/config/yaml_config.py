"""YAML task definitions.

Example buildconfig.yaml:
    config:
      cache_dir: .buildifchanged
      max_passes: 100
      jobs: 8

    tasks:
      - command: "sass main.scss -o main.css"
        inputs:
          - "**/*.scss"
        outputs:
          - "main.css"
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Union

import yaml

from ..exceptions import EmptyConfigError, YAMLConfigError
from ..task import Task, validate_tasks

CONFIG_KEYS = {'cache_dir', 'max_passes', 'jobs'}


@dataclass
class YAMLConfig:
    """Parsed YAML configuration."""
    config: Dict[str, Any] = field(default_factory=dict)
    tasks: List[Task] = field(default_factory=list)


def parse_yaml_file(path: Union[str, Path]) -> YAMLConfig:
    """Parse and validate a buildconfig.yaml file.

    Raises:
        YAMLConfigError: If the file is invalid or missing required fields
        FileNotFoundError: If the file doesn't exist
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"YAML file not found: {path}")
    try:
        with open(path, encoding='utf-8') as f:
            content = f.read()
    except (OSError, UnicodeDecodeError) as e:
        raise YAMLConfigError(f"cannot read config file '{path}': {e}")
    return parse_yaml_string(content)


def parse_yaml_string(content: str) -> YAMLConfig:
    """Parse YAML content from a string."""
    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise YAMLConfigError(f"Invalid YAML syntax: {e}")

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise YAMLConfigError("YAML root must be a mapping")
    return _validate_yaml_data(data)


def _validate_yaml_data(data: Dict[str, Any]) -> YAMLConfig:
    config = data.get('config', {}) or {}
    if not isinstance(config, dict):
        raise YAMLConfigError("'config' must be a mapping")
    _validate_options(config)

    tasks = data.get('tasks', []) or []
    if not isinstance(tasks, list):
        raise YAMLConfigError("'tasks' must be a list")
    if not tasks:
        raise EmptyConfigError("The build configuration file is empty")

    built = [_build_task(spec, i) for i, spec in enumerate(tasks)]
    return YAMLConfig(config=config, tasks=validate_tasks(built))


def _validate_options(config: Dict[str, Any]) -> None:
    unknown = set(config) - CONFIG_KEYS
    if unknown:
        raise YAMLConfigError(
            f"Unknown config option(s): {', '.join(sorted(unknown))}. "
            f"Valid options: {', '.join(sorted(CONFIG_KEYS))}"
        )
    if 'cache_dir' in config and not isinstance(config['cache_dir'], str):
        raise YAMLConfigError("'cache_dir' must be a string")
    for key in ('max_passes', 'jobs'):
        value = config.get(key)
        if value is None:
            continue
        # bool is an int subclass
        if isinstance(value, bool) or not isinstance(value, int) or value < 1:
            raise YAMLConfigError(f"'{key}' must be a positive integer")


def _pattern_list(spec: Dict[str, Any], name: str, label: str) -> List[str]:
    value = spec.get(name, [])
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if not isinstance(value, list) or not all(isinstance(p, str) for p in value):
        raise YAMLConfigError(f"Task {label}: '{name}' must be a list of strings")
    return value


def _build_task(spec: Any, index: int) -> Task:
    """Validate a single task mapping and build the Task."""
    if not isinstance(spec, dict):
        raise YAMLConfigError(f"Task {index} must be a mapping")
    if 'command' not in spec:
        raise YAMLConfigError(f"Task {index} missing required field 'command'")
    if not isinstance(spec['command'], str):
        raise YAMLConfigError(f"Task {index}: 'command' must be a string")

    label = f"'{spec['command']}'"
    inputs = _pattern_list(spec, 'inputs', label)
    outputs = _pattern_list(spec, 'outputs', label)
    return Task(spec['command'].strip(), inputs, outputs)
