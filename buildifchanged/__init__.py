"""build-if-changed: minimalistic incremental build tool.

Runs shell commands whose watched files changed since the previous run,
pass after pass, until a pass runs nothing.

Usage:
    from buildifchanged import run_config
    result = run_config('buildconfig')

CLI:
    build-if-changed
"""

__version__ = '0.3.0'

from .task import Task
from .detector import CheckResult, CheckStatus, check_task
from .executor import execute, verify_outputs
from .store import StateStore, FileStateStore, InMemoryStateStore, StoredState
from .engine import FixpointEngine, RunResult, EngineState
from .exceptions import (
    BuildIfChangedError,
    ConfigError,
    ExecError,
    ExecErrorKind,
    HashingError,
    StoreError,
)
from .runner import run_config, main

__all__ = [
    'Task',
    'CheckResult',
    'CheckStatus',
    'check_task',
    'execute',
    'verify_outputs',
    'StateStore',
    'FileStateStore',
    'InMemoryStateStore',
    'StoredState',
    'FixpointEngine',
    'RunResult',
    'EngineState',
    'BuildIfChangedError',
    'ConfigError',
    'ExecError',
    'ExecErrorKind',
    'HashingError',
    'StoreError',
    'run_config',
    'main',
]
