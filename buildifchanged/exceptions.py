"""Exception hierarchy for build-if-changed.

Every error carries the process exit code the CLI reports for it, so
library code only raises and the runner decides how to terminate.
"""

from enum import Enum
from typing import Optional


class BuildIfChangedError(Exception):
    """Base class for all errors raised by build-if-changed."""
    exit_code = 1


# =============================================================================
# Configuration errors
# =============================================================================

class ConfigError(BuildIfChangedError):
    """Malformed or missing configuration. Raised before any task runs."""
    exit_code = 2


class ConfigNotFoundError(ConfigError):
    """No configuration file in the directory or any of its parents."""
    exit_code = 1


class MissingHeaderError(ConfigError):
    """Pattern lines appear before the first `[command]` header."""


class MalformedConfigError(ConfigError):
    """Generic structural problem (e.g. empty command)."""


class DuplicateTaskError(ConfigError):
    """Two tasks share the same command text."""


class EmptyConfigError(ConfigError):
    """The configuration declares no tasks at all."""
    exit_code = 3


class NoPatternsError(ConfigError):
    """A task section has no pattern lines."""
    exit_code = 6


class YAMLConfigError(ConfigError):
    """Invalid YAML syntax or structure."""


class PassLimitExceeded(ConfigError):
    """The scheduler did not reach a fixpoint within the pass ceiling.

    Usually means two tasks keep invalidating each other's files.
    """
    exit_code = 8

    def __init__(self, max_passes: int, tasks_executed: int):
        self.max_passes = max_passes
        self.tasks_executed = tasks_executed
        super().__init__(
            f"no fixpoint reached after {max_passes} pass(es) "
            f"({tasks_executed} task execution(s)); check for tasks that "
            f"invalidate each other's files"
        )


# =============================================================================
# Runtime errors
# =============================================================================

class HashingError(BuildIfChangedError):
    """A watched file could not be read while fingerprinting."""
    exit_code = 4

    def __init__(self, path: str, cause: OSError):
        self.path = path
        self.cause = cause
        super().__init__(f"failed to read '{path}': {cause}")


class StoreError(BuildIfChangedError):
    """Persisted fingerprints could not be read or written."""
    exit_code = 4


class ExecErrorKind(Enum):
    """Why a task execution failed."""
    NONZERO_EXIT = "non-zero exit"
    KILLED_BY_SIGNAL = "killed by signal"
    NO_OUTPUTS_PRODUCED = "no outputs produced"


class ExecError(BuildIfChangedError):
    """A task command failed. Fatal to the whole run.

    Attributes:
        kind: ExecErrorKind
        command: the task's command string
        code: child exit code (NONZERO_EXIT only)
        signal: signal number (KILLED_BY_SIGNAL only)
    """

    def __init__(
        self,
        kind: ExecErrorKind,
        command: str,
        code: Optional[int] = None,
        signal: Optional[int] = None,
        patterns=None,
    ):
        self.kind = kind
        self.command = command
        self.code = code
        self.signal = signal
        self.patterns = list(patterns or [])
        super().__init__(self._format())

    def _format(self) -> str:
        if self.kind is ExecErrorKind.NONZERO_EXIT:
            return f"task failed with exit code {self.code} (task: '{self.command}')"
        if self.kind is ExecErrorKind.KILLED_BY_SIGNAL:
            return (f"task exited prematurely with signal {self.signal} "
                    f"(task: '{self.command}')")
        return (f"executing task '{self.command}' didn't result in any files "
                f"being written on disk! Patterns: {', '.join(self.patterns)}")

    @property
    def exit_code(self) -> int:
        if self.kind is ExecErrorKind.NONZERO_EXIT and self.code:
            return self.code
        if self.kind is ExecErrorKind.KILLED_BY_SIGNAL:
            return 13
        return 7
