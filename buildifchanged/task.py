"""Task model: one shell command and the file patterns it watches."""

from dataclasses import dataclass, field
from pathlib import PurePosixPath, PureWindowsPath
from typing import Iterable, List, Tuple

from .exceptions import DuplicateTaskError, MalformedConfigError, NoPatternsError
from .fingerprint import NEGATION_PREFIX, string_md5


@dataclass(frozen=True)
class Task:
    """A configured command plus its watched input and output patterns.

    Output patterns count as watched patterns too, but their changes are
    detected through the output fingerprint, so the input fingerprint only
    covers ``input_patterns``.

    Example:
        Task('sass main.scss -o main.css',
             input_patterns=('**/*.scss',),
             output_patterns=('main.css',))
    """

    command: str
    input_patterns: Tuple[str, ...] = ()
    output_patterns: Tuple[str, ...] = ()
    key: str = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        # Accept lists from callers, keep tuples for immutability
        object.__setattr__(self, 'input_patterns', tuple(self.input_patterns))
        object.__setattr__(self, 'output_patterns', tuple(self.output_patterns))
        if not self.command or not self.command.strip():
            raise MalformedConfigError("task command should not be empty")
        if not self.watched_patterns:
            raise NoPatternsError(
                f"command '{self.command}' didn't specify any dependencies"
            )
        for pattern in self.watched_patterns:
            _check_pattern(self.command, pattern)
        object.__setattr__(self, 'key', string_md5(self.command))

    @property
    def watched_patterns(self) -> List[str]:
        """Every pattern the task reacts to, inputs first."""
        return list(self.input_patterns) + list(self.output_patterns)

    @property
    def input_fingerprint_patterns(self) -> List[str]:
        """Input patterns minus the task's own outputs."""
        return list(self.input_patterns) + [
            NEGATION_PREFIX + pattern for pattern in self.output_patterns
            if not pattern.startswith(NEGATION_PREFIX)
        ]

    @property
    def has_outputs(self) -> bool:
        return bool(self.output_patterns)

    def __str__(self):
        return self.command


def _check_pattern(command: str, pattern: str) -> None:
    """Patterns must be non-empty and relative to the base directory."""
    glob = pattern.lstrip(NEGATION_PREFIX)
    if not glob.strip():
        raise MalformedConfigError(f"command '{command}' has an empty pattern")
    if PurePosixPath(glob).is_absolute() or PureWindowsPath(glob).is_absolute():
        raise MalformedConfigError(
            f"command '{command}': pattern '{pattern}' must be relative "
            f"to the config directory"
        )


def validate_tasks(tasks: Iterable[Task]) -> List[Task]:
    """Check that no two tasks share a command. Returns the tasks as a list."""
    seen = set()
    result = []
    for task in tasks:
        if task.key in seen:
            raise DuplicateTaskError(
                f"task command should be unique: '{task.command}'"
            )
        seen.add(task.key)
        result.append(task)
    return result
