"""Parser for the line-oriented ``buildconfig`` format.

Example buildconfig:
    # stylesheets
    [sass main.scss -o main.css]
    **/*.scss
    out:main.css

    [cat main.css > bundle.css]
    main.css
    out:bundle.css

Rules:
- ``[command]`` opens a task
- ``#`` starts a comment line
- ``out:<glob>`` declares an output pattern
- any other non-blank line is an input pattern
"""

from pathlib import Path
from typing import List, Optional, Union

from ..exceptions import (
    EmptyConfigError,
    MalformedConfigError,
    MissingHeaderError,
    NoPatternsError,
)
from ..task import Task, validate_tasks

HEADER_START = '['
HEADER_END = ']'
COMMENT = '#'
OUTPUT_PREFIX = 'out:'

MISSING_HEADER_HINT = (
    "buildconfig files should start with a shell command between brackets. "
    "E.g.: \n[sass *.js -o main.css]\n**/*.scss\n...more dependencies"
)


class _Section:
    """Task under construction while reading lines."""

    def __init__(self, command: str, line_no: int):
        self.command = command
        self.line_no = line_no
        self.inputs: List[str] = []
        self.outputs: List[str] = []

    def add_pattern(self, line: str) -> None:
        if line.startswith(OUTPUT_PREFIX):
            self.outputs.append(line[len(OUTPUT_PREFIX):].strip())
        else:
            self.inputs.append(line)

    def build(self) -> Task:
        if not self.inputs and not self.outputs:
            raise NoPatternsError(
                f"command '{self.command}' didn't specify any dependencies "
                f"(line {self.line_no})"
            )
        return Task(self.command, self.inputs, self.outputs)


def _parse_header(line: str) -> str:
    command = line.strip()[len(HEADER_START):]
    if command.rstrip().endswith(HEADER_END):
        command = command.rstrip()[:-len(HEADER_END)]
    return command.strip()


def parse_config_string(content: str) -> List[Task]:
    """Parse buildconfig content into tasks, in declaration order.

    Raises:
        MissingHeaderError: A pattern appears before any header
        MalformedConfigError: A header has an empty command
        NoPatternsError: A task has no pattern lines
        DuplicateTaskError: Two tasks share a command
        EmptyConfigError: No tasks at all
    """
    tasks: List[Task] = []
    current: Optional[_Section] = None

    for line_no, raw in enumerate(content.splitlines(), start=1):
        if raw.startswith(HEADER_START):
            if current is not None:
                tasks.append(current.build())
            command = _parse_header(raw)
            if not command:
                raise MalformedConfigError(
                    f"task command should not be empty (line {line_no})"
                )
            current = _Section(command, line_no)
            continue
        if raw.startswith(COMMENT):
            continue
        line = raw.strip()
        if not line:
            continue
        if current is None:
            raise MissingHeaderError(MISSING_HEADER_HINT)
        current.add_pattern(line)

    if current is not None:
        tasks.append(current.build())
    if not tasks:
        raise EmptyConfigError("The build configuration file is empty")
    return validate_tasks(tasks)


def parse_config_file(path: Union[str, Path]) -> List[Task]:
    """Read and parse a buildconfig file."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")
    try:
        content = path.read_text(encoding='utf-8')
    except (OSError, UnicodeDecodeError) as e:
        raise MalformedConfigError(f"cannot read config file '{path}': {e}")
    return parse_config_string(content)
