"""Run a task's command in a shell with inherited standard streams."""

import logging
import subprocess
from pathlib import Path
from typing import Iterable, Optional, Union

from .exceptions import ExecError, ExecErrorKind
from .fingerprint import fingerprint
from .task import Task

logger = logging.getLogger(__name__)

# exit status conventionally reported by shells for "command not found"
COMMAND_NOT_FOUND = 127


def execute(base_dir: Union[str, Path], task: Task) -> None:
    """Execute task.command through the platform shell.

    Output is not captured: the child writes straight to our stdout and
    stderr. Blocks until the child terminates.

    Raises:
        ExecError: NONZERO_EXIT or KILLED_BY_SIGNAL
    """
    logger.debug("spawning %r in %s", task.command, base_dir)
    try:
        result = subprocess.run(task.command, shell=True, cwd=str(base_dir))
    except OSError as e:
        logger.debug("could not start %r: %s", task.command, e)
        raise ExecError(ExecErrorKind.NONZERO_EXIT, task.command,
                        code=COMMAND_NOT_FOUND) from e

    returncode = result.returncode
    if returncode < 0:
        # POSIX: terminated by signal -returncode
        raise ExecError(ExecErrorKind.KILLED_BY_SIGNAL, task.command,
                        signal=-returncode)
    if returncode != 0:
        raise ExecError(ExecErrorKind.NONZERO_EXIT, task.command,
                        code=returncode)


def verify_outputs(
    base_dir: Union[str, Path],
    task: Task,
    max_workers: Optional[int] = None,
    exclude: Iterable[str] = (),
) -> str:
    """Fingerprint the task's outputs after a successful execution.

    Returns:
        The fresh output fingerprint

    Raises:
        ExecError: NO_OUTPUTS_PRODUCED if outputs are declared but no file
            matches them
    """
    fresh = fingerprint(base_dir, task.output_patterns, max_workers, exclude)
    if task.has_outputs and not fresh:
        raise ExecError(ExecErrorKind.NO_OUTPUTS_PRODUCED, task.command,
                        patterns=task.output_patterns)
    return fresh
