"""Decide whether a task must run by comparing fingerprints.

Outputs are checked before inputs, so a generated file that was deleted or
edited by hand is rebuilt even when none of the task's inputs changed.
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Iterable, Optional, Union

from .fingerprint import fingerprint
from .store import StateStore
from .task import Task


class CheckStatus(Enum):
    """Result of a task status check."""
    UP_TO_DATE = "up-to-date"
    OUTPUTS_MISSING = "outputs missing"
    OUTPUTS_CHANGED = "outputs changed externally"
    INPUTS_CHANGED = "inputs changed"


@dataclass
class CheckResult:
    """Outcome of check_task().

    Attributes:
        status: Which rule decided
        input_fingerprint: Current input fingerprint (persisted after a run)
        output_fingerprint: Current output fingerprint
    """
    status: CheckStatus
    input_fingerprint: str = ''
    output_fingerprint: str = ''

    @property
    def should_run(self) -> bool:
        return self.status is not CheckStatus.UP_TO_DATE

    @property
    def reason(self) -> Optional[str]:
        """Human-readable reason, None when up to date."""
        if not self.should_run:
            return None
        return self.status.value


def decide(task: Task, current_input: str, current_output: str,
           stored_input: str, stored_output: str) -> CheckStatus:
    """Apply the decision rules in order; the first match wins."""
    if task.has_outputs and not current_output:
        return CheckStatus.OUTPUTS_MISSING
    if current_output != stored_output:
        return CheckStatus.OUTPUTS_CHANGED
    if current_input != stored_input:
        return CheckStatus.INPUTS_CHANGED
    return CheckStatus.UP_TO_DATE


def check_task(
    base_dir: Union[str, Path],
    task: Task,
    store: StateStore,
    max_workers: Optional[int] = None,
    exclude: Iterable[str] = (),
) -> CheckResult:
    """Fingerprint a task's files and compare them with the stored state.

    Raises:
        HashingError: If a watched file cannot be read
    """
    current_output = fingerprint(base_dir, task.output_patterns, max_workers, exclude)
    current_input = fingerprint(base_dir, task.input_fingerprint_patterns,
                                max_workers, exclude)
    stored = store.get(task.key)
    status = decide(
        task,
        current_input,
        current_output,
        stored.input_fingerprint,
        stored.output_fingerprint,
    )
    return CheckResult(status, current_input, current_output)
