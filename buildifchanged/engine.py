"""Fixpoint scheduler: run stale tasks pass after pass until nothing runs.

There is no dependency graph. A task whose output feeds another task's
inputs is picked up in the same pass (if declared later) or the next one
(if declared earlier), so declaration order never constrains correctness.

Example:
    from buildifchanged.engine import FixpointEngine
    from buildifchanged.store import FileStateStore

    engine = FixpointEngine(base_dir, tasks, FileStateStore(cache).ensure())
    result = engine.run()
    print(f"{result.tasks_executed} task(s) in {result.passes} pass(es)")
"""

import logging
from dataclasses import dataclass, field
from enum import Enum, auto
from pathlib import Path
from typing import List, Optional, Sequence, Tuple, Union

from .detector import check_task
from .exceptions import MalformedConfigError, PassLimitExceeded
from .executor import execute, verify_outputs
from .reporter import ConsoleReporter, SilentReporter
from .store import StateStore
from .task import Task, validate_tasks

logger = logging.getLogger(__name__)


class EngineState(Enum):
    """Scheduler states."""
    SCANNING = auto()
    PASS_COMPLETE = auto()
    DONE = auto()


@dataclass
class RunResult:
    """Result of running the FixpointEngine."""

    tasks_executed: int = 0
    """Number of task executions across all passes."""

    passes: int = 0
    """Number of passes made, including the final quiescent one."""

    executed: List[Tuple[int, str, str]] = field(default_factory=list)
    """(pass number, command, reason) per execution, in order."""

    dry_run: bool = False

    @property
    def nothing_to_do(self) -> bool:
        """Return True if every task was already up to date."""
        return self.tasks_executed == 0

    def commands(self) -> List[str]:
        """Commands executed, in execution order."""
        return [command for _, command, _ in self.executed]


@dataclass
class FixpointEngine:
    """Run tasks until a full pass executes none of them.

    Attributes:
        base_dir: Directory patterns are resolved against and commands run in
        tasks: Tasks in declaration order
        store: Where fingerprints are loaded from and saved to
        reporter: Receives start/finish/summary events
        max_passes: Optional ceiling on passes that execute tasks; the
            final pass confirming the fixpoint is not counted. None means
            unbounded
        max_workers: Hashing pool size per fingerprint
        exclude: Directories (relative to base_dir) never fingerprinted,
            typically the cache directory
    """

    base_dir: Union[str, Path]
    tasks: List[Task]
    store: StateStore
    reporter: Optional[ConsoleReporter] = None
    max_passes: Optional[int] = None
    max_workers: Optional[int] = None
    exclude: Sequence[str] = ()

    def __post_init__(self):
        self.base_dir = Path(self.base_dir)
        self.tasks = validate_tasks(self.tasks)
        if self.reporter is None:
            self.reporter = SilentReporter()
        if self.max_passes is not None and self.max_passes < 1:
            raise MalformedConfigError("max_passes must be at least 1")

    def run(self) -> RunResult:
        """Execute stale tasks until a fixpoint is reached.

        Returns:
            RunResult with execution statistics

        Raises:
            HashingError: A watched file could not be read
            ExecError: A task failed; remaining tasks and passes are skipped
            PassLimitExceeded: A task is still stale after max_passes passes
        """
        result = RunResult()
        state = EngineState.SCANNING
        index = 0
        ran_this_pass = False
        result.passes = 1

        while state is not EngineState.DONE:
            if state is EngineState.SCANNING:
                if index >= len(self.tasks):
                    state = EngineState.PASS_COMPLETE
                    continue
                if self._run_task(self.tasks[index], result):
                    ran_this_pass = True
                index += 1

            elif state is EngineState.PASS_COMPLETE:
                logger.debug("pass %d complete, ran=%s", result.passes, ran_this_pass)
                self.reporter.pass_complete(result.passes, ran_this_pass)
                if not ran_this_pass:
                    state = EngineState.DONE
                    continue
                result.passes += 1
                index = 0
                ran_this_pass = False
                state = EngineState.SCANNING

        self.reporter.complete(result)
        return result

    def _run_task(self, task: Task, result: RunResult) -> bool:
        """Check one task and execute it if stale. Returns True if it ran."""
        check = check_task(self.base_dir, task, self.store,
                           self.max_workers, self.exclude)
        if not check.should_run:
            logger.debug("up to date: %s", task.command)
            return False
        if self.max_passes is not None and result.passes > self.max_passes:
            raise PassLimitExceeded(self.max_passes, result.tasks_executed)

        self.reporter.start_task(task, check.reason)
        execute(self.base_dir, task)
        fresh_output = verify_outputs(self.base_dir, task, self.max_workers,
                                      self.exclude)
        self.store.save(task.key, check.input_fingerprint, fresh_output)
        self.reporter.finish_task(task)

        result.tasks_executed += 1
        result.executed.append((result.passes, task.command, check.reason))
        return True

    def check(self) -> RunResult:
        """Report which tasks would run now, without executing anything.

        Only one pass is made since nothing changes on disk.
        """
        result = RunResult(passes=1, dry_run=True)
        for task in self.tasks:
            status = check_task(self.base_dir, task, self.store,
                                self.max_workers, self.exclude)
            if status.should_run:
                self.reporter.would_run(task, status.reason)
                result.executed.append((1, task.command, status.reason))
        return result
