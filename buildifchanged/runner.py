"""Command line entry point.

Usage:
    build-if-changed [options]
    python -m buildifchanged [options]
"""

import argparse
import logging
import os
from pathlib import Path
from typing import List, Optional, Union

from .config import find_config_file, load_config
from .engine import FixpointEngine, RunResult
from .exceptions import BuildIfChangedError
from .reporter import ConsoleReporter
from .store import FileStateStore

logger = logging.getLogger(__name__)


def _cache_exclusion(base_dir: Path, cache_dir: Path) -> List[str]:
    """The cache directory relative to base_dir, if it lies inside it."""
    try:
        return [Path(os.path.normpath(cache_dir)).relative_to(base_dir).as_posix()]
    except ValueError:
        return []


def _positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid integer: '{value}'")
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {number}")
    return number


def run_config(
    config_path: Union[str, Path],
    reporter: Optional[ConsoleReporter] = None,
    max_passes: Optional[int] = None,
    jobs: Optional[int] = None,
    dry_run: bool = False,
    prune: bool = False,
) -> RunResult:
    """Load a configuration file and run its tasks to a fixpoint.

    Args:
        config_path: buildconfig or buildconfig.yaml file
        reporter: Receives status lines (default: ConsoleReporter)
        max_passes: Override the pass ceiling from the config
        jobs: Override the hashing pool size from the config
        dry_run: Only report which tasks would run; nothing is written
        prune: Drop stored fingerprints of tasks no longer configured

    Returns:
        RunResult with execution statistics

    Example:
        result = run_config('buildconfig')
        if result.nothing_to_do:
            print("up to date")
    """
    if reporter is None:
        reporter = ConsoleReporter()

    loaded = load_config(config_path)
    options = loaded.options.merged(max_passes=max_passes, jobs=jobs)
    reporter.using_config(loaded.path, loaded.base_dir)

    store = FileStateStore(loaded.cache_dir)
    valid_keys = [task.key for task in loaded.tasks]
    if dry_run:
        if prune:
            for key in store.stale_keys(valid_keys):
                reporter.would_prune(key)
    else:
        store.ensure()
        if prune:
            removed = store.prune(valid_keys)
            logger.info("pruned %d stale record(s)", len(removed))

    engine = FixpointEngine(
        base_dir=loaded.base_dir,
        tasks=loaded.tasks,
        store=store,
        reporter=reporter,
        max_passes=options.max_passes,
        max_workers=options.jobs,
        exclude=_cache_exclusion(loaded.base_dir, loaded.cache_dir),
    )
    if dry_run:
        return engine.check()
    return engine.run()


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='Run shell commands whose watched files changed, '
                    'until nothing changes anymore',
        prog='build-if-changed',
    )
    parser.add_argument(
        '-f', '--file',
        default=None,
        help='Path to the config file (default: search for buildconfig '
             'in the current directory and its parents)',
    )
    parser.add_argument(
        '-C', '--directory',
        default=None,
        help='Start the config search in DIRECTORY instead of the cwd',
    )
    parser.add_argument(
        '--max-passes',
        type=_positive_int,
        default=None,
        help='Fail if tasks still need to run after this many passes that '
             'executed tasks; the final checking pass is not counted '
             '(default: unbounded)',
    )
    parser.add_argument(
        '-j', '--jobs',
        type=_positive_int,
        default=None,
        help='Number of threads used to hash files (default: 8)',
    )
    parser.add_argument(
        '--dry-run',
        action='store_true',
        help='Show which tasks would run without executing them',
    )
    parser.add_argument(
        '--prune',
        action='store_true',
        help='Remove cached fingerprints of tasks no longer in the config',
    )
    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Print debug information',
    )
    return parser


def main(args: Optional[List[str]] = None) -> int:
    """CLI entry point.

    Returns:
        Process exit code (see BuildIfChangedError.exit_code)
    """
    parsed = _build_parser().parse_args(args)
    logging.basicConfig(
        level=logging.DEBUG if parsed.verbose else logging.WARNING,
        format='%(name)s: %(message)s',
    )
    reporter = ConsoleReporter()

    try:
        if parsed.file is not None:
            config_path = Path(parsed.file)
        else:
            config_path = find_config_file(parsed.directory)
        run_config(
            config_path,
            reporter=reporter,
            max_passes=parsed.max_passes,
            jobs=parsed.jobs,
            dry_run=parsed.dry_run,
            prune=parsed.prune,
        )
    except BuildIfChangedError as e:
        reporter.error(str(e))
        if parsed.verbose:
            logger.debug("run aborted", exc_info=True)
        return e.exit_code
    return 0

