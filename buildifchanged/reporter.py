"""Console status lines for a run.

Task commands write to the terminal directly; the reporter only prints
the tool's own lines, each prefixed so they stand out from task output.
"""

import sys

LOG_PREFIX = "[build if changed] "


class ConsoleReporter:
    """Print run progress to stdout and errors to stderr."""

    def __init__(self, outstream=None, errstream=None):
        self.outstream = outstream if outstream is not None else sys.stdout
        self.errstream = errstream if errstream is not None else sys.stderr

    def write(self, msg):
        self.outstream.write(LOG_PREFIX + msg + "\n")
        self.outstream.flush()

    def using_config(self, config_path, base_dir):
        self.write(f"Using config '{config_path.name}' in '{base_dir}'")

    def start_task(self, task, reason):
        self.write(f"Starting: {task.command} ({reason})")

    def finish_task(self, task):
        self.write(f"Finished: {task.command}")

    def would_run(self, task, reason):
        self.write(f"Would run: {task.command} ({reason})")

    def would_prune(self, key):
        self.write(f"Would prune: {key}")

    def pass_complete(self, pass_number, ran):
        """Called after every pass. Silent on the console."""

    def complete(self, result):
        if result.tasks_executed:
            self.write(f"FINISHED, {result.tasks_executed} task(s) completed")
        else:
            self.write("SKIPPED, no changes found")

    def error(self, msg):
        self.errstream.write(LOG_PREFIX + "[error] " + msg + "\n")
        self.errstream.flush()


class SilentReporter(ConsoleReporter):
    """Reporter that discards everything. Used when embedding the engine."""

    def write(self, msg):
        pass

    def error(self, msg):
        pass
