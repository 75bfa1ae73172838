"""
Search pipeline for FindFiles.

Runs the stages of one search in sequence: compile the pattern, walk the
tree, apply the date window, sort, then either display the results or run the
command template against each of them. Configuration errors stop the run
before any traversal; every other error is reported and the run carries on.
"""

import sys
import logging
from dataclasses import dataclass, field
from typing import List, Optional, TextIO

from .config.parser import ConfigurationError
from .models.file_record import FileRecord
from .models.search_options import SearchOptions
from .tools.date_filter import filter_records
from .tools.executor import CommandExecutor, ExecutionSummary, SubprocessLauncher
from .tools.formatter import ConsoleInfo, ResultFormatter
from .tools.fs_walker import FSWalker, WalkError
from .tools.pattern import MatchTarget, compile_pattern
from .tools.sorter import parse_sort_spec, sort_records


logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_CONFIG_ERROR = 1
EXIT_COMMAND_FAILED = 2


@dataclass
class SearchOutcome:
    """
    Result of one search run.

    Attributes:
        records: Final records in display/execution order
        walk_errors: Directories that could not be searched
        execution: Command execution summary, if a command was given
        error: Fatal configuration error message, if the run was aborted
    """
    records: List[FileRecord] = field(default_factory=list)
    walk_errors: List[WalkError] = field(default_factory=list)
    execution: Optional[ExecutionSummary] = None
    error: Optional[str] = None

    @property
    def commands_failed(self) -> bool:
        return self.execution is not None and self.execution.any_failed

    @property
    def exit_code(self) -> int:
        if self.error is not None:
            return EXIT_CONFIG_ERROR
        if self.commands_failed:
            return EXIT_COMMAND_FAILED
        return EXIT_OK


class FileSearch:
    """
    Runs the search pipeline for one set of options.

    Attributes:
        options: Validated search options
        console: Console geometry for table output
        output: Stream receiving formatted results and dry-run commands
        launcher: Process launcher used for command execution
        utc_timestamps: Show times in UTC instead of local time
    """

    def __init__(self, options: SearchOptions, console: Optional[ConsoleInfo] = None,
                 output: Optional[TextIO] = None, launcher: Optional[SubprocessLauncher] = None,
                 utc_timestamps: bool = False):
        self.options = options
        self.console = console or ConsoleInfo()
        self.output = output if output is not None else sys.stdout
        self.launcher = launcher
        self.utc_timestamps = utc_timestamps

    def find(self) -> tuple[List[FileRecord], List[WalkError]]:
        """
        Compile, walk, filter and sort.

        Returns:
            Tuple of (sorted records, walk errors)

        Raises:
            ConfigurationError: If the pattern cannot be compiled
        """
        options = self.options
        target = MatchTarget.FULL_PATH if options.path_match else MatchTarget.FILENAME
        matcher = compile_pattern(options.pattern, use_regex=options.use_regex, target=target)

        walker = FSWalker(matcher, recursive=not options.shallow, debug=options.debug)
        walk_result = walker.walk(options.directory)
        logger.debug(f"Walk statistics: {walker.get_stats()}")

        records = filter_records(walk_result.records, options.date_window)
        records = sort_records(records, parse_sort_spec(options.sort_spec))
        return records, walk_result.errors

    def run(self) -> SearchOutcome:
        """
        Run the whole pipeline.

        Returns:
            SearchOutcome; its exit_code reflects configuration errors and
            failed commands
        """
        if self.options.debug:
            logger.debug(f"Search options: {self.options}")

        outcome = SearchOutcome()
        try:
            outcome.records, outcome.walk_errors = self.find()
        except ConfigurationError as e:
            logger.error(str(e))
            outcome.error = str(e)
            return outcome

        if self.options.has_command():
            outcome.execution = self._execute(outcome.records)
        else:
            self._display(outcome.records)

        return outcome

    def _execute(self, records: List[FileRecord]) -> ExecutionSummary:
        options = self.options
        executor = CommandExecutor(
            options.command,
            dry_run=options.dry_run,
            launcher=self.launcher,
            output=self.output,
            show_source_path=options.show_source_path,
            fail_on_exit_code=options.fail_on_exit_code,
        )
        return executor.run_all(records)

    def _display(self, records: List[FileRecord]) -> None:
        options = self.options
        formatter = ResultFormatter(
            mode=options.display_mode,
            console=self.console,
            concise=options.concise,
            group_by_directory=options.group_by_directory,
            shared_headers=options.shared_headers,
            utc_timestamps=self.utc_timestamps,
        )
        formatter.render(records, self.output)


def run_search(options: SearchOptions, console: Optional[ConsoleInfo] = None,
               output: Optional[TextIO] = None, launcher: Optional[SubprocessLauncher] = None,
               utc_timestamps: bool = False) -> SearchOutcome:
    """Convenience function to run one search."""
    return FileSearch(options, console=console, output=output, launcher=launcher,
                      utc_timestamps=utc_timestamps).run()
