"""
Command templating and execution for FindFiles.

A command template is expanded once per record: %d becomes the containing
directory, %n the base filename and %f the full path, each quoted as a single
shell token. Commands run one at a time in result order. A command that cannot
be launched is reported and counted, and the remaining records are still
processed.
"""

import re
import shlex
import subprocess
import sys
import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, TextIO

from ..models.file_record import CommandTemplate, FileRecord, QuoteStyle, split_path


logger = logging.getLogger(__name__)

_PLACEHOLDER_RE = re.compile(r'%([dnf])')


def quote_value(value: str, style: QuoteStyle) -> str:
    """
    Quote a substituted value so it forms exactly one command-line token.

    Args:
        value: Directory, filename or path to quote
        style: POSIX single quotes or Windows double quotes

    Returns:
        Quoted token
    """
    if style is QuoteStyle.WINDOWS:
        # Trailing backslashes are doubled so the closing quote is not escaped.
        trailing = len(value) - len(value.rstrip('\\'))
        return '"' + value + '\\' * trailing + '"'
    return "'" + value.replace("'", "'\"'\"'") + "'"


def build_command(template: CommandTemplate, path: str, separators: Optional[str] = None) -> str:
    """
    Expand a command template for one file.

    All placeholders are replaced in a single pass, so text coming from the
    path is never expanded again.

    Args:
        template: Command template with %d, %n and %f placeholders
        path: Full path of the file
        separators: Path separators used to split the path (platform default if None)

    Returns:
        The command line to run
    """
    directory, filename = split_path(path, separators)
    values = {'d': directory, 'n': filename, 'f': path}

    def _substitute(match: re.Match) -> str:
        return quote_value(values[match.group(1)], template.quote_style)

    return _PLACEHOLDER_RE.sub(_substitute, template.template)


class SubprocessLauncher:
    """
    Launches a command line as a child process and waits for it to exit.

    On Windows the command line is handed to CreateProcess as is; elsewhere it
    is split with POSIX shell rules first. No shell is involved, so a program
    that does not exist is a launch failure.
    """

    def launch(self, command: str) -> int:
        """
        Run a command line to completion.

        Returns:
            The exit status of the child process

        Raises:
            OSError: If the process could not be created
        """
        if sys.platform == 'win32':
            args = command
        else:
            try:
                args = shlex.split(command)
            except ValueError as e:
                raise OSError(f"Cannot parse command line: {e}") from e
            if not args:
                raise OSError("Empty command line")

        completed = subprocess.run(args)
        return completed.returncode


@dataclass
class ExecutionSummary:
    """
    Aggregate outcome of running a command against a result list.

    Attributes:
        succeeded: Paths whose command ran
        failed: Paths whose command failed
        dry_run: Whether commands were only reported
    """
    succeeded: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)
    dry_run: bool = False

    @property
    def any_failed(self) -> bool:
        return bool(self.failed)

    @property
    def total(self) -> int:
        return len(self.succeeded) + len(self.failed)


class CommandExecutor:
    """
    Runs a command template against records, one at a time.

    Attributes:
        template: Command template to expand
        dry_run: Report commands without launching them
        launcher: Object with a launch(command) -> exit status method
        output: Stream receiving dry-run command reports
        show_source_path: Prefix dry-run reports with the source path
        fail_on_exit_code: Also count a non-zero exit status as a failure
        separators: Path separators used to split record paths
    """

    def __init__(self, template: CommandTemplate, dry_run: bool = False,
                 launcher: Optional[SubprocessLauncher] = None, output: Optional[TextIO] = None,
                 show_source_path: bool = True, fail_on_exit_code: bool = False,
                 separators: Optional[str] = None):
        self.template = template
        self.dry_run = dry_run
        self.launcher = launcher or SubprocessLauncher()
        self.output = output if output is not None else sys.stdout
        self.show_source_path = show_source_path
        self.fail_on_exit_code = fail_on_exit_code
        self.separators = separators

    def execute(self, record: FileRecord) -> bool:
        """
        Run the command for one record.

        Returns:
            True if the command was reported (dry run) or launched successfully
        """
        try:
            command = build_command(self.template, record.path, self.separators)
        except MemoryError:
            logger.error(f"Cannot build command line for {record.path}: out of memory")
            return False

        if self.dry_run:
            if self.show_source_path:
                self.output.write(f"{record.path}: {command}\n")
            else:
                self.output.write(f"{command}\n")
            return True

        logger.debug(f"Executing: {command}")
        try:
            exit_status = self.launcher.launch(command)
        except OSError as e:
            logger.error(f"Command execution failed: {e} Path: {record.path}")
            return False

        if exit_status != 0:
            logger.debug(f"Command exited with status {exit_status}: {command}")
            if self.fail_on_exit_code:
                logger.error(f"Command exited with status {exit_status} Path: {record.path}")
                return False

        return True

    def run_all(self, records: Iterable[FileRecord]) -> ExecutionSummary:
        """
        Run the command for every record in order.

        Args:
            records: Records in final result order

        Returns:
            ExecutionSummary with per-path outcomes
        """
        summary = ExecutionSummary(dry_run=self.dry_run)
        for record in records:
            if self.execute(record):
                summary.succeeded.append(record.path)
            else:
                summary.failed.append(record.path)

        if summary.any_failed:
            logger.error(f"{len(summary.failed)} of {summary.total} commands failed")
        return summary
