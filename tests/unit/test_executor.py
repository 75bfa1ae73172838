"""
Unit tests for command templating and execution.

Tests placeholder substitution and quoting, dry runs, launch failures and
the run-level failure aggregation of CommandExecutor.
"""

import io
import shlex
import sys
import pytest
from datetime import datetime, timezone

from findfiles.models.file_record import CommandTemplate, FileRecord, QuoteStyle
from findfiles.tools.executor import (
    CommandExecutor,
    ExecutionSummary,
    SubprocessLauncher,
    build_command,
    quote_value,
)


def make_record(path: str) -> FileRecord:
    now = datetime(2024, 1, 1, tzinfo=timezone.utc)
    return FileRecord(path=path, creation_time=now, modification_time=now, size_bytes=1)


class FakeLauncher:
    """Records launched commands; raises for commands containing a marker."""

    def __init__(self, fail_marker: str = None, exit_status: int = 0):
        self.commands = []
        self.fail_marker = fail_marker
        self.exit_status = exit_status

    def launch(self, command: str) -> int:
        self.commands.append(command)
        if self.fail_marker and self.fail_marker in command:
            raise FileNotFoundError(2, "No such file or directory")
        return self.exit_status


class TestQuoting:
    """Test cases for value quoting."""

    def test_windows_quotes(self):
        """Test that Windows values are wrapped in double quotes."""
        assert quote_value(r"C:\my dir", QuoteStyle.WINDOWS) == '"C:\\my dir"'

    def test_windows_trailing_backslash(self):
        """Test that a trailing backslash does not escape the closing quote."""
        assert quote_value("C:\\", QuoteStyle.WINDOWS) == '"C:\\\\"'
        assert quote_value("C:\\dir\\", QuoteStyle.WINDOWS) == '"C:\\dir\\\\"'

    def test_posix_quotes_form_one_token(self):
        """Test that POSIX quoting survives shell tokenization."""
        for value in ["plain", "with space", "it's", "$HOME", "a\"b"]:
            quoted = quote_value(value, QuoteStyle.POSIX)
            assert quoted.startswith("'")
            assert shlex.split(quoted) == [value]


class TestBuildCommand:
    """Test cases for template substitution."""

    def test_windows_copy_example(self):
        """Test the %f and %d substitution with a literal trailing segment."""
        template = CommandTemplate(template="copy %f %d\\backup\\", quote_style=QuoteStyle.WINDOWS)

        command = build_command(template, "C:\\x\\y.txt", separators="\\")

        assert command == 'copy "C:\\x\\y.txt" "C:\\x"\\backup\\'

    def test_all_placeholders(self):
        """Test directory, filename and full path substitution."""
        template = CommandTemplate(template="echo %d %n %f", quote_style=QuoteStyle.POSIX)

        command = build_command(template, "/srv/data/my file.txt", separators="/")

        assert shlex.split(command) == ["echo", "/srv/data", "my file.txt", "/srv/data/my file.txt"]

    def test_every_occurrence_substituted(self):
        """Test that repeated placeholders are all replaced."""
        template = CommandTemplate(template="cmp %n %n", quote_style=QuoteStyle.POSIX)

        assert build_command(template, "/a/b", separators="/") == "cmp 'b' 'b'"

    def test_path_without_separator(self):
        """Test that a bare filename lives in the current directory."""
        template = CommandTemplate(template="%d %n", quote_style=QuoteStyle.POSIX)

        assert build_command(template, "file.txt", separators="/") == "'.' 'file.txt'"

    def test_substituted_text_not_expanded_again(self):
        """Test that placeholders inside a path are left alone."""
        template = CommandTemplate(template="%f %n", quote_style=QuoteStyle.POSIX)

        command = build_command(template, "/tmp/%n.txt", separators="/")

        assert command == "'/tmp/%n.txt' '%n.txt'"

    def test_template_without_placeholders(self):
        """Test that a template without placeholders is unchanged."""
        template = CommandTemplate(template="make all", quote_style=QuoteStyle.POSIX)

        assert build_command(template, "/a/b", separators="/") == "make all"
        assert template.get_placeholders() == []


class TestCommandExecutor:
    """Test cases for the CommandExecutor class."""

    def setup_method(self):
        """Set up records and a POSIX template."""
        self.records = [make_record("/data/one.txt"), make_record("/data/bad.txt"), make_record("/data/two.txt")]
        self.template = CommandTemplate(template="process %f", quote_style=QuoteStyle.POSIX)

    def test_runs_each_record_in_order(self):
        """Test that one command is launched per record, in order."""
        launcher = FakeLauncher()
        executor = CommandExecutor(self.template, launcher=launcher, separators="/")

        summary = executor.run_all(self.records)

        assert launcher.commands == [
            "process '/data/one.txt'",
            "process '/data/bad.txt'",
            "process '/data/two.txt'",
        ]
        assert summary.any_failed is False
        assert summary.total == 3

    def test_launch_failure_does_not_stop_processing(self, caplog):
        """Test that a failed launch is reported and the rest still run."""
        launcher = FakeLauncher(fail_marker="bad")
        executor = CommandExecutor(self.template, launcher=launcher, separators="/")

        summary = executor.run_all(self.records)

        assert len(launcher.commands) == 3
        assert summary.failed == ["/data/bad.txt"]
        assert summary.succeeded == ["/data/one.txt", "/data/two.txt"]
        assert summary.any_failed is True
        assert any("/data/bad.txt" in m and "No such file" in m for m in caplog.messages)

    def test_dry_run_never_launches(self):
        """Test that a dry run reports commands without launching them."""
        launcher = FakeLauncher(fail_marker="process")
        output = io.StringIO()
        executor = CommandExecutor(self.template, dry_run=True, launcher=launcher,
                                   output=output, separators="/")

        summary = executor.run_all(self.records)

        assert launcher.commands == []
        assert summary.any_failed is False
        assert summary.dry_run is True
        assert output.getvalue().splitlines() == [
            "/data/one.txt: process '/data/one.txt'",
            "/data/bad.txt: process '/data/bad.txt'",
            "/data/two.txt: process '/data/two.txt'",
        ]

    def test_dry_run_without_source_path(self):
        """Test dry-run reports without the source path prefix."""
        output = io.StringIO()
        executor = CommandExecutor(self.template, dry_run=True, output=output,
                                   show_source_path=False, separators="/")

        assert executor.execute(self.records[0]) is True
        assert output.getvalue() == "process '/data/one.txt'\n"

    def test_exit_status_ignored_by_default(self):
        """Test that only launch failure counts as failure."""
        executor = CommandExecutor(self.template, launcher=FakeLauncher(exit_status=3), separators="/")

        assert executor.run_all(self.records).any_failed is False

    def test_fail_on_exit_code(self):
        """Test counting a non-zero exit status as failure when enabled."""
        executor = CommandExecutor(self.template, launcher=FakeLauncher(exit_status=3),
                                   fail_on_exit_code=True, separators="/")

        summary = executor.run_all(self.records)

        assert summary.any_failed is True
        assert len(summary.failed) == 3

    def test_empty_summary(self):
        """Test the summary of an empty run."""
        summary = ExecutionSummary()

        assert summary.any_failed is False
        assert summary.total == 0


@pytest.mark.skipif(sys.platform == 'win32', reason="POSIX command-line splitting")
class TestSubprocessLauncher:
    """Test cases for launching real processes."""

    def test_launch_success(self):
        """Test launching a process and waiting for its exit status."""
        launcher = SubprocessLauncher()
        command = f"{shlex.quote(sys.executable)} -c 'import sys; sys.exit(4)'"

        assert launcher.launch(command) == 4

    def test_missing_program(self):
        """Test that a missing program is a launch failure."""
        with pytest.raises(OSError):
            SubprocessLauncher().launch("definitely-not-a-real-program-xyz --help")

    def test_unbalanced_quotes(self):
        """Test that an unparseable command line is a launch failure."""
        with pytest.raises(OSError, match="Cannot parse command line"):
            SubprocessLauncher().launch("echo 'unterminated")
