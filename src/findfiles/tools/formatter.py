"""
Result formatting for FindFiles.

Renders the final record list as text lines in one of three modes: a
fixed-width table sized to the console, tab-separated fields for parsing, or
bare paths. Results can also be grouped by containing directory. The console
width is passed in through ConsoleInfo, so formatting depends only on its
arguments.
"""

import shutil
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional, TextIO

from ..models.file_record import FileRecord
from ..models.search_options import DisplayMode


SIZE_WIDTH = 10
CREATED_WIDTH = 16
MODIFIED_WIDTH = 16
SPACING = 2
MIN_PATH_WIDTH = 4

TABLE_TIME_FORMAT = '%Y-%m-%d %H:%M'
TAB_TIME_FORMAT = '%Y-%m-%d %H:%M:%S'


@dataclass
class ConsoleInfo:
    """
    Console geometry available to the formatter.

    Attributes:
        width: Detected console width in columns, or None if unavailable
        fallback_width: Width used when no width was detected
        min_width: Smallest width the table layout will use
    """
    width: Optional[int] = None
    fallback_width: int = 79
    min_width: int = 50

    def table_width(self) -> int:
        """
        Get the usable table width.

        One column is kept free so lines never wrap automatically.
        """
        if self.width is None:
            return self.fallback_width
        return max(self.width - 1, self.min_width)


def detect_console_width() -> Optional[int]:
    """Get the width of the attached terminal, or None if there is none."""
    size = shutil.get_terminal_size(fallback=(0, 0))
    return size.columns or None


class ResultFormatter:
    """
    Formats file records for display.

    Attributes:
        mode: Display mode
        console: Console geometry
        concise: Omit headers and the summary
        group_by_directory: Group records by containing directory
        shared_headers: One header for all groups instead of one per group
        utc_timestamps: Show times in UTC instead of local time
    """

    def __init__(self, mode: DisplayMode = DisplayMode.TABLE, console: Optional[ConsoleInfo] = None,
                 concise: bool = False, group_by_directory: bool = False,
                 shared_headers: bool = False, utc_timestamps: bool = False):
        self.mode = mode
        self.console = console or ConsoleInfo()
        self.concise = concise or mode is DisplayMode.BARE
        self.group_by_directory = group_by_directory and mode is not DisplayMode.BARE
        self.shared_headers = shared_headers
        self.utc_timestamps = utc_timestamps

    @property
    def path_width(self) -> int:
        fixed = SIZE_WIDTH + CREATED_WIDTH + MODIFIED_WIDTH + SPACING * 3
        return max(self.console.table_width() - fixed, MIN_PATH_WIDTH)

    def format_time(self, value: datetime) -> str:
        """Format a timestamp for the current mode."""
        value = value.astimezone(timezone.utc if self.utc_timestamps else None)
        fmt = TAB_TIME_FORMAT if self.mode is DisplayMode.TAB else TABLE_TIME_FORMAT
        return value.strftime(fmt)

    def truncate(self, text: str, width: int) -> str:
        """Cut text to width, marking the cut with a trailing ellipsis."""
        if len(text) <= width:
            return text
        return text[:width - 3] + '...'

    def format_header(self) -> List[str]:
        """Get the column header lines."""
        if self.mode is DisplayMode.TAB:
            return ["Path\tSize\tCreated Date\tModified Date"]

        gap = ' ' * SPACING
        header = (
            "Path".ljust(self.path_width) + gap
            + "Size (KB)".rjust(SIZE_WIDTH) + gap
            + "Created".rjust(CREATED_WIDTH) + gap
            + "Modified".rjust(MODIFIED_WIDTH)
        )
        return [header, self._separator()]

    def _separator(self) -> str:
        if self.mode is DisplayMode.TAB:
            return '\t'.join(['-' * 10, '-' * 8, '-' * 15, '-' * 15])
        gap = ' ' * SPACING
        return gap.join(['-' * self.path_width, '-' * SIZE_WIDTH, '-' * CREATED_WIDTH, '-' * MODIFIED_WIDTH])

    def format_record(self, record: FileRecord, label: Optional[str] = None) -> str:
        """
        Format one record as a line.

        Args:
            record: Record to format
            label: Text shown in the path column (the full path if None)
        """
        if self.mode is DisplayMode.BARE:
            return record.path

        label = record.path if label is None else label
        created = self.format_time(record.creation_time)
        modified = self.format_time(record.modification_time)

        if self.mode is DisplayMode.TAB:
            return f"{label}\t{record.size_bytes}\t{created}\t{modified}"

        gap = ' ' * SPACING
        return (
            self.truncate(label, self.path_width).ljust(self.path_width) + gap
            + str(record.get_size_kb()).rjust(SIZE_WIDTH) + gap
            + created.rjust(CREATED_WIDTH) + gap
            + modified.rjust(MODIFIED_WIDTH)
        )

    def format_summary(self, count: int, directories: Optional[int] = None) -> List[str]:
        """Get the closing separator and result count lines."""
        summary = f"Found {count} files"
        if directories is not None:
            summary += f" in {directories} directories"
        return [self._separator(), summary]

    def format(self, records: Iterable[FileRecord]) -> List[str]:
        """
        Format a record list as display lines.

        Args:
            records: Records in final result order

        Returns:
            Lines without trailing newlines
        """
        records = list(records)
        if self.group_by_directory:
            return self._format_grouped(records)

        lines = []
        if not self.concise:
            lines.extend(self.format_header())
        lines.extend(self.format_record(record) for record in records)
        if not self.concise:
            lines.extend(self.format_summary(len(records)))
        return lines

    def _format_grouped(self, records: List[FileRecord]) -> List[str]:
        groups = group_by_directory(records)
        lines = []

        if not self.concise and self.shared_headers:
            lines.extend(self.format_header())

        for index, (directory, members) in enumerate(groups.items()):
            if index and not self.concise:
                lines.append('')
            lines.append(f"Directory: {directory}")
            if not self.concise and not self.shared_headers:
                lines.extend(self.format_header())
            lines.extend(self.format_record(record, record.get_filename()) for record in members)

        if not self.concise:
            lines.extend(self.format_summary(len(records), len(groups)))
        return lines

    def render(self, records: Iterable[FileRecord], output: TextIO) -> int:
        """
        Write formatted records to a stream.

        Returns:
            Number of lines written
        """
        lines = self.format(records)
        for line in lines:
            output.write(line + '\n')
        return len(lines)


def group_by_directory(records: Iterable[FileRecord]) -> Dict[str, List[FileRecord]]:
    """
    Partition records by containing directory.

    Groups are keyed in lexicographic directory order. Records keep their
    relative order inside each group.
    """
    groups: Dict[str, List[FileRecord]] = {}
    for record in records:
        groups.setdefault(record.get_directory(), []).append(record)
    return {directory: groups[directory] for directory in sorted(groups)}
