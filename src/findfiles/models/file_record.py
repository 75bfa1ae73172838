"""
File record data models for FindFiles.

This module defines the core data structures that flow through the search
pipeline: the immutable per-file metadata snapshot, the sort keys used to
order results, the optional date window used to filter them, and the command
template run against each of them.
"""

import os
from datetime import datetime, timezone
from enum import Enum
from typing import ClassVar, Dict, List, Optional, Any, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator


def path_separators() -> str:
    """Get the path separators recognised on the running platform."""
    return os.sep + (os.altsep or '')


def split_path(path: str, separators: Optional[str] = None) -> Tuple[str, str]:
    """
    Split a path into its containing directory and base filename.

    Splits on the last separator found. A path without any separator lives
    in the current directory, reported as ".".

    Args:
        path: Path string to split
        separators: Characters treated as separators (platform default if None)

    Returns:
        Tuple of (directory, filename)
    """
    separators = separators or path_separators()
    last = max(path.rfind(sep) for sep in separators)
    if last < 0:
        return '.', path
    return path[:last], path[last + 1:]


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class FileRecord(BaseModel):
    """
    Metadata snapshot of one matched regular file.

    All fields are captured from a single filesystem metadata read when the
    file is found and never recomputed afterwards. Records are immutable.

    Attributes:
        path: Absolute path to the file, using the platform separator
        creation_time: Creation instant in UTC
        modification_time: Last modification instant in UTC
        size_bytes: Size of the file in bytes
    """

    model_config = ConfigDict(frozen=True)

    path: str = Field(..., min_length=1, description="Absolute path to the matched file")
    creation_time: datetime = Field(..., description="Creation instant (UTC)")
    modification_time: datetime = Field(..., description="Last modification instant (UTC)")
    size_bytes: int = Field(..., ge=0, lt=2 ** 64, description="File size in bytes")

    @field_validator('creation_time', 'modification_time')
    @classmethod
    def validate_times(cls, v: datetime) -> datetime:
        """Normalize timestamps to aware UTC datetimes."""
        return _as_utc(v)

    @classmethod
    def from_stat(cls, path: str, stat_result: os.stat_result) -> 'FileRecord':
        """
        Build a record from one stat() result.

        Creation time uses st_birthtime where the platform provides it and
        falls back to st_ctime otherwise.
        """
        created = getattr(stat_result, 'st_birthtime', None)
        if created is None:
            created = stat_result.st_ctime
        return cls(
            path=path,
            creation_time=datetime.fromtimestamp(created, tz=timezone.utc),
            modification_time=datetime.fromtimestamp(stat_result.st_mtime, tz=timezone.utc),
            size_bytes=stat_result.st_size,
        )

    def get_filename(self, separators: Optional[str] = None) -> str:
        """Get just the filename without directory path."""
        return split_path(self.path, separators)[1]

    def get_directory(self, separators: Optional[str] = None) -> str:
        """Get the directory containing this file."""
        return split_path(self.path, separators)[0]

    def get_size_kb(self) -> int:
        """Get the size in kilobytes, rounded up."""
        return (self.size_bytes + 1023) // 1024

    def to_dict(self) -> Dict[str, Any]:
        """Convert record to dictionary representation."""
        data = self.model_dump()
        data['creation_time'] = self.creation_time.isoformat()
        data['modification_time'] = self.modification_time.isoformat()
        data['filename'] = self.get_filename()
        data['directory'] = self.get_directory()
        return data

    def __str__(self) -> str:
        return f"{self.path} ({self.size_bytes} bytes)"


class SortField(Enum):
    """Record fields that results can be ordered by."""
    PATH = "p"
    NAME = "n"
    SIZE = "s"
    CREATION_TIME = "c"
    MODIFICATION_TIME = "m"


class SortDirection(Enum):
    """Ordering direction for a single sort key."""
    ASCENDING = "asc"
    DESCENDING = "desc"


class SortKey(BaseModel):
    """One step of a multi-key ordering."""

    model_config = ConfigDict(frozen=True)

    field: SortField = Field(..., description="Record field to compare")
    direction: SortDirection = Field(SortDirection.ASCENDING, description="Ordering direction")

    @field_validator('field', mode='before')
    @classmethod
    def validate_field(cls, v) -> SortField:
        """Accept the compact key character as well as the enum."""
        if isinstance(v, str):
            try:
                return SortField(v)
            except ValueError:
                raise ValueError(f"Invalid sort field: {v}")
        return v

    @property
    def descending(self) -> bool:
        return self.direction is SortDirection.DESCENDING

    def __str__(self) -> str:
        return f"{'-' if self.descending else ''}{self.field.value}"


class DateWindow(BaseModel):
    """
    Optional creation and modification time bounds.

    "From" bounds are inclusive and "to" bounds are exclusive. Any bound left
    as None imposes no constraint.

    Attributes:
        created_from: Earliest creation instant kept
        created_to: Creation instants at or after this are dropped
        modified_from: Earliest modification instant kept
        modified_to: Modification instants at or after this are dropped
    """

    model_config = ConfigDict(frozen=True)

    created_from: Optional[datetime] = Field(None, description="Inclusive lower creation bound")
    created_to: Optional[datetime] = Field(None, description="Exclusive upper creation bound")
    modified_from: Optional[datetime] = Field(None, description="Inclusive lower modification bound")
    modified_to: Optional[datetime] = Field(None, description="Exclusive upper modification bound")

    @field_validator('created_from', 'created_to', 'modified_from', 'modified_to')
    @classmethod
    def validate_bounds(cls, v: Optional[datetime]) -> Optional[datetime]:
        """Normalize bounds to aware UTC datetimes."""
        if v is None:
            return v
        return _as_utc(v)

    def is_empty(self) -> bool:
        """Check whether no bound is set."""
        return all(
            bound is None
            for bound in (self.created_from, self.created_to, self.modified_from, self.modified_to)
        )

    def contains(self, record: FileRecord) -> bool:
        """Check whether a record falls inside every set bound."""
        if self.created_from is not None and record.creation_time < self.created_from:
            return False
        if self.created_to is not None and record.creation_time >= self.created_to:
            return False
        if self.modified_from is not None and record.modification_time < self.modified_from:
            return False
        if self.modified_to is not None and record.modification_time >= self.modified_to:
            return False
        return True


class QuoteStyle(Enum):
    """How substituted values are quoted in a command line."""
    POSIX = "posix"
    WINDOWS = "windows"

    @classmethod
    def native(cls) -> 'QuoteStyle':
        """Get the quoting style of the running platform."""
        return cls.WINDOWS if os.name == 'nt' else cls.POSIX


class CommandTemplate(BaseModel):
    """
    Command line run against each record.

    Placeholders:
        %d: directory containing the file
        %n: base filename
        %f: full path
    """

    model_config = ConfigDict(frozen=True)

    PLACEHOLDERS: ClassVar[Tuple[str, ...]] = ('%d', '%n', '%f')

    template: str = Field(..., min_length=1, description="Command line with placeholders")
    quote_style: QuoteStyle = Field(default_factory=QuoteStyle.native, description="Quoting style")

    @field_validator('template')
    @classmethod
    def validate_template(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Command template cannot be empty")
        return v

    @field_validator('quote_style', mode='before')
    @classmethod
    def validate_quote_style(cls, v) -> QuoteStyle:
        if isinstance(v, str):
            try:
                return QuoteStyle(v)
            except ValueError:
                raise ValueError(f"Invalid quote style: {v}")
        return v

    def get_placeholders(self) -> List[str]:
        """Get the placeholders used by this template."""
        return [p for p in self.PLACEHOLDERS if p in self.template]

    def __str__(self) -> str:
        return self.template
