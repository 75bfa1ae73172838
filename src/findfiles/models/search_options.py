"""
Search options data model for FindFiles.

This module defines the fully validated set of options that drives one run of
the search pipeline: where to search, what to match, how to filter and order
the results, and what to do with them.
"""

from typing import Dict, Optional, Any
from enum import Enum
from pydantic import BaseModel, Field, field_validator, model_validator

from .file_record import CommandTemplate, DateWindow


class DisplayMode(Enum):
    """Supported result display modes."""
    TABLE = "table"
    TAB = "tab"
    BARE = "bare"


class SearchOptions(BaseModel):
    """
    Represents one search run with all parameters and constraints.

    Attributes:
        directory: Root directory to search
        pattern: Wildcard pattern or regular expression to match
        use_regex: Treat the pattern as a regular expression
        shallow: Do not recurse into subdirectories
        path_match: Match the pattern against the full path instead of the filename
        sort_spec: Compact sort key string (e.g. "s-m")
        date_window: Creation and modification time bounds
        command: Command run against each result instead of displaying it
        dry_run: Report commands without launching them
        debug: Emit debug diagnostics during the search
        display_mode: How results are displayed
        concise: Omit headers and the summary line
        group_by_directory: Display results grouped by containing directory
        shared_headers: Print one header for all groups instead of one per group
        show_source_path: Prefix dry-run commands with the source path
        fail_on_exit_code: Count a non-zero command exit status as a failure
    """

    directory: str = Field(..., min_length=1, description="Root directory to search")
    pattern: str = Field("*", min_length=1, description="Wildcard pattern or regular expression")
    use_regex: bool = Field(False, description="Treat the pattern as a regular expression")
    shallow: bool = Field(False, description="Do not recurse into subdirectories")
    path_match: bool = Field(False, description="Match against the full path")
    sort_spec: Optional[str] = Field(None, description="Compact sort key string")
    date_window: DateWindow = Field(default_factory=DateWindow, description="Date bounds")
    command: Optional[CommandTemplate] = Field(None, description="Command run against each result")
    dry_run: bool = Field(False, description="Report commands without launching them")
    debug: bool = Field(False, description="Emit debug diagnostics")
    display_mode: DisplayMode = Field(DisplayMode.TABLE, description="Result display mode")
    concise: bool = Field(False, description="Omit headers and summary")
    group_by_directory: bool = Field(False, description="Group results by directory")
    shared_headers: bool = Field(False, description="One header for all groups")
    show_source_path: bool = Field(True, description="Prefix dry-run commands with the source path")
    fail_on_exit_code: bool = Field(False, description="Count non-zero exit status as failure")

    @field_validator('directory')
    @classmethod
    def validate_directory(cls, v: str) -> str:
        """Validate the root directory string."""
        if not v or not v.strip():
            raise ValueError("Search directory cannot be empty")
        return v.strip()

    @field_validator('display_mode', mode='before')
    @classmethod
    def validate_display_mode(cls, v) -> DisplayMode:
        """Validate and convert display mode to enum."""
        if isinstance(v, str):
            try:
                return DisplayMode(v)
            except ValueError:
                raise ValueError(f"Invalid display mode: {v}")
        return v

    @field_validator('command', mode='before')
    @classmethod
    def validate_command(cls, v):
        """Accept a bare template string for the command."""
        if isinstance(v, str):
            return CommandTemplate(template=v)
        return v

    @model_validator(mode='after')
    def validate_modes(self):
        """Bare display implies concise output."""
        if self.display_mode is DisplayMode.BARE:
            self.concise = True
        return self

    def has_command(self) -> bool:
        """Check if results are handed to a command instead of displayed."""
        return self.command is not None

    def has_date_filter(self) -> bool:
        """Check if any date bound is set."""
        return not self.date_window.is_empty()

    def to_dict(self) -> Dict[str, Any]:
        """Convert the options to a dictionary representation."""
        data = self.model_dump(mode='json')
        data['command'] = str(self.command) if self.command else None
        return data

    def __str__(self) -> str:
        parts = [f"Directory: {self.directory}"]
        parts.append(f"Pattern: '{self.pattern}'")

        if self.use_regex:
            parts.append("Regex")
        if self.shallow:
            parts.append("Shallow")
        if self.path_match:
            parts.append("Path match")
        if self.sort_spec:
            parts.append(f"Sort: {self.sort_spec}")
        if self.has_date_filter():
            parts.append("Date filter applied")
        if self.command:
            parts.append(f"Command: {self.command}")
            if self.dry_run:
                parts.append("Dry run")

        return " | ".join(parts)
