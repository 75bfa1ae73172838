"""
Configuration data models for FindFiles.

This module defines the data structures for the persistent defaults that a
configuration file can provide: search behavior, display preferences and
command execution settings.
"""

from typing import Dict, List, Optional, Any
from pydantic import BaseModel, Field, field_validator, model_validator

from .search_options import DisplayMode


class SearchDefaults(BaseModel):
    """
    Default search behavior.

    Attributes:
        use_regex: Treat patterns as regular expressions
        shallow: Do not recurse into subdirectories
        path_match: Match patterns against full paths
        sort: Compact sort key string applied when none is given
    """

    use_regex: bool = Field(False, description="Treat patterns as regular expressions")
    shallow: bool = Field(False, description="Do not recurse into subdirectories")
    path_match: bool = Field(False, description="Match patterns against full paths")
    sort: str = Field("p", description="Default compact sort key string")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return self.model_dump()


class DisplayConfig(BaseModel):
    """
    Configuration for result display.

    Attributes:
        mode: Display mode for results
        concise: Omit headers and the summary line
        group_by_directory: Group results by containing directory
        shared_headers: Print one header for all groups
        console_width: Fixed console width (detected when None)
        fallback_width: Width used when detection is unavailable
        min_width: Smallest width the table layout will use
        utc_timestamps: Show timestamps in UTC instead of local time
    """

    mode: DisplayMode = Field(DisplayMode.TABLE, description="Display mode for results")
    concise: bool = Field(False, description="Omit headers and the summary line")
    group_by_directory: bool = Field(False, description="Group results by directory")
    shared_headers: bool = Field(False, description="Print one header for all groups")
    console_width: Optional[int] = Field(None, gt=0, description="Fixed console width")
    fallback_width: int = Field(79, gt=0, description="Width used when detection is unavailable")
    min_width: int = Field(50, gt=0, description="Smallest table width")
    utc_timestamps: bool = Field(False, description="Show timestamps in UTC")

    @field_validator('mode', mode='before')
    @classmethod
    def validate_mode(cls, v) -> DisplayMode:
        """Validate and convert mode to enum."""
        if isinstance(v, str):
            try:
                return DisplayMode(v)
            except ValueError:
                raise ValueError(f"Invalid display mode: {v}")
        return v

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        data = self.model_dump()
        data['mode'] = self.mode.value
        return data


class ExecutionConfig(BaseModel):
    """
    Configuration for per-file command execution.

    Attributes:
        dry_run: Report commands without launching them
        show_source_path: Prefix dry-run commands with the source path
        fail_on_exit_code: Count a non-zero exit status as a failure
    """

    dry_run: bool = Field(False, description="Report commands without launching them")
    show_source_path: bool = Field(True, description="Prefix dry-run commands with the source path")
    fail_on_exit_code: bool = Field(False, description="Count non-zero exit status as failure")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return self.model_dump()


class FindFilesConfig(BaseModel):
    """
    Main configuration class for FindFiles.

    Attributes:
        search: Default search behavior
        display: Display preferences
        execution: Command execution settings
    """

    search: SearchDefaults = Field(default_factory=SearchDefaults, description="Default search behavior")
    display: DisplayConfig = Field(default_factory=DisplayConfig, description="Display preferences")
    execution: ExecutionConfig = Field(default_factory=ExecutionConfig, description="Command execution settings")

    @model_validator(mode='after')
    def validate_widths(self):
        """Validate that width settings are consistent."""
        if self.display.fallback_width < self.display.min_width:
            raise ValueError(
                f"display.fallback_width ({self.display.fallback_width}) "
                f"must be at least display.min_width ({self.display.min_width})"
            )
        return self

    def validate_configuration(self) -> List[str]:
        """
        Check for settings that are legal but probably unintended.

        Returns:
            List of warning messages
        """
        warnings = []

        if self.display.mode is DisplayMode.BARE and self.display.group_by_directory:
            warnings.append("display.group_by_directory has no effect in bare mode")

        if self.display.shared_headers and not self.display.group_by_directory:
            warnings.append("display.shared_headers only applies when group_by_directory is set")

        if self.display.console_width is not None and self.display.console_width < self.display.min_width:
            warnings.append(
                f"display.console_width ({self.display.console_width}) is below "
                f"display.min_width ({self.display.min_width}) and will be raised"
            )

        return warnings

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            'search': self.search.to_dict(),
            'display': self.display.to_dict(),
            'execution': self.execution.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'FindFilesConfig':
        """Create configuration from dictionary."""
        return cls.model_validate(data)

    def __str__(self) -> str:
        return (
            f"FindFilesConfig(sort={self.search.sort!r}, "
            f"mode={self.display.mode.value}, dry_run={self.execution.dry_run})"
        )


def validate_config_dict(config_data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Validate the top-level shape of a configuration dictionary.

    Args:
        config_data: Raw configuration dictionary

    Returns:
        The same dictionary when valid

    Raises:
        ValueError: If an unknown section is present or a section is not a mapping
    """
    known_sections = {'search', 'display', 'execution'}

    unknown = sorted(set(config_data) - known_sections)
    if unknown:
        raise ValueError(f"Unknown configuration section(s): {', '.join(unknown)}")

    for section, value in config_data.items():
        if value is not None and not isinstance(value, dict):
            raise ValueError(f"Configuration section '{section}' must be a mapping")

    return {key: value for key, value in config_data.items() if value is not None}
