"""
Pattern compilation for FindFiles.

Turns a user pattern into a case-insensitive matcher. DOS-style wildcard
patterns ("*" for any run of characters, "?" for exactly one) are converted
to regular expressions; regular expressions are compiled as given.
"""

import re
import logging
from enum import Enum
from typing import Optional

from ..config.parser import ConfigurationError


logger = logging.getLogger(__name__)


class MatchTarget(Enum):
    """What part of a file's path the pattern is tested against."""
    FILENAME = "filename"
    FULL_PATH = "full-path"


def wildcard_to_regex(pattern: str) -> str:
    """
    Convert a DOS wildcard pattern to an unanchored regular expression.

    Every regex metacharacter is escaped first, then the escaped "*" and "?"
    are turned back into their wildcard meaning.

    Args:
        pattern: Wildcard pattern such as "*.txt" or "f?o"

    Returns:
        Regular expression source text
    """
    escaped = re.escape(pattern)
    return escaped.replace(r'\*', '.*').replace(r'\?', '.')


class PatternMatcher:
    """
    Compiled case-insensitive matcher for filenames or full paths.

    Wildcard patterns tested against filenames must match the whole filename.
    Every other combination is a substring search.
    """

    def __init__(self, regex: re.Pattern, target: MatchTarget, anchored: bool, source: str):
        self.regex = regex
        self.target = target
        self.anchored = anchored
        self.source = source

    @property
    def matches_full_path(self) -> bool:
        return self.target is MatchTarget.FULL_PATH

    def match_text(self, text: str) -> bool:
        """Test a single string against the compiled pattern."""
        if self.anchored:
            return self.regex.fullmatch(text) is not None
        return self.regex.search(text) is not None

    def matches(self, filename: str, full_path: Optional[str] = None) -> bool:
        """
        Check whether a file matches.

        Args:
            filename: Base filename of the entry
            full_path: Full path of the entry, required in full-path mode

        Returns:
            True if the file matches the pattern
        """
        if self.matches_full_path:
            return self.match_text(full_path if full_path is not None else filename)
        return self.match_text(filename)

    def __repr__(self) -> str:
        return (
            f"PatternMatcher(source={self.source!r}, regex={self.regex.pattern!r}, "
            f"target={self.target.value}, anchored={self.anchored})"
        )


def compile_pattern(pattern: str, use_regex: bool = False,
                    target: MatchTarget = MatchTarget.FILENAME) -> PatternMatcher:
    """
    Compile a user pattern into a PatternMatcher.

    Args:
        pattern: Raw pattern string
        use_regex: Treat the pattern as a regular expression instead of a wildcard
        target: Whether the pattern is tested against filenames or full paths

    Returns:
        Compiled PatternMatcher

    Raises:
        ConfigurationError: If the pattern is not a valid regular expression
    """
    if use_regex:
        source = pattern
        anchored = False
    else:
        source = wildcard_to_regex(pattern)
        anchored = target is MatchTarget.FILENAME

    try:
        regex = re.compile(source, re.IGNORECASE | re.DOTALL)
    except re.error as e:
        raise ConfigurationError(f"Invalid regex pattern '{pattern}': {e}") from e

    matcher = PatternMatcher(regex, target, anchored, pattern)
    logger.debug(f"Compiled pattern: {matcher!r}")
    return matcher
