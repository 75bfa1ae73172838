"""
Filesystem walker for FindFiles.

This module traverses a directory tree depth-first, tests each regular file
against a compiled pattern and captures a FileRecord for every match. An
inaccessible directory costs only its own subtree: the failure is reported and
recorded, and the walk carries on with the remaining entries.
"""

import os
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from ..models.file_record import FileRecord
from .pattern import PatternMatcher


logger = logging.getLogger(__name__)


@dataclass
class WalkError:
    """
    A directory that could not be searched.

    Attributes:
        path: Directory that could not be opened or read
        message: OS error description
    """
    path: str
    message: str

    def __str__(self) -> str:
        return f"Error searching directory: {self.message} Directory: {self.path}"


@dataclass
class WalkResult:
    """
    Records found under one directory, plus any subtrees that failed.

    Results of child directories are merged into their parent, so the result
    for the root describes the whole walk.
    """
    records: List[FileRecord] = field(default_factory=list)
    errors: List[WalkError] = field(default_factory=list)

    @property
    def is_partial(self) -> bool:
        return bool(self.errors)

    def merge(self, other: 'WalkResult') -> None:
        """Append another result's records and errors to this one."""
        self.records.extend(other.records)
        self.errors.extend(other.errors)


class FSWalker:
    """
    Filesystem walker that traverses directories and matches files.

    Entries within a directory are visited in the order the filesystem lists
    them. A subdirectory's matches are collected completely before the walker
    moves on to the next entry of the parent.
    """

    def __init__(self, matcher: PatternMatcher, recursive: bool = True, debug: bool = False):
        """
        Initialize the filesystem walker.

        Args:
            matcher: Compiled pattern applied to each regular file
            recursive: Descend into subdirectories
            debug: Log each directory and pattern before it is searched
        """
        self.matcher = matcher
        self.recursive = recursive
        self.debug = debug
        self._stats = {
            'files_scanned': 0,
            'files_matched': 0,
            'directories_traversed': 0,
            'errors': 0
        }

    def walk(self, root: str) -> WalkResult:
        """
        Walk the tree below root and collect matching file records.

        Args:
            root: Directory to search

        Returns:
            WalkResult holding matched records and per-directory errors
        """
        return self._walk_directory(os.path.abspath(root))

    def _walk_directory(self, directory: str) -> WalkResult:
        result = WalkResult()

        if self.debug:
            logger.debug(f"Directory: {directory}")
            logger.debug(f"Pattern: {self.matcher.source}")

        try:
            with os.scandir(directory) as entries:
                self._stats['directories_traversed'] += 1
                for entry in entries:
                    if entry.name in ('.', '..'):
                        continue

                    full_path = os.path.join(directory, entry.name)

                    if self._is_directory(entry):
                        if self.recursive:
                            result.merge(self._walk_directory(full_path))
                        continue

                    if not self._is_file(entry):
                        continue

                    self._stats['files_scanned'] += 1
                    if not self.matcher.matches(entry.name, full_path):
                        continue

                    record = self._create_record(entry, full_path)
                    if record is not None:
                        self._stats['files_matched'] += 1
                        result.records.append(record)

        except OSError as e:
            message = e.strerror or str(e)
            error = WalkError(path=directory, message=message)
            logger.warning(str(error))
            self._stats['errors'] += 1
            result.errors.append(error)

        return result

    def _is_directory(self, entry: os.DirEntry) -> bool:
        try:
            return entry.is_dir(follow_symlinks=False)
        except OSError:
            return False

    def _is_file(self, entry: os.DirEntry) -> bool:
        try:
            return entry.is_file()
        except OSError:
            return False

    def _create_record(self, entry: os.DirEntry, full_path: str) -> Optional[FileRecord]:
        """
        Capture a FileRecord from a single stat of the entry.

        Returns:
            FileRecord, or None if the file vanished or cannot be stat'ed
        """
        try:
            stat_result = entry.stat()
        except OSError as e:
            logger.warning(f"Error reading metadata for {full_path}: {e}")
            self._stats['errors'] += 1
            return None
        return FileRecord.from_stat(full_path, stat_result)

    def get_stats(self) -> Dict[str, int]:
        """
        Get statistics about the filesystem walking operation.

        Returns:
            Dictionary containing operation statistics
        """
        return self._stats.copy()

    def reset_stats(self) -> None:
        """Reset the statistics counters."""
        self._stats = {
            'files_scanned': 0,
            'files_matched': 0,
            'directories_traversed': 0,
            'errors': 0
        }


def walk(root: str, matcher: PatternMatcher, recursive: bool = True, debug: bool = False) -> WalkResult:
    """
    Convenience function to walk a tree with a compiled matcher.

    Args:
        root: Directory to search
        matcher: Compiled pattern applied to each regular file
        recursive: Descend into subdirectories
        debug: Log each directory and pattern before it is searched

    Returns:
        WalkResult holding matched records and per-directory errors
    """
    return FSWalker(matcher, recursive=recursive, debug=debug).walk(root)
