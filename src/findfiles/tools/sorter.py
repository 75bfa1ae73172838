"""
Result ordering for FindFiles.

The sort order is written as a compact key string: each character selects a
field (p=path, n=name, s=size, c=created, m=modified) and a "-" directly in
front of a field makes that field descending. The string is parsed into a
sequence of SortKey objects, which the comparator consumes independently.
"""

import logging
from functools import cmp_to_key
from typing import Any, Iterable, List, Optional, Sequence

from ..models.file_record import FileRecord, SortDirection, SortField, SortKey


logger = logging.getLogger(__name__)

DEFAULT_SORT_KEYS = [SortKey(field=SortField.PATH, direction=SortDirection.ASCENDING)]


def parse_sort_spec(spec: Optional[str]) -> List[SortKey]:
    """
    Parse a compact sort key string.

    Unrecognized characters are ignored. A "-" applies only to the field
    character that follows it. An empty or all-invalid string gives the
    default ordering, path ascending.

    Args:
        spec: Sort key string such as "s-m"

    Returns:
        Ordered list of SortKey objects, never empty
    """
    keys: List[SortKey] = []
    descending = False

    for char in spec or '':
        if char == '-':
            descending = True
            continue

        try:
            sort_field = SortField(char)
        except ValueError:
            continue

        direction = SortDirection.DESCENDING if descending else SortDirection.ASCENDING
        keys.append(SortKey(field=sort_field, direction=direction))
        descending = False

    if not keys:
        return list(DEFAULT_SORT_KEYS)
    return keys


def _field_value(record: FileRecord, sort_field: SortField) -> Any:
    if sort_field is SortField.PATH:
        return record.path
    if sort_field is SortField.NAME:
        return record.get_filename()
    if sort_field is SortField.SIZE:
        return record.size_bytes
    if sort_field is SortField.CREATION_TIME:
        return record.creation_time
    return record.modification_time


def _compare(a: Any, b: Any) -> int:
    return (a > b) - (a < b)


def compare_records(a: FileRecord, b: FileRecord, keys: Sequence[SortKey]) -> int:
    """
    Compare two records under a key sequence.

    Keys are evaluated in order and the first non-equal key decides. Records
    equal under every key are ordered by path ascending.

    Returns:
        Negative, zero or positive, like a classic cmp function
    """
    for key in keys:
        result = _compare(_field_value(a, key.field), _field_value(b, key.field))
        if key.descending:
            result = -result
        if result:
            return result
    return _compare(a.path, b.path)


def sort_records(records: Iterable[FileRecord], keys: Optional[Sequence[SortKey]] = None) -> List[FileRecord]:
    """
    Sort records by a key sequence.

    Args:
        records: Records to order
        keys: Sort keys; defaults to path ascending

    Returns:
        New list in sorted order
    """
    keys = list(keys) if keys else list(DEFAULT_SORT_KEYS)
    logger.debug(f"Sorting by {''.join(str(key) for key in keys)}")
    return sorted(records, key=cmp_to_key(lambda a, b: compare_records(a, b, keys)))
