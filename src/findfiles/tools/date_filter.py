"""
Date parsing and filtering for FindFiles.

Date bounds arrive as short literal strings and are parsed into UTC instants.
Filtering keeps the records whose creation and modification times fall inside
every bound that is set, preserving their order.
"""

import re
import logging
from datetime import datetime, timezone
from typing import Iterable, List, Optional

from ..config.parser import ConfigurationError
from ..models.file_record import DateWindow, FileRecord


logger = logging.getLogger(__name__)


# Each accepted literal shape and the strptime format that reads it.
DATE_FORMATS = [
    (re.compile(r'\d{8}'), '%Y%m%d'),
    (re.compile(r'\d{12}'), '%Y%m%d%H%M'),
    (re.compile(r'\d{14}'), '%Y%m%d%H%M%S'),
    (re.compile(r'\d{4}/\d{2}/\d{2}'), '%Y/%m/%d'),
    (re.compile(r'\d{4}/\d{2}/\d{2}-\d{2}:\d{2}'), '%Y/%m/%d-%H:%M'),
    (re.compile(r'\d{4}/\d{2}/\d{2}-\d{2}:\d{2}:\d{2}'), '%Y/%m/%d-%H:%M:%S'),
]


def parse_date(value: str) -> datetime:
    """
    Parse a date literal into a UTC instant.

    Accepted forms: YYYYMMDD, YYYYMMDDHHMM, YYYYMMDDHHMMSS, YYYY/MM/DD,
    YYYY/MM/DD-HH:MM and YYYY/MM/DD-HH:MM:SS.

    Args:
        value: Date string to parse

    Returns:
        Timezone-aware datetime in UTC

    Raises:
        ConfigurationError: If the string matches no accepted form or names an
            impossible date
    """
    text = value.strip()
    for shape, fmt in DATE_FORMATS:
        if shape.fullmatch(text):
            try:
                return datetime.strptime(text, fmt).replace(tzinfo=timezone.utc)
            except ValueError as e:
                raise ConfigurationError(f"Invalid date '{value}': {e}") from e

    raise ConfigurationError(
        f"Unrecognized date '{value}' (expected YYYYMMDD[HHMM[SS]] or YYYY/MM/DD[-HH:MM[:SS]])"
    )


def build_date_window(created_from: Optional[str] = None, created_to: Optional[str] = None,
                      modified_from: Optional[str] = None, modified_to: Optional[str] = None) -> DateWindow:
    """
    Build a DateWindow from optional date literals.

    Raises:
        ConfigurationError: If any supplied literal cannot be parsed
    """
    def _parse(value: Optional[str]) -> Optional[datetime]:
        return parse_date(value) if value is not None else None

    return DateWindow(
        created_from=_parse(created_from),
        created_to=_parse(created_to),
        modified_from=_parse(modified_from),
        modified_to=_parse(modified_to),
    )


def filter_records(records: Iterable[FileRecord], window: DateWindow) -> List[FileRecord]:
    """
    Keep the records that fall inside the date window.

    Args:
        records: Records in pipeline order
        window: Date bounds; unset bounds impose no constraint

    Returns:
        Records inside the window, in their original order
    """
    records = list(records)
    if window.is_empty():
        return records

    kept = [record for record in records if window.contains(record)]
    logger.debug(f"Date filter kept {len(kept)} of {len(records)} records")
    return kept
