"""Interval splitting for event date ranges."""

import re
from typing import List, Optional


# 1999-01-20/31, 1999-01/12 and 1998-9-30/10-7
ISO_ABBREVIATED_RANGE = re.compile(
    r"(?P<year>\d{4})-(?P<month>\d{1,2})(?:-(?P<day>\d{1,2}))?"
    r"/(?:(?P<end_month>\d{1,2})-)?(?P<end_last>\d{1,2})"
)

PERIOD_SEPARATOR = "/"


def split_iso_date_range(text: str) -> Optional[List[str]]:
    """Expand an ISO interval whose end omits the leading parts of the start.

    Returns:
        Start and end strings, or None if the text is not such an interval
    """
    found = ISO_ABBREVIATED_RANGE.fullmatch(text.strip())
    if found is None:
        return None

    year, month, day = found.group("year"), found.group("month"), found.group("day")
    start = found.group(0).split(PERIOD_SEPARATOR)[0]
    end_month, end_last = found.group("end_month"), found.group("end_last")

    if day is None:
        # 1999-01/12: the end is a month
        if end_month is not None or not 1 <= int(end_last) <= 12:
            return None
        return [start, f"{year}-{end_last}"]

    if end_month is not None:
        if not 1 <= int(end_month) <= 12:
            return None
        return [start, f"{year}-{end_month}-{end_last}"]

    return [start, f"{year}-{month}-{end_last}"]


def split_period(text: Optional[str]) -> List[str]:
    """Split a date range into start and end; a single date is returned twice.

    Only a single separator splits, and only when the start has at least four
    characters, so that 01/1930 and 01/02/1999 stay whole dates.
    """
    if text is None or not text.strip():
        return ["", ""]
    text = text.strip()

    expanded = split_iso_date_range(text)
    if expanded is not None:
        return expanded

    if text.count(PERIOD_SEPARATOR) == 1:
        start, end = text.split(PERIOD_SEPARATOR)
        if len(start.strip()) >= 4 and end.strip():
            return [start.strip(), end.strip()]

    return [text, text]
