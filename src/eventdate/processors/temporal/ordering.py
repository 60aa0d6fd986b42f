"""Date component orderings.

An ordering names which positions of a numeric date string hold the year,
month, day and time. Callers pass one as a hint to restrict parsing to the
patterns of that family.
"""

from enum import Enum


class DateComponentOrdering(Enum):
    """Ordering families of the format catalogue."""
    YMDTZ = "year-month-day-time-zone"
    YMDT = "year-month-day-time"
    YMD = "year-month-day"
    DMYT = "day-month-year-time"
    DMY = "day-month-year"
    MDYT = "month-day-year-time"
    MDY = "month-day-year"
    YM = "year-month"
    YW = "year-week"
    YD = "year-day-of-year"
    Y = "year"
    HAN = "han-year-month-day"
    # No hint: base patterns first, then every ambiguity group
    ISO_ETC = "iso-etc"

    @classmethod
    def from_name(cls, name: str) -> "DateComponentOrdering":
        """Look up an ordering by member name or value, case-insensitively."""
        key = name.strip()
        if key.upper() in cls.__members__:
            return cls[key.upper()]
        for ordering in cls:
            if ordering.value == key.lower():
                return ordering
        raise ValueError(f"Unknown date component ordering: {name}")


ISO_FORMATS = (
    DateComponentOrdering.YMDTZ,
    DateComponentOrdering.YMDT,
    DateComponentOrdering.YMD,
    DateComponentOrdering.YM,
    DateComponentOrdering.YW,
    DateComponentOrdering.YD,
    DateComponentOrdering.Y,
)

DMY_FORMATS = (DateComponentOrdering.DMYT, DateComponentOrdering.DMY)

MDY_FORMATS = (DateComponentOrdering.MDYT, DateComponentOrdering.MDY)
