"""Utility modules."""
from knowcode.utils.time_utils import (
    format_clock,
    format_long_date,
    format_relative_time,
    parse_iso_timestamp,
    utc_now,
)

__all__ = [
    "format_clock",
    "format_long_date",
    "format_relative_time",
    "parse_iso_timestamp",
    "utc_now",
]
