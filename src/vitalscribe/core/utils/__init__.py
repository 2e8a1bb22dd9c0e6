"""
Utility functions shared across layers.
"""

from .string_utils import generate_id
from .datetime_utils import (
    format_date,
    get_current_timestamp,
    parse_calendar_date,
    parse_datetime,
)

__all__ = [
    "generate_id",
    "get_current_timestamp",
    "format_date",
    "parse_calendar_date",
    "parse_datetime",
]
