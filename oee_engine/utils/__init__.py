from .coercion import (
    Coerced,
    coerce_bool,
    coerce_double,
    coerce_int,
    coerce_string,
    coerce_time_of_day,
    read_bool,
    read_double,
    read_int,
    read_raw,
    read_string,
)
from .formatting import format_clock, format_duration, format_timestamp

__all__ = [
    "Coerced",
    "coerce_bool",
    "coerce_double",
    "coerce_int",
    "coerce_string",
    "coerce_time_of_day",
    "read_bool",
    "read_double",
    "read_int",
    "read_raw",
    "read_string",
    "format_clock",
    "format_duration",
    "format_timestamp",
]
