"""
Parser for the PHP-FPM plaintext status page.

The page is a fixed report of 15 ``name: value`` lines (the last one empty
when the body ends with a newline):

    pool:                 www
    process manager:      dynamic
    start time:           28/Dec/2016:18:06:46 +0100
    start since:          65086
    accepted conn:        1049662
    listen queue:         0
    max listen queue:     0
    listen queue len:     0
    idle processes:       25
    active processes:     5
    total processes:      30
    max active processes: 30
    max children reached: 0
    slow requests:        0

Fields are located by position *and* name, so any change of the upstream
layout fails loudly instead of publishing values under the wrong label.
"""

import re
from typing import NamedTuple

from .base import ScrapeError


REPORT_LINES = 15

_INTEGER = re.compile(r"[+-]?[0-9]+")

# Values must fit a signed 64-bit integer
INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1


class StatusField(NamedTuple):
    """A required line of the status report."""

    line: int  # 0-based line index
    name: str  # field name as printed by fpm
    label: str  # published metric label


# Lines 0-3 (pool, process manager, start time, start since) are not exported.
# Line 14 is reserved for "current connections" and is not exported either.
STATUS_FIELDS: tuple[StatusField, ...] = (
    StatusField(4, "accepted conn", "accepted_connection"),
    StatusField(5, "listen queue", "listen_queue"),
    StatusField(6, "max listen queue", "max_listen_queue"),
    StatusField(7, "listen queue len", "listen_queue_length"),
    StatusField(8, "idle processes", "idle_processes"),
    StatusField(9, "active processes", "active_processes"),
    StatusField(10, "total processes", "total_processes"),
    StatusField(11, "max active processes", "max_active_processes"),
    StatusField(12, "max children reached", "max_children_reached"),
    StatusField(13, "slow requests", "slow_request"),
)

STATUS_LABELS: tuple[str, ...] = tuple(f.label for f in STATUS_FIELDS)


class MalformedReportError(ScrapeError):
    """The body does not have the expected number of lines."""

    def __init__(self, lines: list[str]):
        self.lines = lines
        super().__init__(f"Unexpected number of lines in status: {lines!r}")


class LineMismatchError(ScrapeError):
    """A required line does not carry the expected field."""

    def __init__(self, expected: str, line: str):
        self.expected = expected
        self.line = line
        super().__init__(f"Unexpected line: {line}\nExpected: {expected}")


class NumericParseError(ScrapeError):
    """A required field value is not a base-10 integer in the int64 range."""

    def __init__(self, name: str, value: str):
        self.name = name
        self.value = value
        super().__init__(f"Invalid integer for {name!r}: {value!r}")


def parse_value(field: StatusField, line: str) -> int:
    """Extract the integer value of ``field`` from its report line."""
    parts = line.split(":")
    if len(parts) != 2 or parts[0] != field.name:
        raise LineMismatchError(field.name, line)

    value = parts[1].strip()
    if not _INTEGER.fullmatch(value):
        raise NumericParseError(field.name, value)

    number = int(value)
    if not INT64_MIN <= number <= INT64_MAX:
        raise NumericParseError(field.name, value)
    return number


def parse_status(body: str) -> dict[str, int]:
    """
    Parse a status report into ``{label: value}`` for every exported field.

    Stops at the first bad line.

    Raises:
        MalformedReportError: If the body is not exactly 15 lines
        LineMismatchError: If a required line has the wrong shape or name
        NumericParseError: If a required value is not an integer
    """
    lines = body.split("\n")
    if len(lines) != REPORT_LINES:
        raise MalformedReportError(lines)

    return {field.label: parse_value(field, lines[field.line]) for field in STATUS_FIELDS}
