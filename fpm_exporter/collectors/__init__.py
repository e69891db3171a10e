"""
Metric collectors.
"""

from .base import Collector, ScrapeError, ScrapeResult
from .fpm import FetchError, FpmCollector, StatusError
from .status import (
    STATUS_FIELDS,
    STATUS_LABELS,
    LineMismatchError,
    MalformedReportError,
    NumericParseError,
    StatusField,
    parse_status,
)

__all__ = [
    "Collector",
    "ScrapeError",
    "ScrapeResult",
    "FpmCollector",
    "FetchError",
    "StatusError",
    "STATUS_FIELDS",
    "STATUS_LABELS",
    "StatusField",
    "MalformedReportError",
    "LineMismatchError",
    "NumericParseError",
    "parse_status",
]
