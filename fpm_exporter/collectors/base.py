"""
Base collector interface.

Collectors follow the prometheus_client custom collector protocol: the
registry calls ``describe()`` once at registration and ``collect()`` on
every scrape of the exporter. ``collect()`` performs one fresh scrape of
the source under an exclusive lock and turns the outcome into metric
families; it never raises.
"""

import threading
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from prometheus_client.metrics_core import Metric

from ..logging import get_logger


class ScrapeError(Exception):
    """Base class for everything that fails a collection round."""

    pass


@dataclass
class ScrapeResult:
    """Outcome of a single scrape of the source."""

    # label -> value, only filled on success
    values: dict[str, int] = field(default_factory=dict)

    # Set when the scrape failed
    error: Exception | None = None

    # Seconds spent fetching and parsing
    duration: float = 0.0

    @property
    def ok(self) -> bool:
        return self.error is None

    def set_error(self, error: Exception) -> None:
        """Mark the scrape as failed, dropping any partial values."""
        self.error = error
        self.values = {}

    def __repr__(self) -> str:
        status = "OK" if self.ok else f"ERROR: {self.error}"
        return f"ScrapeResult({len(self.values)} values, {self.duration:.3f}s, {status})"


class Collector(ABC):
    """
    Abstract base class for scrape-on-demand collectors.

    Subclasses implement:
    1. scrape() - fetch and parse the source, raising on failure
    2. publish() - turn a ScrapeResult into metric families
    3. describe() - the metric families this collector can ever produce
    """

    def __init__(self, name: str):
        """
        Initialize collector.

        Args:
            name: Source name used in log messages
        """
        self.name = name
        self.logger = get_logger(f"collectors.{name}")

        # Serializes collection rounds: one scrape in flight at a time
        self._lock = threading.Lock()
        self._last_result: ScrapeResult | None = None

    @abstractmethod
    def scrape(self) -> ScrapeResult:
        """
        Fetch and parse the source once.

        Raises:
            ScrapeError: On any fetch or parse failure
        """

    @abstractmethod
    def publish(self, result: ScrapeResult) -> list[Metric]:
        """Apply ``result`` to the collector state and build the exposed metrics."""

    @abstractmethod
    def describe(self) -> list[Metric]:
        """Metric descriptors, without samples. Must not perform I/O."""

    @property
    def last_result(self) -> ScrapeResult | None:
        return self._last_result

    def safe_scrape(self) -> ScrapeResult:
        """Scrape, converting every exception into a failed ScrapeResult."""
        started = time.monotonic()
        try:
            result = self.scrape()
        except Exception as e:
            result = ScrapeResult()
            result.set_error(e)
        result.duration = time.monotonic() - started
        return result

    def collect(self) -> list[Metric]:
        """Run one collection round. Called by the registry on every exporter scrape."""
        with self._lock:
            result = self.safe_scrape()
            self._last_result = result

            if result.ok:
                self.logger.debug(f"Scraped {self.name} in {result.duration:.3f}s")
            else:
                # Anything but a ScrapeError is a bug worth a traceback
                unexpected = not isinstance(result.error, ScrapeError)
                self.logger.error(
                    f"Error scraping {self.name}: {result.error}",
                    exc_info=result.error if unexpected else None,
                )

            return self.publish(result)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.name!r})"
