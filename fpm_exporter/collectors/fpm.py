"""
PHP-FPM status page collector.

Fetches the fpm status page on every collection round and exposes:

- ``fpm_connections_current{state="..."}``: one gauge per status field
- ``fpm_exporter_scrape_failures_total``: failed collection rounds

Gauges keep their last good values when a round fails. The failure
counter sample is only emitted by rounds that failed.
"""

import requests
import urllib3
from prometheus_client.core import CounterMetricFamily, GaugeMetricFamily
from prometheus_client.metrics_core import Metric

from ..config.schema import FpmConfig
from ..const import APP_VERSION, DEFAULT_INSECURE, DEFAULT_TIMEOUT, NAMESPACE
from .base import Collector, ScrapeError, ScrapeResult
from .status import STATUS_LABELS, parse_status


class FetchError(ScrapeError):
    """The status page could not be retrieved."""

    def __init__(self, uri: str, cause: Exception):
        self.uri = uri
        self.cause = cause
        super().__init__(f"GET {uri} failed: {cause}")


class StatusError(ScrapeError):
    """The status page answered with a status outside [200, 400)."""

    def __init__(self, status_code: int, reason: str, body: str):
        self.status_code = status_code
        self.reason = reason
        self.body = body
        super().__init__(f"Status {status_code} {reason}: {body}")


def create_session(insecure: bool = DEFAULT_INSECURE) -> requests.Session:
    """
    Create the HTTP session used for scraping.

    Args:
        insecure: Skip TLS certificate verification
    """
    session = requests.Session()
    session.verify = not insecure
    session.headers["User-Agent"] = f"fpm-exporter/{APP_VERSION}"

    if insecure:
        urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)

    return session


class FpmCollector(Collector):
    """
    Collector for a single PHP-FPM pool status page.

    Usage:
        registry = CollectorRegistry()
        registry.register(FpmCollector("http://localhost/fpm_status"))
    """

    def __init__(
        self,
        scrape_uri: str,
        insecure: bool = DEFAULT_INSECURE,
        timeout: float = DEFAULT_TIMEOUT,
        namespace: str = NAMESPACE,
        session: requests.Session | None = None,
    ):
        """
        Initialize collector. Performs no I/O.

        Args:
            scrape_uri: URI of the fpm status page
            insecure: Skip TLS certificate verification
            timeout: Timeout in seconds for connecting and reading
            namespace: Prefix of the exposed metric names
            session: HTTP session to use instead of a fresh one
        """
        super().__init__(name="fpm")

        self.scrape_uri = scrape_uri
        self.timeout = timeout
        self.namespace = namespace
        self.session = session or create_session(insecure)

        self._values: dict[str, int] = dict.fromkeys(STATUS_LABELS, 0)
        self._failures = 0

    @classmethod
    def from_config(cls, config: FpmConfig) -> "FpmCollector":
        return cls(config.scrape_uri, insecure=config.insecure, timeout=config.timeout)

    @property
    def values(self) -> dict[str, int]:
        """Current gauge values by label."""
        return dict(self._values)

    @property
    def failures(self) -> int:
        """Number of failed collection rounds so far."""
        return self._failures

    def fetch(self) -> str:
        """
        GET the status page and return its body.

        Raises:
            FetchError: On connection, timeout or read failures
            StatusError: If the status code is outside [200, 400)
        """
        try:
            response = self.session.get(self.scrape_uri, timeout=self.timeout, stream=True)
        except requests.RequestException as e:
            raise FetchError(self.scrape_uri, e) from e

        with response:
            read_error: requests.RequestException | None = None
            try:
                content = response.content
            except requests.RequestException as e:
                content = b""
                read_error = e

        if not 200 <= response.status_code < 400:
            body = str(read_error) if read_error else content.decode("utf-8", errors="replace")
            raise StatusError(response.status_code, response.reason, body)

        if read_error is not None:
            raise FetchError(self.scrape_uri, read_error) from read_error

        return content.decode("utf-8", errors="replace")

    def scrape(self) -> ScrapeResult:
        body = self.fetch()
        return ScrapeResult(values=parse_status(body))

    def publish(self, result: ScrapeResult) -> list[Metric]:
        metrics: list[Metric] = []

        if result.ok:
            # All ten fields parsed; replace in place
            self._values.update(result.values)
        else:
            self._failures += 1
            failures = self._failures_family()
            failures.add_metric([], self._failures)
            metrics.append(failures)

        current = self._current_family()
        for label in STATUS_LABELS:
            current.add_metric([label], self._values[label])
        metrics.append(current)

        return metrics

    def describe(self) -> list[Metric]:
        return [self._failures_family(), self._current_family()]

    def close(self) -> None:
        """Release pooled HTTP connections."""
        self.session.close()

    def _failures_family(self) -> CounterMetricFamily:
        return CounterMetricFamily(
            f"{self.namespace}_exporter_scrape_failures",
            "Number of errors while scraping fpm.",
        )

    def _current_family(self) -> GaugeMetricFamily:
        return GaugeMetricFamily(
            f"{self.namespace}_connections_current",
            "Number of connections currently processed by fpm",
            labels=["state"],
        )

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.scrape_uri!r})"
