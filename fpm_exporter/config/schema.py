"""
Configuration schema.

Each section is a dataclass with defaults and a ``from_block`` constructor
that reads a parsed config block.
"""

from dataclasses import dataclass, field

from ..const import (
    DEFAULT_INSECURE,
    DEFAULT_LISTEN_ADDRESS,
    DEFAULT_METRICS_ENDPOINT,
    DEFAULT_SCRAPE_URI,
    DEFAULT_TIMEOUT,
)
from .parser import Block, ConfigDocument


def parse_listen_address(address: str) -> tuple[str, int]:
    """
    Split a ``host:port`` listen address.

    An empty host (``:9113``) means all interfaces. IPv6 hosts may be
    given in brackets (``[::1]:9113``).

    Raises:
        ValueError: If the port is missing or out of range
    """
    host, sep, port_str = address.rpartition(":")
    if not sep:
        raise ValueError(f"Listen address must be host:port, got {address!r}")

    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]

    try:
        port = int(port_str)
    except ValueError:
        raise ValueError(f"Invalid port in listen address {address!r}") from None

    if not 0 <= port <= 65535:
        raise ValueError(f"Port out of range in listen address {address!r}")

    return host, port


def check_timeout(value: str | int | float | bool) -> float:
    """
    Convert a scrape timeout to seconds.

    Raises:
        ValueError: If the value is not a positive number
    """
    timeout = float(value)
    if not timeout > 0:
        raise ValueError(f"Scrape timeout must be positive, got {value}")
    return timeout


@dataclass
class TelemetryConfig:
    """Where the exporter serves its own metrics."""
    address: str = DEFAULT_LISTEN_ADDRESS
    endpoint: str = DEFAULT_METRICS_ENDPOINT
    process_metrics: bool = True

    @classmethod
    def from_block(cls, block: Block | None) -> "TelemetryConfig":
        """Create TelemetryConfig from a parsed 'telemetry' block."""
        if block is None:
            return cls()

        return cls(
            address=str(block.get_value("address", DEFAULT_LISTEN_ADDRESS)),
            endpoint=str(block.get_value("endpoint", DEFAULT_METRICS_ENDPOINT)),
            process_metrics=bool(block.get_value("process_metrics", True)),
        )

    def listen(self) -> tuple[str, int]:
        """Host and port to bind."""
        return parse_listen_address(self.address)


@dataclass
class FpmConfig:
    """The PHP-FPM status page to scrape."""
    scrape_uri: str = DEFAULT_SCRAPE_URI
    insecure: bool = DEFAULT_INSECURE  # skip TLS certificate verification
    timeout: float = DEFAULT_TIMEOUT  # seconds

    @classmethod
    def from_block(cls, block: Block | None) -> "FpmConfig":
        """Create FpmConfig from a parsed 'fpm' block."""
        if block is None:
            return cls()

        return cls(
            scrape_uri=str(block.get_value("scrape_uri", DEFAULT_SCRAPE_URI)),
            insecure=bool(block.get_value("insecure", DEFAULT_INSECURE)),
            timeout=check_timeout(block.get_value("timeout", DEFAULT_TIMEOUT)),
        )


@dataclass
class LoggingConfig:
    """Logging configuration."""
    level: str = "info"  # debug, info, warning, error
    file: str | None = None
    file_level: str = "debug"
    file_max_size: int = 10  # MB
    file_keep: int = 5
    colors: bool = True
    format: str = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

    @classmethod
    def from_block(cls, block: Block | None) -> "LoggingConfig":
        """Create LoggingConfig from a parsed 'logging' block."""
        if block is None:
            return cls()

        defaults = cls()
        file = block.get_value("file")
        return cls(
            level=str(block.get_value("level", defaults.level)),
            file=str(file) if file is not None else None,
            file_level=str(block.get_value("file_level", defaults.file_level)),
            file_max_size=int(block.get_value("file_max_size", defaults.file_max_size)),
            file_keep=int(block.get_value("file_keep", defaults.file_keep)),
            colors=bool(block.get_value("colors", defaults.colors)),
            format=str(block.get_value("format", defaults.format)),
        )


@dataclass
class Config:
    """Complete application configuration."""
    telemetry: TelemetryConfig = field(default_factory=TelemetryConfig)
    fpm: FpmConfig = field(default_factory=FpmConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_document(cls, doc: ConfigDocument) -> "Config":
        """Create Config from a parsed ConfigDocument."""
        return cls(
            telemetry=TelemetryConfig.from_block(doc.get_block("telemetry")),
            fpm=FpmConfig.from_block(doc.get_block("fpm")),
            logging=LoggingConfig.from_block(doc.get_block("logging")),
        )
