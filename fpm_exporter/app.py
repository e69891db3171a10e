"""
Main application orchestrator.

Handles:
- Registry and collector setup
- Metrics server lifecycle
- Graceful shutdown on SIGINT/SIGTERM
"""

import asyncio
import signal

from prometheus_client import CollectorRegistry, PlatformCollector, ProcessCollector

from .collectors.fpm import FpmCollector
from .config.schema import Config
from .const import APP_NAME
from .logging import get_logger
from .server import MetricsServer, create_app


logger = get_logger("app")


class Application:
    """
    Main application class.

    Owns the registry, the fpm collector and the metrics server. Scrapes
    happen only when the metrics endpoint is requested.
    """

    def __init__(self, config: Config):
        """
        Initialize application. Nothing is bound or fetched yet.

        Args:
            config: Application configuration
        """
        self.config = config

        self.registry = CollectorRegistry()
        self.collector = FpmCollector.from_config(config.fpm)
        self.registry.register(self.collector)

        if config.telemetry.process_metrics:
            ProcessCollector(registry=self.registry)
            PlatformCollector(registry=self.registry)

        host, port = config.telemetry.listen()
        self.server = MetricsServer(
            create_app(self.registry, config.telemetry.endpoint),
            host,
            port,
        )

        self._shutdown_event: asyncio.Event | None = None

    def _setup_signal_handlers(self) -> None:
        """Setup signal handlers for graceful shutdown."""
        loop = asyncio.get_running_loop()

        for sig in (signal.SIGTERM, signal.SIGINT):
            loop.add_signal_handler(sig, self.request_shutdown)

    def request_shutdown(self) -> None:
        """Ask a running application to stop."""
        logger.info("Received shutdown signal")
        if self._shutdown_event is not None:
            self._shutdown_event.set()

    async def start(self) -> None:
        """Start serving and wait until shutdown is requested."""
        logger.info(f"Starting {APP_NAME}")
        logger.info(f"Scraping {self.config.fpm.scrape_uri} (timeout: {self.config.fpm.timeout}s)")

        self._shutdown_event = asyncio.Event()
        try:
            self.server.start()
            self._setup_signal_handlers()

            logger.info(f"{APP_NAME} started, metrics at {self.config.telemetry.endpoint}")

            await self._shutdown_event.wait()
        finally:
            self.stop()

    def stop(self) -> None:
        """Stop the server and release resources."""
        logger.info(f"Stopping {APP_NAME}")
        self.server.stop()
        self.collector.close()
        logger.info(f"{APP_NAME} stopped")

    async def run(self) -> None:
        """Run the application until shutdown."""
        try:
            await self.start()
        except Exception as e:
            logger.error(f"Application error: {e}")
            raise


async def run_app(config: Config) -> None:
    """
    Run the application with an already loaded configuration.

    Args:
        config: Application configuration
    """
    app = Application(config)
    await app.run()
