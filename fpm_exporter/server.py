"""
HTTP server exposing the metrics endpoint and a landing page.

Runs a threaded wsgiref server in a background thread; every request to
the metrics endpoint triggers a collection of the registry on that
request's thread.
"""

import html
import socket
import threading
from collections.abc import Callable, Iterable
from typing import Any
from wsgiref.simple_server import WSGIRequestHandler, WSGIServer, make_server

from prometheus_client import CollectorRegistry, make_wsgi_app
from prometheus_client.exposition import ThreadingWSGIServer

from .const import APP_NAME
from .logging import get_logger


logger = get_logger("server")

LANDING_PAGE = """<html>
<head><title>{title}</title></head>
<body>
<h1>{title}</h1>
<p><a href="{endpoint}">Metrics</a></p>
</body>
</html>
"""


def create_app(registry: CollectorRegistry, endpoint: str) -> Callable[..., Iterable[bytes]]:
    """
    Build the WSGI application.

    Args:
        registry: Registry collected on each request to ``endpoint``
        endpoint: Path of the metrics endpoint

    Returns:
        WSGI callable serving metrics on ``endpoint`` and the landing page elsewhere
    """
    metrics_app = make_wsgi_app(registry)
    landing = LANDING_PAGE.format(
        title=html.escape(APP_NAME),
        endpoint=html.escape(endpoint, quote=True),
    ).encode("utf-8")

    def app(environ: dict[str, Any], start_response: Callable[..., Any]) -> Iterable[bytes]:
        if environ.get("PATH_INFO", "/") == endpoint:
            return metrics_app(environ, start_response)

        start_response(
            "200 OK",
            [
                ("Content-Type", "text/html; charset=utf-8"),
                ("Content-Length", str(len(landing))),
            ],
        )
        return [landing]

    return app


class _ThreadingWSGIServerV6(ThreadingWSGIServer):
    address_family = socket.AF_INET6


class _LoggingHandler(WSGIRequestHandler):
    """Route access logs through our logger instead of stderr."""

    def log_message(self, format: str, *args: Any) -> None:
        logger.debug(f"{self.address_string()} - {format % args}")


class MetricsServer:
    """
    Background HTTP server.

    Usage:
        server = MetricsServer(create_app(registry, "/metrics"), "", 9113)
        server.start()
        ...
        server.stop()
    """

    def __init__(self, app: Callable[..., Iterable[bytes]], host: str, port: int):
        self.app = app
        self.host = host
        self.port = port

        self._httpd: WSGIServer | None = None
        self._thread: threading.Thread | None = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    @property
    def server_port(self) -> int:
        """Bound port (differs from the requested one when that was 0)."""
        if self._httpd is None:
            return self.port
        return self._httpd.server_port

    def start(self) -> None:
        """
        Bind and start serving in a daemon thread.

        Raises:
            OSError: If the address cannot be bound
        """
        if self.running:
            return

        server_class = _ThreadingWSGIServerV6 if ":" in self.host else ThreadingWSGIServer
        self._httpd = make_server(
            self.host,
            self.port,
            self.app,
            server_class=server_class,
            handler_class=_LoggingHandler,
        )

        self._thread = threading.Thread(
            target=self._httpd.serve_forever,
            name="metrics-server",
            daemon=True,
        )
        self._thread.start()
        logger.info(f"Listening on {self.host or '*'}:{self.server_port}")

    def stop(self) -> None:
        """Stop serving and release the socket."""
        if self._httpd is None:
            return

        self._httpd.shutdown()
        self._httpd.server_close()
        if self._thread is not None:
            self._thread.join(timeout=5.0)

        self._httpd = None
        self._thread = None
        logger.info("Metrics server stopped")
