"""
Pytest configuration and fixtures.
"""

import logging
import socket
import threading
from collections.abc import Iterator
from dataclasses import dataclass
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer

import pytest


FPM_STATUS = """pool:                 api
process manager:      static
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
"""


@dataclass
class StatusPage:
    """What the fake fpm status page currently answers."""

    url: str
    body: str = FPM_STATUS
    status: int = 200
    requests: int = 0

    # Content-Length to announce instead of the real one
    declared_length: int | None = None

    def serve(self, body: str, status: int = 200, declared_length: int | None = None) -> None:
        self.body = body
        self.status = status
        self.declared_length = declared_length


@pytest.fixture
def fpm_status() -> str:
    """A well-formed status report."""
    return FPM_STATUS


@pytest.fixture
def status_page() -> Iterator[StatusPage]:
    """Local HTTP server standing in for the fpm status page."""
    page = StatusPage(url="")

    class Handler(BaseHTTPRequestHandler):
        def do_GET(self) -> None:
            page.requests += 1
            payload = page.body.encode("utf-8")
            self.send_response(page.status)
            self.send_header("Content-Type", "text/plain")
            length = page.declared_length if page.declared_length is not None else len(payload)
            self.send_header("Content-Length", str(length))
            self.end_headers()
            self.wfile.write(payload)

        def log_message(self, format, *args) -> None:
            pass

    httpd = ThreadingHTTPServer(("127.0.0.1", 0), Handler)
    page.url = f"http://127.0.0.1:{httpd.server_port}/fpm_status"

    thread = threading.Thread(target=httpd.serve_forever, daemon=True)
    thread.start()
    try:
        yield page
    finally:
        httpd.shutdown()
        httpd.server_close()
        thread.join(timeout=5)


@pytest.fixture
def closed_port_url() -> str:
    """URL of a local port nothing listens on."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        port = sock.getsockname()[1]
    return f"http://127.0.0.1:{port}/fpm_status"


@pytest.fixture(autouse=True)
def reset_logging() -> Iterator[None]:
    """Drop handlers installed by setup_logging() so they don't outlive captured streams."""
    yield
    logger = logging.getLogger("fpm_exporter")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


@pytest.fixture
def silent_url() -> Iterator[str]:
    """URL of a local port that accepts connections but never answers."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        sock.listen(8)
        port = sock.getsockname()[1]
        yield f"http://127.0.0.1:{port}/fpm_status"
