"""
Prometheus exporter for the PHP-FPM status page.
"""

from .const import APP_VERSION

__version__ = APP_VERSION
