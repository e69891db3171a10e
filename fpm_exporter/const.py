"""
Application constants and metadata.
"""

# Application info
APP_NAME = "Fpm Exporter"
APP_VERSION = "0.1.0"

# Prometheus namespace for all exported fpm metrics
NAMESPACE = "fpm"

# Default values
DEFAULT_LISTEN_ADDRESS = ":9113"
DEFAULT_METRICS_ENDPOINT = "/metrics"
DEFAULT_SCRAPE_URI = "http://localhost/fpm_status"
DEFAULT_INSECURE = True
DEFAULT_TIMEOUT = 5.0
DEFAULT_CONFIG_PATH = "/etc/fpm-exporter/config.conf"
