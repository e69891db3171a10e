"""
Entry point for Fpm Exporter.

Usage:
    python -m fpm_exporter [/path/to/config.conf] [options]
    python -m fpm_exporter --fpm.scrape-uri http://127.0.0.1/status
    python -m fpm_exporter --help
"""

import argparse
import asyncio
import sys
from pathlib import Path

from . import __version__
from .app import run_app
from .config.loader import ConfigError, ConfigLoader
from .config.schema import Config, check_timeout
from .logging import LogConfig, get_logger, setup_logging


logger = get_logger("main")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="fpm-exporter",
        description="Prometheus exporter for the PHP-FPM status page",
    )

    parser.add_argument(
        "config",
        nargs="?",
        help="Path to configuration file (optional, command line options take precedence)",
    )

    parser.add_argument(
        "--telemetry.address",
        dest="telemetry_address",
        metavar="ADDR",
        help="Address on which to expose metrics (default: :9113)",
    )

    parser.add_argument(
        "--telemetry.endpoint",
        dest="telemetry_endpoint",
        metavar="PATH",
        help="Path under which to expose metrics (default: /metrics)",
    )

    parser.add_argument(
        "--fpm.scrape-uri",
        dest="scrape_uri",
        metavar="URI",
        help="URI to fpm status page (default: http://localhost/fpm_status)",
    )

    parser.add_argument(
        "--insecure",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Ignore server certificate if using https (default: on)",
    )

    parser.add_argument(
        "--timeout",
        type=float,
        metavar="SECONDS",
        help="Timeout for fetching the status page (default: 5)",
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose logging (INFO level)",
    )

    parser.add_argument(
        "-d", "--debug",
        action="store_true",
        help="Enable debug logging (DEBUG level)",
    )

    parser.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="Quiet mode (only errors)",
    )

    parser.add_argument(
        "--log-file",
        metavar="PATH",
        help="Write logs to file",
    )

    parser.add_argument(
        "--no-color",
        action="store_true",
        help="Disable colored output",
    )

    parser.add_argument(
        "--validate",
        action="store_true",
        help="Validate configuration and exit",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    return parser


def apply_overrides(config: Config, args: argparse.Namespace) -> Config:
    """
    Apply command line options on top of the file configuration.

    Raises:
        ConfigError: If an option value is invalid
    """
    if args.telemetry_address is not None:
        config.telemetry.address = args.telemetry_address
    if args.telemetry_endpoint is not None:
        config.telemetry.endpoint = args.telemetry_endpoint
    if args.scrape_uri is not None:
        config.fpm.scrape_uri = args.scrape_uri
    if args.insecure is not None:
        config.fpm.insecure = args.insecure
    if args.timeout is not None:
        try:
            config.fpm.timeout = check_timeout(args.timeout)
        except ValueError as e:
            raise ConfigError(f"Invalid --timeout: {e}") from e
    return config


def build_log_config(config: Config, args: argparse.Namespace) -> LogConfig:
    """Merge the logging block with -v/-d/-q/--log-file/--no-color."""
    file_path = args.log_file or config.logging.file

    log_config = LogConfig(
        console_level=config.logging.level,
        console_colors=config.logging.colors and not args.no_color,
        file_enabled=file_path is not None,
        file_level=config.logging.file_level,
        file_max_bytes=config.logging.file_max_size * 1024 * 1024,
        file_backup_count=config.logging.file_keep,
        format=config.logging.format,
    )
    if file_path:
        log_config.file_path = file_path

    if args.debug:
        log_config.console_level = "debug"
    elif args.verbose:
        log_config.console_level = "info"
    elif args.quiet:
        log_config.console_level = "error"

    return log_config


def print_summary(config: Config, warnings: list[str]) -> None:
    if warnings:
        print(f"Configuration warnings ({len(warnings)}):")
        for warning in warnings:
            print(f"  - {warning}")

    print("\nConfiguration summary:")
    print(f"  Listen address: {config.telemetry.address}")
    print(f"  Metrics endpoint: {config.telemetry.endpoint}")
    print(f"  Process metrics: {'enabled' if config.telemetry.process_metrics else 'disabled'}")
    print(f"  Scrape URI: {config.fpm.scrape_uri}")
    print(f"  TLS verification: {'disabled' if config.fpm.insecure else 'enabled'}")
    print(f"  Timeout: {config.fpm.timeout}s")
    print(f"  Logging level: {config.logging.level}")
    if config.logging.file:
        print(f"  Log file: {config.logging.file}")

    print("\nConfiguration is valid!")


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    # Console-only logging until the config file has been read
    setup_logging(LogConfig(
        console_level="debug" if args.debug else "info",
        console_colors=not args.no_color,
    ))

    loader = ConfigLoader()
    try:
        if args.config:
            config = loader.load_file(Path(args.config))
        else:
            config = Config()
        apply_overrides(config, args)
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    warnings = loader.validate(config)

    if args.validate:
        print_summary(config, warnings)
        return 0

    setup_logging(build_log_config(config, args))

    if args.config:
        logger.info(f"Loaded configuration from {args.config}")
    for warning in warnings:
        logger.warning(f"Config warning: {warning}")

    try:
        asyncio.run(run_app(config))
        return 0
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 0
    except Exception as e:
        logger.exception(f"Fatal error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
