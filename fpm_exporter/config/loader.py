"""
Configuration loader with file reading and validation.
"""

from pathlib import Path
from urllib.parse import urlsplit

from .lexer import LexerError
from .parser import Block, ConfigDocument, ParseError, parse_config, parse_config_file
from .schema import Config


class ConfigError(Exception):
    """Exception raised for configuration errors."""

    pass


class ConfigLoader:
    """
    Loads and validates configuration from files or strings.

    Usage:
        loader = ConfigLoader()
        config = loader.load_file("/etc/fpm-exporter/config.conf")
        warnings = loader.validate(config)
    """

    # Known directives for each block type
    KNOWN_DIRECTIVES = {
        "telemetry": {"address", "endpoint", "process_metrics"},
        "fpm": {"scrape_uri", "insecure", "timeout"},
        "logging": {
            "level",
            "file",
            "file_level",
            "file_max_size",
            "file_keep",
            "colors",
            "format",
        },
    }

    def __init__(self):
        self.last_document: ConfigDocument | None = None

    def load_file(self, path: str | Path) -> Config:
        """
        Load configuration from a file.

        Raises:
            ConfigError: If the file cannot be read or parsed
        """
        path = Path(path)

        if not path.exists():
            raise ConfigError(f"Configuration file not found: {path}")

        if not path.is_file():
            raise ConfigError(f"Not a file: {path}")

        try:
            document = parse_config_file(path)
        except (LexerError, ParseError) as e:
            raise ConfigError(f"Failed to parse configuration: {e}") from e
        except (OSError, UnicodeDecodeError) as e:
            raise ConfigError(f"Failed to read configuration: {e}") from e
        return self._build(document)

    def load_string(self, source: str, filename: str = "<string>") -> Config:
        """
        Load configuration from a string.

        Raises:
            ConfigError: If the source cannot be parsed
        """
        try:
            document = parse_config(source, filename)
        except (LexerError, ParseError) as e:
            raise ConfigError(f"Failed to parse configuration: {e}") from e
        return self._build(document)

    def _build(self, document: ConfigDocument) -> Config:
        self.last_document = document
        try:
            return Config.from_document(document)
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid configuration value: {e}") from e

    def validate(self, config: Config) -> list[str]:
        """
        Validate configuration and return a list of warnings.

        Args:
            config: Configuration to validate

        Returns:
            Warning messages (empty if no issues)
        """
        warnings = []

        if self.last_document:
            warnings.extend(self._check_unknown_directives(self.last_document))

        uri = urlsplit(config.fpm.scrape_uri)
        if uri.scheme not in ("http", "https") or not uri.netloc:
            warnings.append(f"Scrape URI is not an http(s) URL: {config.fpm.scrape_uri!r}")
        elif uri.scheme == "http" and not config.fpm.insecure:
            warnings.append("TLS verification is enabled but the scrape URI uses plain http")

        endpoint = config.telemetry.endpoint
        if not endpoint.startswith("/"):
            warnings.append(f"Metrics endpoint should start with '/': {endpoint!r}")
        elif endpoint == "/":
            warnings.append("Metrics endpoint '/' hides the landing page")

        try:
            config.telemetry.listen()
        except ValueError as e:
            warnings.append(str(e))

        return warnings

    def _check_unknown_directives(self, document: ConfigDocument) -> list[str]:
        """Check for unknown blocks and directives in a parsed document."""
        warnings = []

        def check_block(block: Block) -> None:
            known = self.KNOWN_DIRECTIVES.get(block.type)
            if known is None:
                warnings.append(f"Unknown block '{block.type}' (line {block.line})")
                return

            for directive in block.directives:
                if directive.name not in known:
                    warnings.append(
                        f"Unknown directive '{directive.name}' in {block.type} block "
                        f"(line {directive.line})"
                    )

            for nested in block.blocks:
                warnings.append(
                    f"Unexpected nested block '{nested.type}' in {block.type} block "
                    f"(line {nested.line})"
                )

        for block in document.blocks:
            check_block(block)

        for directive in document.directives:
            warnings.append(
                f"Unknown top-level directive '{directive.name}' (line {directive.line})"
            )

        return warnings


def load_config(path: str | Path) -> Config:
    """Load configuration from a file."""
    return ConfigLoader().load_file(path)
