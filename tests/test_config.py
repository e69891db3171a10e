"""
Tests for configuration loading and validation.
"""

from pathlib import Path

import pytest

from fpm_exporter.config.lexer import TokenType, tokenize
from fpm_exporter.config.loader import ConfigError, ConfigLoader
from fpm_exporter.config.schema import Config, parse_listen_address


EXAMPLE_CONFIG = Path(__file__).parent.parent / "config.example.conf"


def test_load_example_config() -> None:
    """Test that the example config loads with the documented defaults."""
    loader = ConfigLoader()

    config = loader.load_file(EXAMPLE_CONFIG)

    assert isinstance(config, Config)
    assert config.telemetry.address == ":9113"
    assert config.telemetry.endpoint == "/metrics"
    assert config.fpm.scrape_uri == "http://localhost/fpm_status"
    assert config.fpm.insecure is True
    assert config.fpm.timeout == 5
    assert config.logging.level == "info"
    assert config.logging.file is None


def test_validate_example_config() -> None:
    """Test that the example config validates without warnings."""
    loader = ConfigLoader()
    config = loader.load_file(EXAMPLE_CONFIG)

    assert loader.validate(config) == []


def test_empty_config_uses_defaults() -> None:
    """Test that an empty file yields the default configuration."""
    config = ConfigLoader().load_string("")

    assert config == Config()


def test_blocks_and_values() -> None:
    """Test reading every block and value type."""
    config = ConfigLoader().load_string(
        """
        /* scrape a remote pool */
        fpm {
            scrape_uri 'https://php.example.com/status?full';
            insecure off;
            timeout 500ms;
        }
        telemetry { address "127.0.0.1:9253"; process_metrics false; }
        logging { level debug; file "/tmp/fpm.log"; file_keep 2; }
        """
    )

    assert config.fpm.scrape_uri == "https://php.example.com/status?full"
    assert config.fpm.insecure is False
    assert config.fpm.timeout == pytest.approx(0.5)
    assert config.telemetry.listen() == ("127.0.0.1", 9253)
    assert config.telemetry.process_metrics is False
    assert config.logging.level == "debug"
    assert config.logging.file == "/tmp/fpm.log"
    assert config.logging.file_keep == 2


def test_tokenize_skips_comments() -> None:
    """Test that both comment styles are skipped."""
    tokens = tokenize('# comment\ninsecure on; /* block */ timeout 1m;')

    assert [t.type for t in tokens] == [
        TokenType.IDENTIFIER,
        TokenType.BOOLEAN,
        TokenType.SEMICOLON,
        TokenType.IDENTIFIER,
        TokenType.DURATION,
        TokenType.SEMICOLON,
        TokenType.EOF,
    ]
    assert tokens[4].value == 60
    assert tokens[0].line == 2


def test_unknown_directives_and_blocks_warn() -> None:
    """Test that unknown names produce warnings."""
    loader = ConfigLoader()
    config = loader.load_string(
        """
        fpm { scrape_uri "http://localhost/status"; retries 3; }
        redis { host "localhost"; }
        """
    )

    warnings = loader.validate(config)

    assert any("Unknown directive 'retries' in fpm block" in w for w in warnings)
    assert any("Unknown block 'redis'" in w for w in warnings)


def test_semantic_warnings() -> None:
    """Test warnings for bad URI, endpoint and listen address."""
    loader = ConfigLoader()
    config = loader.load_string(
        """
        fpm { scrape_uri "localhost/status"; }
        telemetry { endpoint "metrics"; address "9113"; }
        """
    )

    warnings = loader.validate(config)

    assert len(warnings) == 3
    assert any("Scrape URI" in w for w in warnings)
    assert any("endpoint" in w for w in warnings)
    assert any("host:port" in w for w in warnings)


@pytest.mark.parametrize(
    "source",
    [
        'fpm { scrape_uri "http://localhost; }',
        "fpm { timeout 5s }",
        "fpm { timeout 5x; }",
        "fpm { insecure on;",
        "fpm { timeout = 5; }",
    ],
)
def test_syntax_errors_raise_config_error(source: str) -> None:
    """Test that syntax errors become ConfigError."""
    with pytest.raises(ConfigError):
        ConfigLoader().load_string(source)


def test_bad_value_raises_config_error() -> None:
    """Test that a wrongly typed value becomes ConfigError."""
    with pytest.raises(ConfigError):
        ConfigLoader().load_string("fpm { timeout soon; }")


def test_missing_file(tmp_path: Path) -> None:
    """Test that a missing file raises ConfigError."""
    with pytest.raises(ConfigError):
        ConfigLoader().load_file(tmp_path / "missing.conf")


@pytest.mark.parametrize(
    "address, expected",
    [
        (":9113", ("", 9113)),
        ("0.0.0.0:80", ("0.0.0.0", 80)),
        ("[::1]:9113", ("::1", 9113)),
    ],
)
def test_parse_listen_address(address: str, expected: tuple[str, int]) -> None:
    """Test splitting valid listen addresses."""
    assert parse_listen_address(address) == expected


@pytest.mark.parametrize("address", ["9113", "host:port", ":70000"])
def test_parse_listen_address_rejects(address: str) -> None:
    """Test that malformed listen addresses raise ValueError."""
    with pytest.raises(ValueError):
        parse_listen_address(address)


@pytest.mark.parametrize("source", ["fpm { timeout 0; }", "fpm { timeout 0s; }", "fpm { timeout 0ms; }"])
def test_non_positive_timeout_raises_config_error(source: str) -> None:
    """Test that a zero timeout is rejected when loading."""
    with pytest.raises(ConfigError, match="timeout must be positive"):
        ConfigLoader().load_string(source)
