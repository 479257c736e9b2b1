"""Tests for configuration and logging setup."""

import logging

import pytest

from sharematch import MatchingConfig, StatementColumns, get_logger
from sharematch.config.decorators import log_calls
from sharematch.config.logger import LogFileConfig


@pytest.fixture(name="clean_env")
def fixture_clean_env(monkeypatch):
    """Remove matching settings from the environment."""
    for name in (
        "CGT_BNB_WINDOW_DAYS",
        "CGT_DATE_FORMAT",
        "CGT_CURRENCY",
        "CGT_STATEMENT_COLUMNS",
    ):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def test_defaults(clean_env):
    """Without overrides the 30 day window and DEGIRO layout are used."""
    config = MatchingConfig()

    assert config.bed_and_breakfast_days == 30
    assert config.date_format == "%d-%m-%Y"
    assert config.currency == "GBP"
    assert config.columns == StatementColumns()


def test_environment_overrides(clean_env):
    """Settings are read from the environment."""
    clean_env.setenv("CGT_BNB_WINDOW_DAYS", "10")
    clean_env.setenv("CGT_CURRENCY", "EUR")
    clean_env.setenv("CGT_STATEMENT_COLUMNS", "1,2,3,4,5,6")

    config = MatchingConfig()

    assert config.bed_and_breakfast_days == 10
    assert config.currency == "EUR"
    assert config.columns.date == 1
    assert config.columns.transaction_id == 6


def test_arguments_override_environment(clean_env):
    """Explicit arguments win over the environment."""
    clean_env.setenv("CGT_BNB_WINDOW_DAYS", "10")
    config = MatchingConfig(bed_and_breakfast_days=0)
    assert config.bed_and_breakfast_days == 0


def test_negative_window_rejected(clean_env):
    """A negative bed and breakfast window is a configuration error."""
    with pytest.raises(ValueError, match="must not be negative"):
        MatchingConfig(bed_and_breakfast_days=-1)


def test_statement_columns_parse():
    """Positions are given in field order."""
    columns = StatementColumns.parse("0, 3, 4, 5, 8, 11")
    assert columns == StatementColumns()
    assert columns.width == 12


def test_statement_columns_parse_wrong_count():
    """Every field needs a position."""
    with pytest.raises(ValueError, match="Expected 6 column positions"):
        StatementColumns.parse("0,3,4")


@pytest.mark.parametrize(
    ("size", "expected"),
    [("512", 512), ("10KB", 10 * 1024), ("5MB", 5 * 1024 * 1024), ("1gb", 1024**3)],
)
def test_log_size_parsing(size, expected):
    """Log file sizes accept KB, MB and GB suffixes."""
    assert LogFileConfig()._parse_size(size) == expected


def test_get_logger_names_are_namespaced():
    """Every logger lives under the package hierarchy."""
    assert get_logger("sharematch.matching").name == "sharematch.matching"
    assert get_logger("scripts").name == "sharematch.scripts"
    assert get_logger().name == "sharematch"


def test_log_calls_logs_errors(caplog):
    """Decorated functions log and re-raise exceptions."""

    @log_calls()
    def fail():
        raise RuntimeError("boom")

    with caplog.at_level(logging.DEBUG, logger="sharematch"), pytest.raises(RuntimeError):
        fail()

    assert "boom" in caplog.text
