import logging
from pathlib import Path
from unittest.mock import patch

from ledger_holdings import config
from ledger_holdings.config import Settings, get_log_level
from ledger_holdings.logging_config import setup_logging


def test_precision_constants():
    assert config.CURRENCY_DECIMAL_LEN == 2
    assert config.QUANTITY_FRACTION_LEN == 8
    assert config.QUANTITY_FRACTION_DISPLAY_LEN == 6
    assert config.PRICE_FRACTION_LEN == 8


def test_settings_from_env(monkeypatch, tmp_path):
    monkeypatch.setenv("LEDGER_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("LEDGER_LOG_LEVEL", "debug")
    settings = Settings()
    assert settings.data_dir == tmp_path
    assert settings.log_level == "DEBUG"
    assert settings.transactions_csv == tmp_path / "transactions.csv"
    assert settings.matches_csv == tmp_path / "matches.csv"
    assert settings.prices_csv == tmp_path / "prices.csv"


def test_settings_defaults(monkeypatch):
    monkeypatch.delenv("LEDGER_DATA_DIR", raising=False)
    monkeypatch.delenv("LEDGER_LOG_LEVEL", raising=False)
    monkeypatch.setattr(config, "_load_env_file", lambda: {})
    settings = Settings()
    assert settings.data_dir.name == "data"
    assert isinstance(settings.data_dir, Path)
    assert get_log_level() == "INFO"


def test_env_file_fallback(monkeypatch):
    monkeypatch.delenv("LEDGER_LOG_LEVEL", raising=False)
    monkeypatch.setattr(config, "_load_env_file", lambda: {"LEDGER_LOG_LEVEL": "warning"})
    assert get_log_level() == "WARNING"


def test_setup_logging_quiets_yfinance(monkeypatch):
    monkeypatch.delenv("LEDGER_LOG_LEVEL", raising=False)
    monkeypatch.setattr(config, "_load_env_file", lambda: {})
    with patch("ledger_holdings.logging_config.logging.basicConfig") as basic_config:
        setup_logging()
    assert basic_config.call_args.kwargs["level"] == logging.INFO
    assert logging.getLogger("yfinance").level == logging.WARNING


def test_setup_logging_explicit_level():
    with patch("ledger_holdings.logging_config.logging.basicConfig") as basic_config:
        setup_logging("debug")
    assert basic_config.call_args.kwargs["level"] == logging.DEBUG
