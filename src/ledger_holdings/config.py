from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

_PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
_DEFAULT_DATA_DIR = _PROJECT_ROOT / "data"


# -- Numeric precision -----------------------------------------------------------

CURRENCY_DECIMAL_LEN = 2           # cents
QUANTITY_FRACTION_LEN = 8          # stored share quantities
QUANTITY_FRACTION_DISPLAY_LEN = 6  # zero test for holdings at end of pass
PRICE_FRACTION_LEN = 8
PCT_RETURN_DECIMAL_LEN = 2

# -- Synthetic holding labels ------------------------------------------------------

CASH = "CASH"
TOTAL = "TOTAL"


def _load_env_file() -> dict[str, str]:
    """Read key=value pairs from .env at project root."""
    env_path = _PROJECT_ROOT / ".env"
    if not env_path.exists():
        return {}
    result = {}
    for line in env_path.read_text().splitlines():
        line = line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, _, value = line.partition("=")
        result[key.strip()] = value.strip()
    return result


def _env(key: str, default: str) -> str:
    value = os.environ.get(key)
    if value:
        return value
    return _load_env_file().get(key, default)


def get_log_level() -> str:
    """Return the configured log level name, upper-cased."""
    return _env("LEDGER_LOG_LEVEL", "INFO").upper()


@dataclass(frozen=True)
class Settings:
    data_dir: Path = field(default_factory=lambda: Path(
        _env("LEDGER_DATA_DIR", str(_DEFAULT_DATA_DIR))
    ))
    log_level: str = field(default_factory=get_log_level)

    @property
    def transactions_csv(self) -> Path:
        return self.data_dir / "transactions.csv"

    @property
    def matches_csv(self) -> Path:
        return self.data_dir / "matches.csv"

    @property
    def prices_csv(self) -> Path:
        return self.data_dir / "prices.csv"
