from __future__ import annotations

import io
import logging
from datetime import date, timedelta
from pathlib import Path

import pandas as pd
import yfinance as yf

from ledger_holdings.holdings.models import PriceQuote
from ledger_holdings.holdings.numbers import round_price, to_decimal

logger = logging.getLogger(__name__)

_COLUMNS = ["security", "date", "price"]


class PriceHistory:
    """Daily prices per security, usable as the price lookup of the holdings pass.

    Backed by a DataFrame with ``security``, ``date`` and ``price`` columns;
    prices are Decimals.
    """

    def __init__(self, frame: pd.DataFrame | None = None):
        if frame is None:
            frame = pd.DataFrame(columns=_COLUMNS)
        missing = set(_COLUMNS) - set(frame.columns)
        if missing:
            raise ValueError(f"Price frame is missing columns: {', '.join(sorted(missing))}")
        frame = frame[_COLUMNS].dropna(subset=["price"]).copy()
        frame["date"] = pd.to_datetime(frame["date"]).dt.date
        frame["price"] = frame["price"].map(to_decimal)
        self._frame = frame.sort_values(["security", "date"]).reset_index(drop=True)

    def __len__(self) -> int:
        return len(self._frame)

    def last_price(self, security_name: str, on: date) -> PriceQuote | None:
        """Latest price of the security dated on or before ``on``."""
        rows = self._frame[(self._frame["security"] == security_name) & (self._frame["date"] <= on)]
        if rows.empty:
            return None
        row = rows.iloc[-1]
        return PriceQuote(price=row["price"], price_date=row["date"])

    def __call__(self, security_name: str, on: date) -> PriceQuote | None:
        return self.last_price(security_name, on)

    @classmethod
    def from_csv(cls, file_path: Path | str | io.StringIO) -> PriceHistory:
        df = pd.read_csv(file_path, dtype=str)
        df.columns = df.columns.str.strip().str.lower()
        return cls(df)

    @classmethod
    def from_yfinance(cls, symbols: list[str], start: date, end: date) -> PriceHistory:
        """Download daily closes for the symbols, end date inclusive.

        Symbols yfinance has no data for are logged and left out.
        """
        rows: list[dict] = []
        for symbol in symbols:
            df = yf.download(
                symbol,
                start=start.isoformat(),
                end=(end + timedelta(days=1)).isoformat(),
                progress=False,
                auto_adjust=False,
            )
            if df is None or df.empty:
                logger.warning("No price data for %s between %s and %s", symbol, start, end)
                continue

            # yfinance 1.1+ always returns MultiIndex columns (Price, Ticker)
            if isinstance(df.columns, pd.MultiIndex):
                df.columns = df.columns.get_level_values(0)
                df = df.loc[:, ~df.columns.duplicated()]

            if "Close" not in df.columns:
                logger.warning("No Close column for %s after download", symbol)
                continue

            for dt_idx, close in df["Close"].items():
                if pd.isna(close):
                    continue
                rows.append({
                    "security": symbol,
                    "date": dt_idx.date(),
                    "price": round_price(to_decimal(float(close))),
                })
            logger.info("Downloaded %d prices for %s", len(df), symbol)

        return cls(pd.DataFrame(rows, columns=_COLUMNS))
