"""Print the holdings of an account as of a date.

Reads transactions.csv, matches.csv and prices.csv from the data directory
(LEDGER_DATA_DIR, default ./data). With --yfinance, prices are downloaded
instead of read from prices.csv.

    python scripts/holdings_snapshot.py --as-of 2024-06-30 --lots
"""
from __future__ import annotations

import argparse
import logging
from datetime import date
from pathlib import Path

from ledger_holdings.config import CASH, TOTAL, Settings
from ledger_holdings.holdings.compute import compute_security_holdings, sort_transactions
from ledger_holdings.holdings.parsers import parse_matches_csv, parse_transactions_csv
from ledger_holdings.holdings.prices import PriceHistory
from ledger_holdings.holdings.report import holdings_frame, lots_frame
from ledger_holdings.logging_config import setup_logging

logger = logging.getLogger("holdings_snapshot")


def main() -> None:
    settings = Settings()

    parser = argparse.ArgumentParser(description="Print account holdings as of a date")
    parser.add_argument("--as-of", type=date.fromisoformat, default=date.today(), help="Snapshot date (YYYY-MM-DD)")
    parser.add_argument("--account", type=int, default=1, help="Account id stamped on loaded transactions")
    parser.add_argument("--data-dir", type=Path, default=settings.data_dir, help="Directory holding the CSV files")
    parser.add_argument("--yfinance", action="store_true", help="Download prices with yfinance")
    parser.add_argument("--lots", action="store_true", help="Also print the open lots of each holding")
    parser.add_argument("--log-level", default=settings.log_level)
    args = parser.parse_args()

    setup_logging(args.log_level)
    settings = Settings(data_dir=args.data_dir, log_level=args.log_level)

    transactions = sort_transactions(parse_transactions_csv(settings.transactions_csv, args.account))
    if not transactions:
        logger.error("No transactions in %s", settings.transactions_csv)
        return

    matches = parse_matches_csv(settings.matches_csv) if settings.matches_csv.exists() else {}
    logger.info("Loaded %d transactions, %d lot-match groups", len(transactions), len(matches))

    if args.yfinance:
        symbols = sorted({t.security_name for t in transactions if t.security_name})
        prices = PriceHistory.from_yfinance(symbols, transactions[0].trade_date, args.as_of)
    elif settings.prices_csv.exists():
        prices = PriceHistory.from_csv(settings.prices_csv)
    else:
        logger.warning("No %s, holdings are valued at 0", settings.prices_csv)
        prices = PriceHistory()

    holdings = compute_security_holdings(
        transactions,
        args.as_of,
        match_lookup=lambda tx_id: matches.get(tx_id, []),
        price_lookup=prices,
    )

    print(f"Holdings as of {args.as_of}")
    print(holdings_frame(holdings).to_string(index=False))

    if args.lots:
        for holding in holdings:
            if holding.security_name in (CASH, TOTAL):
                continue
            print(f"\n=== {holding.security_name} ===")
            print(lots_frame(holding).to_string(index=False))


if __name__ == "__main__":
    main()
