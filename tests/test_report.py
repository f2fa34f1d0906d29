from datetime import date
from decimal import Decimal

import pandas as pd

from ledger_holdings.config import TOTAL
from ledger_holdings.holdings.compute import compute_security_holdings
from ledger_holdings.holdings.report import HOLDING_COLUMNS, LOT_COLUMNS, holdings_frame, lots_frame


def test_holdings_frame(reference_transactions, reference_matches):
    holdings = compute_security_holdings(reference_transactions, date(2022, 1, 8), match_lookup=reference_matches)
    df = holdings_frame(holdings)
    assert list(df.columns) == HOLDING_COLUMNS
    assert list(df["security"]) == ["A", "Z", "CASH", TOTAL]
    assert df.loc[df["security"] == "A", "cost_basis"].iloc[0] == Decimal("2006.45")
    assert pd.isna(df.loc[df["security"] == "CASH", "quantity"].iloc[0])


def test_lots_frame(reference_transactions, reference_matches):
    holdings = compute_security_holdings(reference_transactions, date(2022, 1, 9), match_lookup=reference_matches)
    df = lots_frame(holdings[0])
    assert list(df.columns) == LOT_COLUMNS
    assert list(df["tx_id"]) == [3, 5]
    assert list(df["action"]) == ["BUY", "BUY"]
    assert list(df["quantity"]) == [Decimal(19), Decimal(18)]


def test_empty_frames():
    assert holdings_frame([]).empty
    assert list(holdings_frame([]).columns) == HOLDING_COLUMNS
