from datetime import date

import pytest

from conftest import make_tx
from ledger_holdings.holdings.models import TradeAction
from ledger_holdings.holdings.validation import validate_disposition


def test_sell_within_holding(reference_transactions, reference_matches):
    validate_disposition(reference_transactions, reference_transactions[5], reference_matches)


def test_sell_exceeds_holding(reference_transactions):
    sell = make_tx(8, date(2022, 1, 9), TradeAction.SELL, "A", 50, "5000")
    with pytest.raises(ValueError, match="Sell quantity exceeded"):
        validate_disposition(reference_transactions, sell)


def test_sell_checks_post_split_quantity(reference_transactions):
    validate_disposition(
        reference_transactions, make_tx(8, date(2022, 1, 31), TradeAction.SELL, "Z", 200, "1100"),
    )
    with pytest.raises(ValueError):
        validate_disposition(
            reference_transactions, make_tx(8, date(2022, 1, 14), TradeAction.SELL, "Z", 200, "1100"),
        )


def test_transfer_out_unknown_security(reference_transactions):
    shares_out = make_tx(8, date(2022, 1, 31), TradeAction.SHRSOUT, "Q", 1)
    with pytest.raises(ValueError, match="Transferring quantity exceeded"):
        validate_disposition(reference_transactions, shares_out)


def test_short_cover():
    txs = [make_tx(1, date(2024, 1, 2), TradeAction.SHTSELL, "VTI", 10, "1000")]
    validate_disposition(txs, make_tx(2, date(2024, 2, 1), TradeAction.CVTSHRT, "VTI", 10, "800"))
    with pytest.raises(ValueError, match="Short cover quantity exceeded"):
        validate_disposition(txs, make_tx(2, date(2024, 2, 1), TradeAction.CVTSHRT, "VTI", 12, "960"))


def test_shares_in_acquired_date():
    shares_in = make_tx(1, date(2024, 1, 2), TradeAction.SHRSIN, "VTI", 10)
    with pytest.raises(ValueError, match="cannot be empty"):
        validate_disposition([], shares_in)

    shares_in.acquired_date = date(2024, 1, 3)
    with pytest.raises(ValueError, match="after trade date"):
        validate_disposition([], shares_in)

    shares_in.acquired_date = date(2020, 5, 1)
    validate_disposition([], shares_in)


def test_buy_is_not_checked():
    validate_disposition([], make_tx(1, date(2024, 1, 2), TradeAction.BUY, "VTI", 10, "1000"))
