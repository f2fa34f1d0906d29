from datetime import date
from decimal import Decimal

import pytest

from ledger_holdings.holdings.models import MatchInfo, TradeAction, Transaction


def make_tx(tx_id, trade_date, action, security="", quantity=None, amount="0", commission="0", **kwargs):
    """Build a Transaction from plain values; numbers may be given as str or int."""
    return Transaction(
        tx_id=tx_id,
        account_id=1,
        trade_date=trade_date,
        trade_action=action,
        security_name=security,
        quantity=Decimal(str(quantity)) if quantity is not None else None,
        amount=Decimal(str(amount)),
        commission=Decimal(str(commission)),
        **kwargs,
    )


@pytest.fixture
def reference_transactions():
    """Deposit, buys of Z and A (one fee-only), a matched sell of A and a 2:1 split of Z."""
    return [
        make_tx(1, date(2022, 1, 1), TradeAction.DEPOSIT, amount="4794.45"),
        make_tx(2, date(2022, 1, 5), TradeAction.BUY, "Z", 100, "1010", "10"),
        make_tx(3, date(2022, 1, 5), TradeAction.BUY, "A", 20, "2003.45", "3.45"),
        make_tx(4, date(2022, 1, 7), TradeAction.BUY, "A", 0, "3", "3"),
        make_tx(5, date(2022, 1, 9), TradeAction.BUY, "A", 25, "2528", "3"),
        make_tx(6, date(2022, 1, 9), TradeAction.SELL, "A", 8, "750", "1"),
        make_tx(
            7, date(2022, 1, 15), TradeAction.STKSPLIT, "Z", 2,
            old_quantity=Decimal("1"), memo="2 for 1 split",
        ),
    ]


@pytest.fixture
def reference_matches():
    matches = {
        6: [
            MatchInfo(6, 3, Decimal("1")),
            MatchInfo(6, 4, Decimal("0")),
            MatchInfo(6, 5, Decimal("7")),
        ],
    }
    return lambda tx_id: matches.get(tx_id, [])
