from __future__ import annotations

import pandas as pd

from ledger_holdings.holdings.models import SecurityHolding

HOLDING_COLUMNS = ["security", "quantity", "price", "cost_basis", "market_value", "pnl", "pct_return"]
LOT_COLUMNS = [
    "tx_id", "date", "action", "quantity", "price",
    "cost_basis", "market_value", "pnl", "pct_return",
]


def holdings_frame(holdings: list[SecurityHolding]) -> pd.DataFrame:
    """One row per holding, in the order given (CASH and TOTAL included)."""
    rows = [
        {
            "security": h.security_name,
            "quantity": h.quantity,
            "price": h.price,
            "cost_basis": h.cost_basis,
            "market_value": h.market_value,
            "pnl": h.pnl,
            "pct_return": h.pct_return,
        }
        for h in holdings
    ]
    return pd.DataFrame(rows, columns=HOLDING_COLUMNS)


def lots_frame(holding: SecurityHolding) -> pd.DataFrame:
    rows = [
        {
            "tx_id": lot.tx_id,
            "date": lot.trade_date,
            "action": lot.trade_action.value,
            "quantity": lot.quantity,
            "price": lot.price,
            "cost_basis": lot.cost_basis,
            "market_value": lot.market_value,
            "pnl": lot.pnl,
            "pct_return": lot.pct_return,
        }
        for lot in holding.lots
    ]
    return pd.DataFrame(rows, columns=LOT_COLUMNS)
