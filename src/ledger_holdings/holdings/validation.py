"""Checks run on a transaction before it is saved to its account."""

from __future__ import annotations

from collections.abc import Sequence

from ledger_holdings.holdings.compute import MatchLookup, compute_security_holdings
from ledger_holdings.holdings.models import TradeAction, Transaction
from ledger_holdings.holdings.numbers import ZERO

_MESSAGES = {
    TradeAction.SELL: "Sell quantity exceeded existing holding quantity",
    TradeAction.SHRSOUT: "Transferring quantity exceeded existing holding quantity",
    TradeAction.CVTSHRT: "Short cover quantity exceeded existing short quantity",
}


def validate_disposition(
    transactions: Sequence[Transaction],
    tx: Transaction,
    match_lookup: MatchLookup | None = None,
) -> None:
    """Raise ValueError if tx disposes of more than the account holds.

    The position is the one just before tx on its trade date. Shares moved
    in also need an acquired date no later than the trade date.
    """
    action = tx.trade_action

    if action in _MESSAGES:
        holdings = compute_security_holdings(
            transactions, tx.trade_date, exclude_tx_id=tx.tx_id, match_lookup=match_lookup,
        )
        held = next(
            (h.quantity for h in holdings if h.security_name == tx.security_name),
            ZERO,
        )
        quantity = tx.quantity or ZERO
        if action == TradeAction.CVTSHRT:
            enough = held <= -quantity
        else:
            enough = held >= quantity
        if not enough:
            raise ValueError(f"{_MESSAGES[action]}: held {held}, {action.value} {quantity} {tx.security_name}")

    if action == TradeAction.SHRSIN:
        if tx.acquired_date is None:
            raise ValueError("Acquisition date cannot be empty")
        if tx.acquired_date > tx.trade_date:
            raise ValueError("Acquisition date cannot be after trade date")
