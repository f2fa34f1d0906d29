"""Realized capital gains of a sale or a short cover."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from decimal import Decimal

from ledger_holdings.holdings.compute import MatchLookup, compute_security_holdings
from ledger_holdings.holdings.models import CapitalGainItem, TradeAction, Transaction
from ledger_holdings.holdings.numbers import ZERO, round_currency

logger = logging.getLogger(__name__)

_GAIN_ACTIONS = (TradeAction.SELL, TradeAction.CVTSHRT)


def capital_gain_items(
    transactions: Sequence[Transaction],
    tx: Transaction,
    match_lookup: MatchLookup | None = None,
) -> list[CapitalGainItem]:
    """Split a SELL or CVTSHRT into one gain item per consumed lot.

    transactions is the sorted history of tx's account. Lots come from the
    holdings just before tx; with lot matches only the matched lots are
    consumed, otherwise lots are taken in order.
    """
    if tx.trade_action not in _GAIN_ACTIONS:
        return []

    by_id = {t.tx_id: t for t in transactions}
    holdings = compute_security_holdings(
        transactions, tx.trade_date, exclude_tx_id=tx.tx_id, match_lookup=match_lookup,
    )
    matched = {m.match_tx_id: m for m in (match_lookup(tx.tx_id) if match_lookup else ())}

    items: list[CapitalGainItem] = []
    for holding in holdings:
        if holding.security_name != tx.security_name:
            continue

        remaining_cash = tx.amount
        remaining_quantity = tx.quantity
        lots = [lot for lot in holding.lots if not matched or lot.tx_id in matched]
        for lot in lots:
            if remaining_quantity == 0:
                break
            match_tx = by_id.get(lot.tx_id)
            if match_tx is None:
                raise ValueError(f"Lot {lot.tx_id} of {lot.security_name} has no transaction in the account")

            match = matched.get(lot.tx_id)
            quantity = match.quantity if match else min(abs(lot.quantity), remaining_quantity)

            if lot.quantity == 0:
                cost_basis = lot.cost_basis
            else:
                cost_basis = round_currency(lot.cost_basis * quantity / lot.quantity)
            proceeds = round_currency(remaining_cash * quantity / remaining_quantity)
            remaining_cash -= proceeds
            remaining_quantity -= quantity

            if tx.trade_action == TradeAction.SELL:
                items.append(CapitalGainItem(tx, match_tx, quantity, cost_basis, proceeds))
            else:
                items.append(CapitalGainItem(tx, match_tx, quantity, proceeds, cost_basis))

        if remaining_quantity > 0:
            logger.warning(
                "%s of %s on %s (transaction id %s) has %s shares without lots",
                tx.trade_action.value, tx.security_name, tx.trade_date, tx.tx_id, remaining_quantity,
            )

    return items


def realized_gain(
    transactions: Sequence[Transaction],
    tx: Transaction,
    match_lookup: MatchLookup | None = None,
) -> Decimal:
    return sum((item.realized_gain for item in capital_gain_items(transactions, tx, match_lookup)), ZERO)
