from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Sequence
from datetime import date
from decimal import Decimal

from ledger_holdings.config import CASH, TOTAL
from ledger_holdings.holdings.lots import (
    add_lot,
    adjust_stock_split,
    update_market_value,
    update_pct_return,
)
from ledger_holdings.holdings.models import (
    LotInfo,
    MatchInfo,
    PriceQuote,
    SecurityHolding,
    TradeAction,
    Transaction,
    has_quantity,
)
from ledger_holdings.holdings.numbers import ZERO, is_display_zero, round_currency, round_price

logger = logging.getLogger(__name__)

MatchLookup = Callable[[int], Sequence[MatchInfo]]
PriceLookup = Callable[[str, date], "PriceQuote | None"]


def _no_matches(tx_id: int) -> Sequence[MatchInfo]:
    return ()


def _no_price(security_name: str, on: date) -> PriceQuote | None:
    return None


def sort_transactions(transactions: Iterable[Transaction], investing: bool = True) -> list[Transaction]:
    """Return transactions in the order the holdings pass expects.

    Investing accounts order by (trade date, id). Other accounts put cash
    inflows ahead of outflows on the same day.
    """
    if investing:
        return sorted(transactions, key=lambda t: (t.trade_date, t.tx_id))
    return sorted(transactions, key=lambda t: (t.trade_date, -t.cash_amount, t.tx_id))


def _split_adjusted_price(quote: PriceQuote, splits: list[Transaction], as_of: date) -> Decimal:
    """Restate a stale price in post-split terms.

    splits is in date order; walk it from the end until a split predates
    the quote.
    """
    price = quote.price
    if quote.price_date >= as_of:
        return price
    for split in reversed(splits):
        if split.trade_date < quote.price_date:
            break
        price = round_price(price * split.old_quantity / split.quantity)
    return price


def compute_security_holdings(
    transactions: Sequence[Transaction],
    as_of: date,
    exclude_tx_id: int = -1,
    match_lookup: MatchLookup | None = None,
    price_lookup: PriceLookup | None = None,
) -> list[SecurityHolding]:
    """Compute holdings of one account as of a date.

    transactions must belong to one account and already be sorted (see
    sort_transactions). Transactions dated as_of with an id at or above
    exclude_tx_id are left out, which lets a transaction being edited see
    the holdings just before it.

    Every transaction gets its running cash balance written to ``balance``,
    including those past as_of or excluded.

    Returns real holdings sorted by name, then CASH when the cash balance
    as of the date is non-zero, then TOTAL.
    """
    match_lookup = match_lookup or _no_matches
    price_lookup = price_lookup or _no_price

    total_cash = round_currency(ZERO)
    cash_as_of = total_cash
    holdings: dict[str, SecurityHolding] = {}
    splits_by_name: dict[str, list[Transaction]] = {}

    for tx in transactions:
        total_cash += round_currency(tx.cash_amount)
        if tx.trade_date <= as_of:
            cash_as_of = total_cash
        tx.balance = total_cash

        if tx.trade_date > as_of:
            continue
        if exclude_tx_id >= 0 and tx.trade_date == as_of and tx.tx_id >= exclude_tx_id:
            continue

        name = tx.security_name
        if not name:
            continue

        if tx.trade_action == TradeAction.STKSPLIT:
            holding = holdings.setdefault(name, SecurityHolding(name))
            adjust_stock_split(holding, tx.quantity, tx.old_quantity)
            splits_by_name.setdefault(name, []).append(tx)
        elif has_quantity(tx.trade_action):
            holding = holdings.setdefault(name, SecurityHolding(name))
            add_lot(holding, LotInfo.from_transaction(tx), match_lookup(tx.tx_id))

    result = [h for h in holdings.values() if not is_display_zero(h.quantity)]

    total_market_value = cash_as_of
    total_cost_basis = cash_as_of
    for holding in result:
        quote = price_lookup(holding.security_name, as_of)
        if quote is None:
            logger.debug("No price for %s as of %s", holding.security_name, as_of)
            price = ZERO
        else:
            price = _split_adjusted_price(quote, splits_by_name.get(holding.security_name, []), as_of)
        update_market_value(holding, price)
        update_pct_return(holding)

        total_market_value += holding.market_value
        total_cost_basis += holding.cost_basis

    result.sort(key=lambda h: h.security_name)

    if cash_as_of != 0:
        result.append(SecurityHolding(
            CASH,
            quantity=None,
            price=None,
            cost_basis=cash_as_of,
            market_value=cash_as_of,
        ))

    result.append(SecurityHolding(
        TOTAL,
        quantity=None,
        price=None,
        cost_basis=total_cost_basis,
        market_value=total_market_value,
        pnl=total_market_value - total_cost_basis,
    ))
    return result
