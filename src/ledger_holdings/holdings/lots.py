"""Lot matching, stock-split adjustment and valuation for one holding.

A holding's lots are kept in the order they were added. Dispositions
(a trade whose quantity has the opposite sign of the holding) reduce open
lots either first-in-first-out or by the lots the user picked.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from decimal import Decimal
from typing import Union

from ledger_holdings.holdings.models import CLOSING_ACTIONS, LotInfo, MatchInfo, SecurityHolding
from ledger_holdings.holdings.numbers import (
    ZERO,
    round_currency,
    round_pct,
    round_price,
    round_quantity,
    sign,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Fifo:
    pass


@dataclass(frozen=True)
class SpecifiedLots:
    matches: tuple[MatchInfo, ...]


MatchingStrategy = Union[Fifo, SpecifiedLots]


def matching_strategy(match_infos: Sequence[MatchInfo]) -> MatchingStrategy:
    if match_infos:
        return SpecifiedLots(tuple(match_infos))
    return Fifo()


def scale_cost_basis(cost_basis: Decimal, old_quantity: Decimal, new_quantity: Decimal) -> Decimal:
    """Return cost_basis * new_quantity / old_quantity rounded to cents.

    An unchanged quantity returns the cost basis untouched, which also
    covers lots that already sit at zero quantity.
    """
    if new_quantity == old_quantity:
        return cost_basis
    return round_currency(cost_basis * new_quantity / old_quantity)


def _reduce(lot: LotInfo, match_quantity: Decimal) -> None:
    """Move lot.quantity toward zero by match_quantity, rescaling its cost."""
    old_quantity = lot.quantity
    if old_quantity > 0:
        new_quantity = old_quantity - match_quantity
    else:
        new_quantity = old_quantity + match_quantity
    lot.cost_basis = scale_cost_basis(lot.cost_basis, old_quantity, new_quantity)
    lot.quantity = new_quantity


def _open_lot(holding: SecurityHolding, lot: LotInfo) -> None:
    holding.lots.append(lot)
    holding.cost_basis += lot.cost_basis


def _describe(lot: LotInfo) -> str:
    return (
        f"{lot.trade_action.value} {lot.quantity} shares of {lot.security_name} "
        f"on {lot.trade_date} (transaction id {lot.tx_id})"
    )


def _match_fifo(holding: SecurityHolding, lot: LotInfo) -> None:
    kept: list[LotInfo] = []
    for index, open_lot in enumerate(holding.lots):
        if lot.quantity == 0:
            kept.extend(holding.lots[index:])
            break

        if abs(open_lot.quantity) > abs(lot.quantity):
            # open lot outlasts the disposition
            old_cost = open_lot.cost_basis
            new_quantity = open_lot.quantity + lot.quantity
            open_lot.cost_basis = scale_cost_basis(old_cost, open_lot.quantity, new_quantity)
            open_lot.quantity = new_quantity
            holding.cost_basis += open_lot.cost_basis - old_cost
            lot.cost_basis = scale_cost_basis(lot.cost_basis, lot.quantity, ZERO)
            lot.quantity = ZERO
            kept.append(open_lot)
            continue

        # open lot fully consumed
        new_quantity = lot.quantity + open_lot.quantity
        lot.cost_basis = scale_cost_basis(lot.cost_basis, lot.quantity, new_quantity)
        lot.quantity = new_quantity
        holding.cost_basis -= open_lot.cost_basis

    holding.lots[:] = kept


def _match_specified(holding: SecurityHolding, lot: LotInfo, matches: Sequence[MatchInfo]) -> None:
    for match in matches:
        open_lot = holding.find_lot(match.match_tx_id)
        if open_lot is None:
            logger.warning(
                "Missing matching transaction id %s for %s",
                match.match_tx_id, _describe(lot),
            )
            continue

        match_quantity = match.quantity
        available = abs(open_lot.quantity)
        if available < match_quantity:
            logger.warning(
                "Match lot %s has quantity %s, needed %s to match %s; using %s",
                match.match_tx_id, open_lot.quantity, match_quantity, _describe(lot), available,
            )
            match_quantity = available
        remaining = abs(lot.quantity)
        if remaining < match_quantity:
            logger.warning(
                "%s has %s shares left to match, needed %s on lot %s; using %s",
                _describe(lot), remaining, match_quantity, match.match_tx_id, remaining,
            )
            match_quantity = remaining

        old_cost = open_lot.cost_basis
        _reduce(open_lot, match_quantity)
        if open_lot.quantity == 0:
            holding.lots.remove(open_lot)
            holding.cost_basis -= old_cost
        else:
            holding.cost_basis += open_lot.cost_basis - old_cost

        _reduce(lot, match_quantity)


def add_lot(
    holding: SecurityHolding,
    lot: LotInfo,
    match_infos: Sequence[MatchInfo] = (),
) -> None:
    """Add a traded lot to the holding, matching off open lots if it disposes.

    Inconsistent input (nothing to offset, missing or oversized matches,
    more shares disposed than held) is logged and the best-effort result
    is kept.
    """
    old_quantity = holding.quantity

    if not lot.quantity:
        # cost-only adjustment, e.g. a fee on zero shares
        lot.quantity = ZERO
        if lot.cost_basis != 0:
            holding.lots.append(lot)
        holding.cost_basis += lot.cost_basis
        if match_infos:
            logger.warning("Ignoring lot matches for zero quantity %s", _describe(lot))
        return

    holding.quantity = old_quantity + lot.quantity

    if old_quantity == 0 and lot.trade_action in CLOSING_ACTIONS:
        logger.warning(
            "Can't find lots to offset %s, existing quantity %s; proceed with caution",
            _describe(lot), old_quantity,
        )
        _open_lot(holding, lot)
        return

    if sign(old_quantity) * sign(lot.quantity) >= 0:
        if match_infos:
            logger.warning("Can't find offsetting lots for %s, ignoring lot matches", _describe(lot))
        _open_lot(holding, lot)
        return

    if abs(lot.quantity) > abs(old_quantity):
        logger.warning(
            "Not enough lots to offset %s, existing quantity %s; proceed with caution",
            _describe(lot), old_quantity,
        )

    strategy = matching_strategy(match_infos)
    if isinstance(strategy, SpecifiedLots):
        _match_specified(holding, lot, strategy.matches)
    else:
        _match_fifo(holding, lot)

    if lot.quantity != 0:
        logger.warning(
            "Can't find enough offset for %s; remaining quantity %s, remaining cost basis %s",
            _describe(lot), lot.quantity, lot.cost_basis,
        )
        _open_lot(holding, lot)


def adjust_stock_split(holding: SecurityHolding, new_quantity: Decimal, old_quantity: Decimal) -> None:
    """Scale every lot by new_quantity/old_quantity and its price inversely."""
    for lot in holding.lots:
        lot.quantity = round_quantity(lot.quantity * new_quantity / old_quantity)
        if lot.price is not None:
            lot.price = round_price(lot.price * old_quantity / new_quantity)
    holding.quantity = sum((lot.quantity for lot in holding.lots), ZERO)


def update_market_value(holding: SecurityHolding, price: Decimal) -> None:
    holding.price = price
    for lot in holding.lots:
        lot.market_value = round_currency(price * lot.quantity)
        lot.pnl = lot.market_value - lot.cost_basis
    holding.market_value = round_currency(price * holding.quantity)
    holding.pnl = holding.market_value - holding.cost_basis


def pct_return(pnl: Decimal | None, cost_basis: Decimal) -> Decimal | None:
    if cost_basis == 0 or pnl is None:
        return None
    return round_pct(Decimal(100) * pnl / abs(cost_basis))


def update_pct_return(holding: SecurityHolding) -> None:
    holding.pct_return = pct_return(holding.pnl, holding.cost_basis)
    for lot in holding.lots:
        lot.pct_return = pct_return(lot.pnl, lot.cost_basis)
