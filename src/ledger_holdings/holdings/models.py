from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal

from dateutil.relativedelta import relativedelta

from ledger_holdings.config import PRICE_FRACTION_LEN
from ledger_holdings.holdings.numbers import ZERO, round_currency, round_to


class TradeAction(enum.Enum):
    BUY = "BUY"
    SELL = "SELL"
    DIV = "DIV"
    REINVDIV = "REINVDIV"
    INTINC = "INTINC"
    REINVINT = "REINVINT"
    CGLONG = "CGLONG"
    CGMID = "CGMID"
    CGSHORT = "CGSHORT"
    REINVLG = "REINVLG"
    REINVMD = "REINVMD"
    REINVSH = "REINVSH"
    STKSPLIT = "STKSPLIT"
    SHRSIN = "SHRSIN"
    SHRSOUT = "SHRSOUT"
    MISCEXP = "MISCEXP"
    MISCINC = "MISCINC"
    RTRNCAP = "RTRNCAP"
    SHTSELL = "SHTSELL"
    CVTSHRT = "CVTSHRT"
    MARGINT = "MARGINT"
    DEPOSIT = "DEPOSIT"
    WITHDRAW = "WITHDRAW"


_REINVEST_ACTIONS = frozenset({
    TradeAction.REINVDIV,
    TradeAction.REINVINT,
    TradeAction.REINVLG,
    TradeAction.REINVMD,
    TradeAction.REINVSH,
})

QUANTITY_ACTIONS = frozenset({
    TradeAction.BUY,
    TradeAction.SELL,
    TradeAction.STKSPLIT,
    TradeAction.SHRSIN,
    TradeAction.SHRSOUT,
    TradeAction.SHTSELL,
    TradeAction.CVTSHRT,
}) | _REINVEST_ACTIONS

# Actions that close an existing position; seen on a flat holding they have
# nothing to offset.
CLOSING_ACTIONS = frozenset({TradeAction.SELL, TradeAction.CVTSHRT})

_NEGATED_QUANTITY = frozenset({TradeAction.SELL, TradeAction.SHTSELL, TradeAction.SHRSOUT})

_CASH_OUT = frozenset({
    TradeAction.BUY,
    TradeAction.CVTSHRT,
    TradeAction.MARGINT,
    TradeAction.MISCEXP,
    TradeAction.WITHDRAW,
})
_CASH_IN = frozenset({
    TradeAction.DIV,
    TradeAction.INTINC,
    TradeAction.CGLONG,
    TradeAction.CGMID,
    TradeAction.CGSHORT,
    TradeAction.MISCINC,
    TradeAction.RTRNCAP,
    TradeAction.SELL,
    TradeAction.SHTSELL,
    TradeAction.DEPOSIT,
})

_COST_IN = frozenset({TradeAction.BUY, TradeAction.CVTSHRT, TradeAction.SHRSIN}) | _REINVEST_ACTIONS
_COST_OUT = frozenset({
    TradeAction.SELL,
    TradeAction.SHTSELL,
    TradeAction.SHRSOUT,
    TradeAction.RTRNCAP,
})


def has_quantity(action: TradeAction) -> bool:
    return action in QUANTITY_ACTIONS


@dataclass
class Transaction:
    """One ledger entry of an account.

    ``quantity`` and ``amount`` are unsigned as entered; direction comes
    from ``trade_action``. ``balance`` is written by the holdings pass.
    """
    tx_id: int
    account_id: int
    trade_date: date
    trade_action: TradeAction
    security_name: str = ""
    quantity: Decimal | None = None
    amount: Decimal = ZERO
    commission: Decimal = ZERO
    price: Decimal | None = None
    old_quantity: Decimal | None = None
    acquired_date: date | None = None
    memo: str = ""
    balance: Decimal = ZERO

    @property
    def effective_date(self) -> date:
        return self.acquired_date if self.acquired_date is not None else self.trade_date

    @property
    def signed_quantity(self) -> Decimal | None:
        if self.quantity is None:
            return None
        if self.trade_action in _NEGATED_QUANTITY:
            return -self.quantity
        return self.quantity

    @property
    def cash_amount(self) -> Decimal:
        if self.trade_action in _CASH_OUT:
            return -self.amount
        if self.trade_action in _CASH_IN:
            return self.amount
        return ZERO

    @property
    def cost_basis(self) -> Decimal:
        if self.trade_action in _COST_IN:
            return self.amount
        if self.trade_action in _COST_OUT:
            return -self.amount
        return ZERO

    @property
    def trade_price(self) -> Decimal:
        """Explicit price, or (amount -/+ commission) / quantity."""
        if self.price is not None:
            return self.price
        if not has_quantity(self.trade_action) or not self.quantity:
            return ZERO
        if self.trade_action in (TradeAction.SELL, TradeAction.SHTSELL):
            subtotal = self.amount + self.commission
        else:
            subtotal = self.amount - self.commission
        return round_to(subtotal / self.quantity, PRICE_FRACTION_LEN)


@dataclass(frozen=True)
class MatchInfo:
    tx_id: int           # disposing transaction
    match_tx_id: int     # lot being matched
    quantity: Decimal    # always >= 0


@dataclass
class LotInfo:
    security_name: str
    tx_id: int
    trade_date: date
    trade_action: TradeAction
    quantity: Decimal | None
    cost_basis: Decimal
    price: Decimal | None = None
    market_value: Decimal = ZERO
    pnl: Decimal | None = None
    pct_return: Decimal | None = None

    def __post_init__(self) -> None:
        self.cost_basis = round_currency(self.cost_basis)

    @classmethod
    def from_transaction(cls, tx: Transaction) -> LotInfo:
        return cls(
            security_name=tx.security_name,
            tx_id=tx.tx_id,
            trade_date=tx.effective_date,
            trade_action=tx.trade_action,
            quantity=tx.signed_quantity,
            cost_basis=tx.cost_basis,
            price=tx.trade_price,
        )


@dataclass
class SecurityHolding:
    security_name: str
    lots: list[LotInfo] = field(default_factory=list)
    quantity: Decimal | None = ZERO
    cost_basis: Decimal = ZERO
    price: Decimal | None = ZERO
    market_value: Decimal = ZERO
    pnl: Decimal | None = None
    pct_return: Decimal | None = None

    def find_lot(self, tx_id: int) -> LotInfo | None:
        for lot in self.lots:
            if lot.tx_id == tx_id:
                return lot
        return None


@dataclass(frozen=True)
class PriceQuote:
    price: Decimal
    price_date: date


@dataclass(frozen=True)
class CapitalGainItem:
    transaction: Transaction
    match_transaction: Transaction
    quantity: Decimal
    cost_basis: Decimal
    proceeds: Decimal

    @property
    def realized_gain(self) -> Decimal:
        return self.proceeds - self.cost_basis

    @property
    def is_short_term(self) -> bool:
        held_until = self.match_transaction.trade_date + relativedelta(years=1, days=1)
        return held_until > self.transaction.trade_date
