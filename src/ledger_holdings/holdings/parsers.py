"""Load ledger transactions and lot-match instructions from CSV files.

Transactions CSV columns (header names are case-insensitive)::

    id, date, action, security, quantity, amount, commission, price,
    old_quantity, acquired_date, memo

Dates are ISO (YYYY-MM-DD) or US style (MM/DD/YYYY). Amounts may carry
``$`` and thousands separators. Matches CSV columns: ``tx_id``,
``match_tx_id``, ``quantity``.
"""

from __future__ import annotations

import io
import logging
from collections import defaultdict
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from pathlib import Path

import pandas as pd

from ledger_holdings.holdings.models import MatchInfo, TradeAction, Transaction
from ledger_holdings.holdings.numbers import ZERO

logger = logging.getLogger(__name__)

_DATE_FORMATS = ("%Y-%m-%d", "%m/%d/%Y")


def _parse_date(val: str) -> date:
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(val.strip(), fmt).date()
        except ValueError:
            continue
    raise ValueError(f"Unrecognized date '{val}'")


def _col(row, *names: str) -> str:
    """Read the first matching column name from a row, return stripped string."""
    for name in names:
        val = row.get(name)
        if val is not None:
            s = str(val).strip()
            if s and s != "nan":
                return s
    return ""


def _money(val: str) -> Decimal | None:
    """Parse a dollar string like '$1,234.56' or '-$500.00' into a Decimal."""
    cleaned = val.replace("$", "").replace(",", "")
    if not cleaned:
        return None
    try:
        return Decimal(cleaned)
    except InvalidOperation:
        raise ValueError(f"Unparseable number '{val}'") from None


def _read(file_path: Path | str | io.StringIO) -> pd.DataFrame:
    df = pd.read_csv(file_path, dtype=str)
    df.columns = df.columns.str.strip().str.lower()
    return df


def parse_transactions_csv(
    file_path: Path | str | io.StringIO,
    account_id: int,
) -> list[Transaction]:
    """Parse a transactions CSV into Transaction objects of one account.

    Rows with an unknown action are skipped with a warning. Rows without an
    id are numbered after the largest id seen.
    """
    df = _read(file_path)

    transactions: list[Transaction] = []
    unnumbered: list[Transaction] = []

    for line, (_, row) in enumerate(df.iterrows(), start=2):
        raw_action = _col(row, "action", "trade_action").upper()
        try:
            action = TradeAction(raw_action)
        except ValueError:
            logger.warning("Unknown action '%s' on line %d, skipping", raw_action, line)
            continue

        acquired = _col(row, "acquired_date")
        try:
            tx = Transaction(
                tx_id=int(_col(row, "id", "tx_id") or -1),
                account_id=account_id,
                trade_date=_parse_date(_col(row, "date", "trade_date")),
                trade_action=action,
                security_name=_col(row, "security", "security_name"),
                quantity=_money(_col(row, "quantity", "shares")),
                amount=_money(_col(row, "amount")) or ZERO,
                commission=_money(_col(row, "commission", "fees")) or ZERO,
                price=_money(_col(row, "price")),
                old_quantity=_money(_col(row, "old_quantity")),
                acquired_date=_parse_date(acquired) if acquired else None,
                memo=_col(row, "memo"),
            )
        except ValueError as e:
            raise ValueError(f"{e} on line {line}") from e
        if action == TradeAction.STKSPLIT and not (tx.quantity and tx.old_quantity):
            raise ValueError(f"Stock split on line {line} needs non-zero quantity and old_quantity")

        transactions.append(tx)
        if tx.tx_id < 0:
            unnumbered.append(tx)

    next_id = max((t.tx_id for t in transactions if t.tx_id >= 0), default=0) + 1
    for tx in unnumbered:
        tx.tx_id = next_id
        next_id += 1

    return transactions


def parse_matches_csv(file_path: Path | str | io.StringIO) -> dict[int, list[MatchInfo]]:
    """Parse lot-match instructions, grouped by the disposing transaction id."""
    df = _read(file_path)

    matches: dict[int, list[MatchInfo]] = defaultdict(list)
    for line, (_, row) in enumerate(df.iterrows(), start=2):
        try:
            quantity = _money(_col(row, "quantity")) or ZERO
        except ValueError as e:
            raise ValueError(f"{e} on line {line}") from e
        if quantity < 0:
            raise ValueError(f"Negative match quantity {quantity} on line {line}")
        info = MatchInfo(
            tx_id=int(_col(row, "tx_id")),
            match_tx_id=int(_col(row, "match_tx_id")),
            quantity=quantity,
        )
        matches[info.tx_id].append(info)

    return dict(matches)
