"""Quantity Ledger

Received totals per order line, folded from the goods receipt log.
Pure: no I/O, safe to rebuild or query repeatedly inside a transaction.
"""

from decimal import Decimal
from typing import Dict, Iterable, Mapping, Tuple
from src.domain.purchase_order_line import PurchaseOrderLine

ZERO = Decimal("0")

# Matches the Numeric(18, 6) quantity columns
QUANTITY_EXPONENT = Decimal("0.000001")


def to_quantity(value) -> Decimal:
    return Decimal(value).quantize(QUANTITY_EXPONENT)


def sum_received(entries: Iterable[Tuple[int, Decimal]]) -> Dict[int, Decimal]:
    """Fold (order_line_id, received_quantity) pairs into per-line totals"""
    totals: Dict[int, Decimal] = {}
    for order_line_id, quantity in entries:
        totals[order_line_id] = totals.get(order_line_id, ZERO) + to_quantity(quantity)
    return totals


class QuantityLedger:
    """
    Snapshot of cumulative received quantities keyed by order line id

    Lines without receipts report zero. A ledger is immutable; applying a
    receipt returns a new snapshot.
    """

    def __init__(self, totals: Mapping[int, Decimal] = None):
        self._totals: Dict[int, Decimal] = {
            line_id: to_quantity(quantity) for line_id, quantity in (totals or {}).items()
        }

    def received_so_far(self, order_line_id: int) -> Decimal:
        return self._totals.get(order_line_id, ZERO)

    def remaining(self, order_line: PurchaseOrderLine) -> Decimal:
        return to_quantity(order_line.ordered_quantity) - self.received_so_far(order_line.id)

    def apply(self, entries: Iterable[Tuple[int, Decimal]]) -> "QuantityLedger":
        totals = dict(self._totals)
        for order_line_id, quantity in sum_received(entries).items():
            totals[order_line_id] = totals.get(order_line_id, ZERO) + quantity
        return QuantityLedger(totals)

    def __repr__(self) -> str:
        return f"QuantityLedger({self._totals!r})"
