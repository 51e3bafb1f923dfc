"""Receipt Validator

Accepts or rejects a proposed goods receipt against an order and the
current received totals. Checks run in a fixed order and stop at the
first failure; rejections are returned as Error values, never raised.
"""

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Optional, Sequence, Tuple
from libs.result import Result, Return, Error
from src.domain.purchase_order import PurchaseOrder, PurchaseOrderStatus, RECEIVABLE_STATUSES
from src.domain.purchase_order_line import PurchaseOrderLine
from src.domain.quantity_ledger import QuantityLedger, to_quantity


class RejectionCode(str, Enum):
    """Stable codes for rejected receipts and status changes"""
    ORDER_NOT_FOUND = "ORDER_NOT_FOUND"
    ORDER_NOT_RECEIVABLE = "ORDER_NOT_RECEIVABLE"
    LINE_NOT_IN_ORDER = "LINE_NOT_IN_ORDER"
    EMPTY_OR_INVALID_RECEIPT = "EMPTY_OR_INVALID_RECEIPT"
    OVER_RECEIPT = "OVER_RECEIPT"
    CONCURRENCY_CONFLICT = "CONCURRENCY_CONFLICT"
    INVALID_STATUS_TRANSITION = "INVALID_STATUS_TRANSITION"
    ORDER_HAS_RECEIPTS = "ORDER_HAS_RECEIPTS"


@dataclass(frozen=True)
class ProposedReceiptLine:
    order_line_id: int
    received_quantity: Decimal
    note: Optional[str] = None


@dataclass(frozen=True)
class ValidatedReceiptLine:
    order_line: PurchaseOrderLine
    received_quantity: Decimal
    remaining_before: Decimal
    note: Optional[str] = None


@dataclass(frozen=True)
class ValidatedReceipt:
    """Receipt ready to persist: only positive-quantity lines, in submission order"""
    order: PurchaseOrder
    lines: Tuple[ValidatedReceiptLine, ...]


def _fmt(quantity: Decimal) -> str:
    return format(Decimal(quantity).normalize(), "f")


def _not_receivable(order: PurchaseOrder) -> Error:
    return Error(
        code=RejectionCode.ORDER_NOT_RECEIVABLE.value,
        message=f"Purchase order {order.order_number} cannot receive goods while {order.status.value}",
        reason=f"status={order.status.value}",
        details={"order_id": order.id, "status": order.status.value},
    )


def _parse_quantity(value) -> Optional[Decimal]:
    """Quantity on the 6-place grid, or None when it is not a usable finite number"""
    try:
        quantity = Decimal(value)
        if not quantity.is_finite():
            return None
        return to_quantity(quantity)
    except (InvalidOperation, TypeError, ValueError):
        return None


def validate_receipt(
    order: PurchaseOrder,
    order_lines: Sequence[PurchaseOrderLine],
    ledger: QuantityLedger,
    proposed_lines: Sequence[ProposedReceiptLine],
) -> Result[ValidatedReceipt]:
    """
    Validate a proposed receipt

    Checks:
    1. Order is approved, partially received or fully received
       -> ORDER_NOT_RECEIVABLE
    2. Every line references a line of this order -> LINE_NOT_IN_ORDER
    3. Every quantity is a finite, non-negative number, no repeated line,
       at least one positive quantity -> EMPTY_OR_INVALID_RECEIPT
    4. Each quantity fits in the line's remaining quantity -> OVER_RECEIPT

    A fully received order reaches check 4 so that extra goods are reported
    as an over-receipt with the exact excess. Should its lines still show
    room (cache drift), it is refused as ORDER_NOT_RECEIVABLE afterwards.

    Returns:
        Result[ValidatedReceipt]: normalized receipt or the first rejection
    """
    if order.status not in RECEIVABLE_STATUSES and order.status != PurchaseOrderStatus.FULLY_RECEIVED:
        return Return.err(_not_receivable(order))

    lines_by_id = {line.id: line for line in order_lines}
    for proposed in proposed_lines:
        if proposed.order_line_id not in lines_by_id:
            return Return.err(
                Error(
                    code=RejectionCode.LINE_NOT_IN_ORDER.value,
                    message=f"Line {proposed.order_line_id} does not belong to purchase order {order.order_number}",
                    details={"order_id": order.id, "order_line_id": proposed.order_line_id},
                )
            )

    quantities = {}
    for proposed in proposed_lines:
        quantity = _parse_quantity(proposed.received_quantity)
        if quantity is None:
            return Return.err(
                Error(
                    code=RejectionCode.EMPTY_OR_INVALID_RECEIPT.value,
                    message=f"Received quantity for line {proposed.order_line_id} is not a valid quantity",
                    reason=f"received_quantity={proposed.received_quantity}",
                    details={"order_line_id": proposed.order_line_id},
                )
            )
        if quantity < 0:
            return Return.err(
                Error(
                    code=RejectionCode.EMPTY_OR_INVALID_RECEIPT.value,
                    message=f"Received quantity for line {proposed.order_line_id} cannot be negative",
                    reason=f"received_quantity={proposed.received_quantity}",
                    details={"order_line_id": proposed.order_line_id},
                )
            )
        if proposed.order_line_id in quantities:
            return Return.err(
                Error(
                    code=RejectionCode.EMPTY_OR_INVALID_RECEIPT.value,
                    message=f"Line {proposed.order_line_id} appears more than once in the receipt",
                    details={"order_line_id": proposed.order_line_id},
                )
            )
        quantities[proposed.order_line_id] = quantity

    accepted = [p for p in proposed_lines if quantities[p.order_line_id] > 0]
    if not accepted:
        return Return.err(
            Error(
                code=RejectionCode.EMPTY_OR_INVALID_RECEIPT.value,
                message="Receipt must receive a positive quantity on at least one line",
            )
        )

    validated = []
    for proposed in accepted:
        order_line = lines_by_id[proposed.order_line_id]
        requested = quantities[proposed.order_line_id]
        remaining = ledger.remaining(order_line)
        if requested > remaining:
            excess = requested - remaining
            return Return.err(
                Error(
                    code=RejectionCode.OVER_RECEIPT.value,
                    message=(
                        f"Cannot receive {_fmt(requested)} units on line {order_line.id}, "
                        f"only {_fmt(remaining)} remain"
                    ),
                    reason=f"requested={requested}, remaining={remaining}, excess={excess}",
                    details={
                        "order_line_id": order_line.id,
                        "requested": str(requested),
                        "remaining": str(remaining),
                        "excess": str(excess),
                    },
                )
            )
        validated.append(
            ValidatedReceiptLine(
                order_line=order_line,
                received_quantity=requested,
                remaining_before=remaining,
                note=proposed.note,
            )
        )

    if order.status not in RECEIVABLE_STATUSES:
        return Return.err(_not_receivable(order))

    return Return.ok(ValidatedReceipt(order=order, lines=tuple(validated)))
