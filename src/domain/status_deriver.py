"""Status Deriver

Maps received quantities to line, order and receipt fulfillment states,
and holds the purchase order state machine.
"""

from decimal import Decimal
from typing import Dict, FrozenSet, Iterable
from src.domain.goods_receipt import GoodsReceiptStatus
from src.domain.goods_receipt_line import LineFulfillmentStatus
from src.domain.purchase_order import PurchaseOrderStatus

# Statuses recomputed from line states; the others are set by explicit actions
DERIVED_ORDER_STATUSES = frozenset(
    {
        PurchaseOrderStatus.APPROVED,
        PurchaseOrderStatus.PARTIALLY_RECEIVED,
        PurchaseOrderStatus.FULLY_RECEIVED,
    }
)

ORDER_TRANSITIONS: Dict[PurchaseOrderStatus, FrozenSet[PurchaseOrderStatus]] = {
    PurchaseOrderStatus.DRAFT: frozenset(
        {PurchaseOrderStatus.APPROVED, PurchaseOrderStatus.CANCELLED}
    ),
    PurchaseOrderStatus.APPROVED: frozenset(
        {
            PurchaseOrderStatus.PARTIALLY_RECEIVED,
            PurchaseOrderStatus.FULLY_RECEIVED,
            PurchaseOrderStatus.CANCELLED,
        }
    ),
    PurchaseOrderStatus.PARTIALLY_RECEIVED: frozenset(
        {
            PurchaseOrderStatus.PARTIALLY_RECEIVED,
            PurchaseOrderStatus.FULLY_RECEIVED,
            PurchaseOrderStatus.CANCELLED,
            PurchaseOrderStatus.CLOSED_SHORT,
        }
    ),
    PurchaseOrderStatus.FULLY_RECEIVED: frozenset(),
    PurchaseOrderStatus.CANCELLED: frozenset(),
    PurchaseOrderStatus.CLOSED_SHORT: frozenset(),
}


def derive_line_status(ordered: Decimal, received: Decimal) -> LineFulfillmentStatus:
    """
    Fulfillment state of one order line

    Defined for 0 <= received <= ordered; anything else breaks the
    received-never-exceeds-ordered invariant and raises ValueError.
    """
    ordered = Decimal(ordered)
    received = Decimal(received)
    if ordered <= 0:
        raise ValueError(f"ordered quantity must be positive, got {ordered}")
    if received < 0 or received > ordered:
        raise ValueError(f"received quantity {received} outside [0, {ordered}]")

    if received == 0:
        return LineFulfillmentStatus.NOT_RECEIVED
    if received < ordered:
        return LineFulfillmentStatus.PARTIALLY_RECEIVED
    return LineFulfillmentStatus.FULLY_RECEIVED


def derive_order_status(
    current: PurchaseOrderStatus,
    line_statuses: Iterable[LineFulfillmentStatus],
) -> PurchaseOrderStatus:
    """
    Aggregate order status over all of its lines

    Draft, cancelled and closed-short orders keep their status: only
    receivable or fully received orders are recomputed.
    """
    if current not in DERIVED_ORDER_STATUSES:
        return current

    statuses = list(line_statuses)
    if not statuses:
        return current

    if all(s == LineFulfillmentStatus.FULLY_RECEIVED for s in statuses):
        return PurchaseOrderStatus.FULLY_RECEIVED
    if all(s == LineFulfillmentStatus.NOT_RECEIVED for s in statuses):
        return PurchaseOrderStatus.APPROVED
    return PurchaseOrderStatus.PARTIALLY_RECEIVED


def derive_receipt_status(touched_line_statuses: Iterable[LineFulfillmentStatus]) -> GoodsReceiptStatus:
    """Receipt is complete only if every line it delivered against is now fully received"""
    statuses = list(touched_line_statuses)
    if statuses and all(s == LineFulfillmentStatus.FULLY_RECEIVED for s in statuses):
        return GoodsReceiptStatus.FULLY_RECEIVED
    return GoodsReceiptStatus.PARTIALLY_RECEIVED


def can_transition(current: PurchaseOrderStatus, target: PurchaseOrderStatus) -> bool:
    return target in ORDER_TRANSITIONS.get(current, frozenset())
