"""Get Order Fulfillment Use Case

Read-only fulfillment projection of a purchase order for display layers.
"""

from libs.result import Result, Return, Error
from src.app.repositories.purchase_order_repository import PurchaseOrderRepository
from src.app.repositories.purchase_order_line_repository import PurchaseOrderLineRepository
from src.domain.quantity_ledger import QuantityLedger
from src.domain.receipt_validator import RejectionCode
from src.domain.status_deriver import derive_line_status
from .dtos import OrderFulfillmentResponseDTO, OrderLineFulfillmentDTO


class GetOrderFulfillment:
    """
    Get Order Fulfillment Use Case

    Reads the cached per-line received totals (kept in step with the
    receipt log by SubmitGoodsReceipt) instead of rescanning receipts.

    Errors:
        ORDER_NOT_FOUND: Unknown order ID
    """

    def __init__(
        self,
        order_repo: PurchaseOrderRepository,
        line_repo: PurchaseOrderLineRepository,
    ):
        self.order_repo = order_repo
        self.line_repo = line_repo

    async def execute(self, order_id: int) -> Result[OrderFulfillmentResponseDTO]:
        order = await self.order_repo.get_by_id(order_id)
        if not order:
            return Return.err(
                Error(
                    code=RejectionCode.ORDER_NOT_FOUND.value,
                    message=f"Purchase order {order_id} not found",
                    details={"order_id": order_id},
                )
            )

        order_lines = await self.line_repo.list_by_order(order.id)
        ledger = QuantityLedger({line.id: line.received_quantity for line in order_lines})

        return Return.ok(
            OrderFulfillmentResponseDTO(
                order_id=order.id,
                order_number=order.order_number,
                supplier_reference=order.supplier_reference,
                order_status=order.status,
                lines=[
                    OrderLineFulfillmentDTO(
                        order_line_id=line.id,
                        item_reference=line.item_reference,
                        description=line.description,
                        ordered=line.ordered_quantity,
                        received=ledger.received_so_far(line.id),
                        remaining=ledger.remaining(line),
                        line_status=derive_line_status(
                            line.ordered_quantity, ledger.received_so_far(line.id)
                        ),
                    )
                    for line in order_lines
                ],
            )
        )
