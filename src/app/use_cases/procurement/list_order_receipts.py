"""List Order Receipts Use Case

Receipt history of a purchase order, read from the append-only log.
"""

from libs.result import Result, Return, Error
from src.app.repositories.goods_receipt_repository import GoodsReceiptRepository
from src.app.repositories.purchase_order_repository import PurchaseOrderRepository
from src.domain.receipt_validator import RejectionCode
from .dtos import OrderReceiptsResponseDTO, ReceiptHistoryDTO, ReceiptHistoryLineDTO


class ListOrderReceipts:
    """
    List Order Receipts Use Case

    Each receipt is reported with the statuses and running totals captured
    when it was committed, so the history reads the same after later receipts.

    Errors:
        ORDER_NOT_FOUND: Unknown order ID
    """

    def __init__(
        self,
        order_repo: PurchaseOrderRepository,
        receipt_repo: GoodsReceiptRepository,
    ):
        self.order_repo = order_repo
        self.receipt_repo = receipt_repo

    async def execute(self, order_id: int) -> Result[OrderReceiptsResponseDTO]:
        order = await self.order_repo.get_by_id(order_id)
        if not order:
            return Return.err(
                Error(
                    code=RejectionCode.ORDER_NOT_FOUND.value,
                    message=f"Purchase order {order_id} not found",
                    details={"order_id": order_id},
                )
            )

        receipts = []
        for receipt in await self.receipt_repo.list_by_order(order.id):
            lines = await self.receipt_repo.list_lines(receipt.id)
            receipts.append(
                ReceiptHistoryDTO(
                    receipt_id=receipt.id,
                    idempotency_key=receipt.idempotency_key,
                    receipt_date=receipt.receipt_date,
                    received_by=receipt.received_by,
                    notes=receipt.notes,
                    receipt_status=receipt.status,
                    order_status=receipt.order_status_after,
                    created_at=receipt.created_at,
                    lines=[
                        ReceiptHistoryLineDTO(
                            order_line_id=line.order_line_id,
                            item_reference=line.item_reference,
                            received_quantity=line.received_quantity,
                            total_received=line.total_received_after,
                            line_status=line.line_status_after,
                            note=line.note,
                        )
                        for line in lines
                    ],
                )
            )

        return Return.ok(
            OrderReceiptsResponseDTO(
                order_id=order.id,
                order_number=order.order_number,
                receipts=receipts,
            )
        )
