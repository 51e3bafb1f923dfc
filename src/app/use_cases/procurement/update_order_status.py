"""UpdateOrderStatus Use Case

Explicit status changes that receipts cannot make: approval, cancellation
and closing an order short.
"""

import logging
from libs.result import Result, Return, Error
from src.app.services.order_lock import OrderLockRegistry
from src.app.services.unit_of_work import UnitOfWork
from src.app.repositories.purchase_order_repository import PurchaseOrderRepository
from src.app.repositories.goods_receipt_repository import GoodsReceiptRepository
from src.domain.purchase_order import PurchaseOrderStatus
from src.domain.receipt_validator import RejectionCode
from src.domain.status_deriver import can_transition
from .dtos import OrderStatusResponseDTO, UpdateOrderStatusCommandDTO

logger = logging.getLogger(__name__)

MANUAL_TARGET_STATUSES = frozenset(
    {
        PurchaseOrderStatus.APPROVED,
        PurchaseOrderStatus.CANCELLED,
        PurchaseOrderStatus.CLOSED_SHORT,
    }
)


class UpdateOrderStatus:
    """
    Use Case: Change a purchase order status outside of goods receipts

    Business Rules:
    1. Only approved, cancelled and closed_short can be requested
    2. Transitions follow the order state machine:
       draft -> approved | cancelled, approved -> cancelled,
       partially_received -> closed_short
    3. An order with any goods receipt cannot be cancelled; close it short instead
    4. The write is version-checked under the same per-order lock as receipts
    """

    def __init__(
        self,
        uow: UnitOfWork,
        order_repo: PurchaseOrderRepository,
        receipt_repo: GoodsReceiptRepository,
        order_locks: OrderLockRegistry,
    ):
        self.uow = uow
        self.order_repo = order_repo
        self.receipt_repo = receipt_repo
        self.order_locks = order_locks

    async def execute(self, command: UpdateOrderStatusCommandDTO) -> Result[OrderStatusResponseDTO]:
        async with self.order_locks.hold(command.order_id):
            try:
                return await self._change(command)
            except Exception:
                await self.uow.rollback()
                logger.exception(f"Status change of order {command.order_id} failed")
                raise

    async def _change(self, command: UpdateOrderStatusCommandDTO) -> Result[OrderStatusResponseDTO]:
        target = command.status

        order = await self.order_repo.get_by_id(command.order_id, for_update=True)
        if not order:
            return await self._reject(
                Error(
                    code=RejectionCode.ORDER_NOT_FOUND.value,
                    message=f"Purchase order {command.order_id} not found",
                    details={"order_id": command.order_id},
                )
            )

        if target not in MANUAL_TARGET_STATUSES or not can_transition(order.status, target):
            return await self._reject(
                Error(
                    code=RejectionCode.INVALID_STATUS_TRANSITION.value,
                    message=f"Purchase order {order.order_number} cannot move from {order.status.value} to {target.value}",
                    details={"order_id": order.id, "from": order.status.value, "to": target.value},
                )
            )

        if target == PurchaseOrderStatus.CANCELLED:
            receipt_count = await self.receipt_repo.count_by_order(order.id)
            if receipt_count > 0:
                return await self._reject(
                    Error(
                        code=RejectionCode.ORDER_HAS_RECEIPTS.value,
                        message=(
                            f"Purchase order {order.order_number} already has {receipt_count} goods receipt(s) "
                            f"and cannot be cancelled; close it short instead"
                        ),
                        details={"order_id": order.id, "receipt_count": receipt_count},
                    )
                )

        response = OrderStatusResponseDTO(
            order_id=order.id,
            order_number=order.order_number,
            previous_status=order.status,
            status=target,
            version=order.version + 1,
        )
        if not await self.order_repo.update_status(order.id, target, expected_version=order.version):
            return await self._reject(
                Error(
                    code=RejectionCode.CONCURRENCY_CONFLICT.value,
                    message=f"Purchase order {response.order_number} changed concurrently, retry the request",
                    details={"order_id": response.order_id},
                )
            )

        await self.uow.commit()
        logger.info(
            f"Order {response.order_id} status changed: {response.previous_status.value} -> {target.value}"
        )
        return Return.ok(response)

    async def _reject(self, error: Error) -> Result[OrderStatusResponseDTO]:
        # The error is built before rollback expires the loaded order
        await self.uow.rollback()
        return Return.err(error)
