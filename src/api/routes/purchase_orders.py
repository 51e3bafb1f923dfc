"""Purchase Order Fulfillment API Routes

FastAPI routes for goods receipts and purchase order fulfillment.
"""

from fastapi import APIRouter, Depends, status
from sqlmodel.ext.asyncio.session import AsyncSession

from config import ApplicationConfig
from src.api.schemas.receipt_request import SubmitReceiptRequestSchema, UpdateOrderStatusRequestSchema
from src.app.services.order_lock import OrderLockRegistry
from src.app.use_cases.procurement.dtos import (
    OrderFulfillmentResponseDTO,
    OrderReceiptsResponseDTO,
    OrderStatusResponseDTO,
    ReceiptLineCommandDTO,
    SubmitReceiptCommandDTO,
    SubmitReceiptResponseDTO,
    UpdateOrderStatusCommandDTO,
)
from src.app.use_cases.procurement.get_order_fulfillment import GetOrderFulfillment
from src.app.use_cases.procurement.list_order_receipts import ListOrderReceipts
from src.app.use_cases.procurement.submit_goods_receipt import SubmitGoodsReceipt
from src.app.use_cases.procurement.update_order_status import UpdateOrderStatus
from src.adapter.repositories.goods_receipt_repository import SqlAlchemyGoodsReceiptRepository
from src.adapter.repositories.purchase_order_line_repository import SqlAlchemyPurchaseOrderLineRepository
from src.adapter.repositories.purchase_order_repository import SqlAlchemyPurchaseOrderRepository
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.depends import get_order_locks, get_session
from src.api.error import ClientError

router = APIRouter(prefix="/procurement/purchase-orders", tags=["Procurement"])


@router.post(
    "/{order_id}/receipts",
    response_model=SubmitReceiptResponseDTO,
    status_code=status.HTTP_200_OK,
    responses={
        409: {
            "description": "Over-receipt, order not receivable or concurrent update",
            "content": {
                "application/json": {
                    "example": {
                        "error": {
                            "code": "OVER_RECEIPT",
                            "message": "Cannot receive 10 units on line 3, only 4 remain",
                            "details": {
                                "order_line_id": 3,
                                "requested": "10.000000",
                                "remaining": "4.000000",
                                "excess": "6.000000"
                            }
                        }
                    }
                }
            }
        },
        404: {"description": "Purchase order not found"},
        422: {"description": "Line not in order, or empty/invalid receipt"},
    }
)
async def submit_receipt(
    order_id: int,
    request: SubmitReceiptRequestSchema,
    session: AsyncSession = Depends(get_session),
    order_locks: OrderLockRegistry = Depends(get_order_locks),
):
    """
    Record goods received against a purchase order.

    Received quantities are checked against what remains on each order
    line; the receipt, line totals and order status commit together.
    Resending the same `idempotency_key` returns the original result
    without recording the goods twice.

    **Request body:**
    - `idempotency_key` (required): Unique key per order
    - `lines` (required): `order_line_id`, `received_quantity`, optional `note`
    - `receipt_date`, `received_by`, `notes` (optional)

    **Returns:**
    - 200: Receipt recorded (or replayed)
    - 404: Purchase order not found
    - 409: Over-receipt, order not receivable, or concurrent update
    - 422: Line not in order, or empty/invalid receipt
    """
    uow = SqlAlchemyUnitOfWork(session)
    order_repo = SqlAlchemyPurchaseOrderRepository(session)
    line_repo = SqlAlchemyPurchaseOrderLineRepository(session)
    receipt_repo = SqlAlchemyGoodsReceiptRepository(session)

    command = SubmitReceiptCommandDTO(
        order_id=order_id,
        idempotency_key=request.idempotency_key,
        lines=[
            ReceiptLineCommandDTO(
                order_line_id=line.order_line_id,
                received_quantity=line.received_quantity,
                note=line.note,
            )
            for line in request.lines
        ],
        receipt_date=request.receipt_date,
        received_by=request.received_by,
        notes=request.notes,
    )

    use_case = SubmitGoodsReceipt(
        uow,
        order_repo,
        line_repo,
        receipt_repo,
        order_locks,
        max_attempts=ApplicationConfig.RECEIPT_SUBMIT_MAX_ATTEMPTS,
    )
    result = await use_case.execute(command)

    if result.is_err():
        raise ClientError(result.error)

    return result.value


@router.get(
    "/{order_id}/fulfillment",
    response_model=OrderFulfillmentResponseDTO,
    status_code=status.HTTP_200_OK,
    responses={
        404: {
            "description": "Purchase order not found",
            "content": {
                "application/json": {
                    "example": {
                        "error": {
                            "code": "ORDER_NOT_FOUND",
                            "message": "Purchase order 123 not found"
                        }
                    }
                }
            }
        }
    }
)
async def get_order_fulfillment(
    order_id: int,
    session: AsyncSession = Depends(get_session),
):
    """
    Get the fulfillment state of a purchase order.

    Read-only: order status plus ordered, received and remaining quantity
    and fulfillment state for every line.
    """
    order_repo = SqlAlchemyPurchaseOrderRepository(session)
    line_repo = SqlAlchemyPurchaseOrderLineRepository(session)

    use_case = GetOrderFulfillment(order_repo, line_repo)
    result = await use_case.execute(order_id)

    if result.is_err():
        raise ClientError(result.error)

    return result.value


@router.get(
    "/{order_id}/receipts",
    response_model=OrderReceiptsResponseDTO,
    status_code=status.HTTP_200_OK,
    responses={404: {"description": "Purchase order not found"}},
)
async def list_order_receipts(
    order_id: int,
    session: AsyncSession = Depends(get_session),
):
    """
    List the goods receipts recorded against a purchase order.

    Oldest first. Each receipt carries the line totals and statuses as they
    stood when it was committed.
    """
    order_repo = SqlAlchemyPurchaseOrderRepository(session)
    receipt_repo = SqlAlchemyGoodsReceiptRepository(session)

    use_case = ListOrderReceipts(order_repo, receipt_repo)
    result = await use_case.execute(order_id)

    if result.is_err():
        raise ClientError(result.error)

    return result.value


@router.post(
    "/{order_id}/status",
    response_model=OrderStatusResponseDTO,
    status_code=status.HTTP_200_OK,
    responses={
        409: {
            "description": "Transition not allowed",
            "content": {
                "application/json": {
                    "example": {
                        "error": {
                            "code": "ORDER_HAS_RECEIPTS",
                            "message": "Purchase order PO-2024-001 already has 1 goods receipt(s) and cannot be cancelled; close it short instead"
                        }
                    }
                }
            }
        },
        404: {"description": "Purchase order not found"},
    }
)
async def update_order_status(
    order_id: int,
    request: UpdateOrderStatusRequestSchema,
    session: AsyncSession = Depends(get_session),
    order_locks: OrderLockRegistry = Depends(get_order_locks),
):
    """
    Approve, cancel or close short a purchase order.

    Cancellation is refused once any goods have been received; close the
    order short instead.
    """
    uow = SqlAlchemyUnitOfWork(session)
    order_repo = SqlAlchemyPurchaseOrderRepository(session)
    receipt_repo = SqlAlchemyGoodsReceiptRepository(session)

    command = UpdateOrderStatusCommandDTO(order_id=order_id, status=request.status)

    use_case = UpdateOrderStatus(uow, order_repo, receipt_repo, order_locks)
    result = await use_case.execute(command)

    if result.is_err():
        raise ClientError(result.error)

    return result.value
