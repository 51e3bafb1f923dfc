"""API error handling

Business rejections reach the client as {"error": {...}} with the code,
message and details produced by the use case, unchanged.
"""

import logging
from fastapi import Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from libs.result import Error
from src.domain.receipt_validator import RejectionCode

logger = logging.getLogger(__name__)

STATUS_BY_CODE = {
    RejectionCode.ORDER_NOT_FOUND.value: status.HTTP_404_NOT_FOUND,
    RejectionCode.ORDER_NOT_RECEIVABLE.value: status.HTTP_409_CONFLICT,
    RejectionCode.LINE_NOT_IN_ORDER.value: status.HTTP_422_UNPROCESSABLE_ENTITY,
    RejectionCode.EMPTY_OR_INVALID_RECEIPT.value: status.HTTP_422_UNPROCESSABLE_ENTITY,
    RejectionCode.OVER_RECEIPT.value: status.HTTP_409_CONFLICT,
    RejectionCode.CONCURRENCY_CONFLICT.value: status.HTTP_409_CONFLICT,
    RejectionCode.INVALID_STATUS_TRANSITION.value: status.HTTP_409_CONFLICT,
    RejectionCode.ORDER_HAS_RECEIPTS.value: status.HTTP_409_CONFLICT,
}


class ClientError(Exception):
    def __init__(self, error: Error, status_code: int = None):
        super().__init__(error.message)
        self.error = error
        self.status_code = status_code or STATUS_BY_CODE.get(error.code, status.HTTP_400_BAD_REQUEST)


async def client_error_handler(request: Request, exc: ClientError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"error": exc.error.to_dict()})


async def storage_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error(f"Storage failure on {request.method} {request.url.path}: {exc}")
    error = Error(
        code="STORAGE_UNAVAILABLE",
        message="Storage is unavailable, retry the request with the same idempotency key",
    )
    return JSONResponse(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, content={"error": error.to_dict()})
