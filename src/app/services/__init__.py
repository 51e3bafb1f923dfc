from .unit_of_work import UnitOfWork
from .order_lock import OrderLockRegistry

__all__ = [
    "UnitOfWork",
    "OrderLockRegistry",
]
