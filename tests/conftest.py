import pytest
from unittest.mock import AsyncMock, MagicMock
from src.app.services.order_lock import OrderLockRegistry


@pytest.fixture
def mock_uow():
    """Mock unit of work"""
    uow = MagicMock()
    uow.__aenter__ = AsyncMock(return_value=uow)
    uow.__aexit__ = AsyncMock()
    uow.commit = AsyncMock()
    uow.rollback = AsyncMock()
    return uow


@pytest.fixture
def order_locks():
    """Fresh per-order lock registry"""
    return OrderLockRegistry()


@pytest.fixture
def expire_on_rollback(mock_uow):
    """Make mock_uow.rollback drop the loaded state of the given entities

    An AsyncSession expires every instance on rollback, and reading an expired
    attribute outside the session's greenlet fails, so nothing may read them
    once the transaction is rolled back.
    """

    def _expire(*entities):
        async def rollback():
            for entity in entities:
                for key in list(entity.__dict__):
                    if not key.startswith("_"):
                        del entity.__dict__[key]

        mock_uow.rollback = AsyncMock(side_effect=rollback)

    return _expire
