import pytest_asyncio
from datetime import date
from decimal import Decimal
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession
from src.depends import get_order_locks, get_session
from src.domain.purchase_order import PurchaseOrder, PurchaseOrderStatus
from src.domain.purchase_order_line import PurchaseOrderLine


@pytest_asyncio.fixture(scope="function")
async def engine(tmp_path):
    """Create a file-backed SQLite database per test"""
    test_db_url = f"sqlite+aiosqlite:///{tmp_path / 'procurement_test.db'}"

    engine = create_async_engine(test_db_url, echo=False, future=True)

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(engine):
    return sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest_asyncio.fixture
async def db_session(session_factory):
    """Create a new database session for each test"""
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def create_order(session_factory):
    """Persist a purchase order with lines; returns detached (order, lines)

    The rows are written through their own session so rollbacks in the
    session under test never expire the returned objects.
    """

    async def _create(
        order_number: str,
        ordered_quantities,
        status: PurchaseOrderStatus = PurchaseOrderStatus.APPROVED,
    ):
        async with session_factory() as session:
            order = PurchaseOrder(
                order_number=order_number,
                supplier_reference="SUP-1001",
                issue_date=date(2024, 1, 1),
                status=status,
            )
            session.add(order)
            await session.flush()

            lines = []
            for index, quantity in enumerate(ordered_quantities, start=1):
                line = PurchaseOrderLine(
                    order_id=order.id,
                    item_reference=f"{order_number}-ITEM-{index}",
                    description=f"Item {index}",
                    ordered_quantity=Decimal(str(quantity)),
                    unit_price=Decimal("2.50"),
                )
                session.add(line)
                lines.append(line)
            await session.commit()

            for line in lines:
                await session.refresh(line)
            await session.refresh(order)
        return order, lines

    return _create


@pytest_asyncio.fixture
async def client(db_session, order_locks):
    """Create test client with database session override"""
    from src.api.app import create_app
    from config import ApplicationConfig

    app = create_app(ApplicationConfig)

    # Override the session dependency to use test session
    async def override_get_session():
        yield db_session

    app.dependency_overrides[get_session] = override_get_session
    app.dependency_overrides[get_order_locks] = lambda: order_locks

    # Use ASGITransport for httpx AsyncClient
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
