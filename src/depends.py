from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession
from config import ApplicationConfig
from src.app.services.order_lock import OrderLockRegistry

engine = create_async_engine(ApplicationConfig.DB_URI, echo=False, future=True)

AsyncSessionLocal = sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
)

# One registry per process: every request for the same order shares its lock
order_locks = OrderLockRegistry()


async def get_session() -> AsyncSession:
    async with AsyncSessionLocal() as session:
        yield session


def get_order_locks() -> OrderLockRegistry:
    return order_locks
