"""Database initialization and dependency injection."""

from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession

from components.core.database import DatabaseManager
# Import all models to ensure they're registered
import components.user.models
import components.student.models
import components.otp.models
import components.payment.models
import components.transaction.models

# Create a single instance of DatabaseManager
db_manager = DatabaseManager()


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency for getting database sessions."""
    async with db_manager.get_db() as session:
        yield session


async def init_models() -> None:
    """Create tables that do not exist yet."""
    await db_manager.create_all()
