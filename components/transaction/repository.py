"""Repository for transaction operations."""

from typing import List, Optional
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from components.transaction.models import Transaction


class TransactionRepository:
    """Repository for the persisted transaction store."""

    def __init__(self, session: AsyncSession):
        """Initialize repository with database session."""
        self.session = session

    def add(self, transaction: Transaction) -> Transaction:
        """Stage a new transaction in the caller's unit of work."""
        self.session.add(transaction)
        return transaction

    async def list_for_payer(self, payer_id: int) -> List[Transaction]:
        """Transactions paid by ``payer_id``, most recently completed first."""
        result = await self.session.execute(
            select(Transaction)
            .where(Transaction.payer_id == payer_id)
            .order_by(
                Transaction.completed_at.is_(None),
                Transaction.completed_at.desc(),
                Transaction.transaction_id.asc(),
            )
        )
        return list(result.scalars().all())

    async def get_for_payer(self, payer_id: int, transaction_id: str) -> Optional[Transaction]:
        result = await self.session.execute(
            select(Transaction).where(
                Transaction.transaction_id == transaction_id,
                Transaction.payer_id == payer_id,
            )
        )
        return result.scalar_one_or_none()
