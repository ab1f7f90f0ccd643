"""Transaction history viewer."""

from typing import List, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from components.core.clock import Clock, utcnow
from components.core.exceptions import TransactionNotFoundError
from components.transaction.models import Transaction
from components.transaction.receipt import receipt_filename, render_receipt
from components.transaction.repository import TransactionRepository


class TransactionHistory:
    def __init__(self, session: AsyncSession, clock: Clock = utcnow):
        self.repository = TransactionRepository(session)
        self.clock = clock

    async def list(self, user_id: int) -> List[Transaction]:
        return await self.repository.list_for_payer(user_id)

    async def get(self, user_id: int, transaction_id: str) -> Transaction:
        """Transactions owned by someone else are reported as missing."""
        transaction = await self.repository.get_for_payer(user_id, transaction_id)
        if transaction is None:
            raise TransactionNotFoundError(transaction_id)
        return transaction

    async def export_receipt(self, user_id: int, transaction_id: str) -> Tuple[str, str]:
        """Return ``(filename, text)`` for the downloadable receipt."""
        transaction = await self.get(user_id, transaction_id)
        return receipt_filename(transaction.transaction_id), render_receipt(transaction, self.clock())
