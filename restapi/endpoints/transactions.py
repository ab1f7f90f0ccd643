"""Transaction history endpoints."""

from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse
from sqlalchemy.ext.asyncio import AsyncSession

from components.core.clock import Clock, get_clock
from components.core.init_db import get_db
from components.core.schemas import ErrorResponse
from components.transaction import schemas
from components.transaction.service import TransactionHistory
from components.user.models import User
from restapi.endpoints.auth import get_current_user

router = APIRouter(
    prefix="/transactions",
    tags=["transactions"],
    responses={404: {"description": "Not found", "model": ErrorResponse}},
)


@router.get("", response_model=schemas.TransactionList)
async def list_transactions(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Transactions paid by the current user, newest first."""
    transactions = await TransactionHistory(db).list(current_user.id)
    return schemas.TransactionList(
        count=len(transactions),
        transactions=[schemas.Transaction.model_validate(txn) for txn in transactions],
    )


@router.get("/{transaction_id}", response_model=schemas.Transaction)
async def read_transaction(
    transaction_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Get a single transaction of the current user."""
    return await TransactionHistory(db).get(current_user.id, transaction_id)


@router.get("/{transaction_id}/receipt", response_class=PlainTextResponse)
async def download_receipt(
    transaction_id: str,
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
    current_user: User = Depends(get_current_user)
):
    """Download the plain-text receipt of a transaction."""
    filename, content = await TransactionHistory(db, clock).export_receipt(current_user.id, transaction_id)
    return PlainTextResponse(
        content,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
