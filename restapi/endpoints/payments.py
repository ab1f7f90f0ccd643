"""Payment confirmation workflow endpoints."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from components.core.clock import Clock, get_clock
from components.core.init_db import get_db
from components.core.schemas import ErrorResponse
from components.otp.delivery import OtpDelivery, get_otp_delivery
from components.payment import schemas
from components.payment.service import PaymentWorkflowService
from components.transaction.schemas import Transaction
from components.user.models import User
from restapi.endpoints.auth import get_current_user

router = APIRouter(
    prefix="/payments",
    tags=["payments"],
    responses={404: {"description": "Not found", "model": ErrorResponse}},
)


def get_workflow(
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
    delivery: OtpDelivery = Depends(get_otp_delivery),
) -> PaymentWorkflowService:
    return PaymentWorkflowService(db, clock=clock, delivery=delivery)


@router.post("", response_model=schemas.PaymentAttemptResponse)
async def start_payment(
    request: schemas.PaymentStartRequest,
    workflow: PaymentWorkflowService = Depends(get_workflow),
    current_user: User = Depends(get_current_user)
):
    """Look up the student's tuition and open a payment attempt."""
    attempt = await workflow.start(current_user, request.student_id)
    return await workflow.describe(attempt, "Student information retrieved successfully!")


@router.get("/{payment_id}", response_model=schemas.PaymentAttemptResponse)
async def read_payment(
    payment_id: str,
    workflow: PaymentWorkflowService = Depends(get_workflow),
    current_user: User = Depends(get_current_user)
):
    """Current state of a payment attempt, including the OTP countdown."""
    attempt = await workflow.get(current_user, payment_id)
    return await workflow.describe(attempt)


@router.post("/{payment_id}/confirm", response_model=schemas.PaymentAttemptResponse)
async def confirm_payment(
    payment_id: str,
    workflow: PaymentWorkflowService = Depends(get_workflow),
    current_user: User = Depends(get_current_user)
):
    """Check the balance and send a one-time passcode to the payer's email."""
    attempt = await workflow.confirm(current_user, payment_id)
    return await workflow.describe(attempt, "OTP sent")


@router.post("/{payment_id}/verify", response_model=schemas.PaymentCompletedResponse)
async def verify_payment(
    payment_id: str,
    request: schemas.OtpVerifyRequest,
    workflow: PaymentWorkflowService = Depends(get_workflow),
    current_user: User = Depends(get_current_user)
):
    """Verify the passcode and execute the payment."""
    attempt, transaction = await workflow.verify(current_user, payment_id, request.code)
    return schemas.PaymentCompletedResponse(
        message="Payment Successful!",
        payment_id=attempt.id,
        state=attempt.state,
        transaction=Transaction.model_validate(transaction),
        available_balance=current_user.available_balance,
    )


@router.post("/{payment_id}/cancel", response_model=schemas.PaymentAttemptResponse)
async def cancel_payment(
    payment_id: str,
    workflow: PaymentWorkflowService = Depends(get_workflow),
    current_user: User = Depends(get_current_user)
):
    """Abandon the attempt and discard any live passcode."""
    attempt = await workflow.cancel(current_user, payment_id)
    return await workflow.describe(attempt, "Payment cancelled")
