"""Atomic payment execution."""

import uuid

from sqlalchemy.ext.asyncio import AsyncSession

from components.core.clock import Clock, utcnow
from components.core.exceptions import PaymentProcessingError
from components.payment.models import PaymentAttempt
from components.payment.workflow import PaymentState, transition
from components.student.models import DebtStatus
from components.student.repository import StudentRepository
from components.transaction.models import Transaction, TransactionStatus
from components.transaction.repository import TransactionRepository
from components.user.repository import UserRepository


class PaymentExecutor:
    """
    Debits the payer, settles the debt and records the transaction.

    Everything happens in the caller's open transaction; the caller commits
    on success and rolls back on any exception, so either all of it is
    written or none of it is.
    """

    def __init__(self, session: AsyncSession, clock: Clock = utcnow):
        self.session = session
        self.clock = clock
        self.users = UserRepository(session)
        self.students = StudentRepository(session)
        self.transactions = TransactionRepository(session)

    async def execute(self, attempt: PaymentAttempt) -> Transaction:
        payer = await self.users.get_by_id_for_update(attempt.payer_id)
        debt = await self.students.get_debt_for_update(attempt.debt_id)
        if payer is None or debt is None:
            raise PaymentProcessingError()
        if debt.status != DebtStatus.UNPAID:
            raise PaymentProcessingError("This tuition has already been paid.")
        if debt.amount != attempt.amount:
            raise PaymentProcessingError("Tuition amount has changed. Please look up the student again.")
        if payer.available_balance < debt.amount:
            raise PaymentProcessingError("Insufficient balance. Please top up your account.")

        student = await self.students.get_student(debt.student_id)
        now = self.clock()

        payer.available_balance -= debt.amount
        debt.status = DebtStatus.PAID
        transaction = self.transactions.add(Transaction(
            transaction_id=str(uuid.uuid4()),
            payer_id=payer.id,
            payer_name=payer.full_name,
            receiver_id=debt.student_id,
            receiver_name=student.full_name if student else debt.student_id,
            amount=debt.amount,
            status=TransactionStatus.COMPLETED,
            initiated_at=attempt.otp_verified_at or now,
            completed_at=now,
            debt_id=debt.debt_id,
            semester=debt.semester,
            academic_year=debt.academic_year,
        ))
        attempt.transaction_id = transaction.transaction_id
        transition(attempt, PaymentState.COMPLETED)
        await self.session.flush()
        return transaction
