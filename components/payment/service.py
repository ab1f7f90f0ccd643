"""Payment confirmation workflow."""

import re
import uuid
from typing import Optional, Tuple

from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.attributes import set_committed_value

from components.core.clock import Clock, utcnow
from components.core.config import get_settings
from components.core.exceptions import (
    InsufficientFundsError,
    InvalidStateTransitionError,
    OtpExpiredError,
    OtpInvalidError,
    PaymentAttemptNotFoundError,
    PaymentProcessingError,
    StudentNotFoundError,
)
from components.core.logging_config import logger
from components.otp.delivery import OtpDelivery, default_delivery, mask_email
from components.otp.service import OtpService
from components.payment import schemas
from components.payment.executor import PaymentExecutor
from components.payment.models import PaymentAttempt
from components.payment.workflow import PaymentState, ensure_transition, transition
from components.student import schemas as student_schemas
from components.student.models import DebtStatus, TuitionDebt
from components.student.repository import StudentRepository
from components.student.service import StudentDebtLookup
from components.transaction.models import Transaction
from components.user.models import User

settings = get_settings()

OTP_CODE_PATTERN = re.compile(r"[0-9]{6}")


class PaymentWorkflowService:
    """
    Drives one PaymentAttempt through lookup, OTP challenge and execution.

    The attempt row is the workflow context; every handler loads it, checks
    the transition, and commits the new state. Expired challenges are
    applied lazily whenever an attempt is loaded.
    """

    def __init__(
        self,
        session: AsyncSession,
        clock: Clock = utcnow,
        delivery: Optional[OtpDelivery] = None,
    ):
        self.session = session
        self.clock = clock
        self.delivery = delivery or default_delivery
        self.lookup = StudentDebtLookup(session)
        self.students = StudentRepository(session)
        self.otp = OtpService(session, clock)
        self.executor = PaymentExecutor(session, clock)

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    async def start(self, payer: User, student_id: str) -> PaymentAttempt:
        """IDLE -> STUDENT_LOOKED_UP for the student's outstanding debt."""
        now = self.clock()
        attempt = PaymentAttempt(
            id=str(uuid.uuid4()),
            payer_id=payer.id,
            state=PaymentState.IDLE,
            created_at=now,
            updated_at=now,
        )
        record = await self.lookup.lookup(student_id)
        if record.tuition.status != DebtStatus.UNPAID:
            raise StudentNotFoundError()

        attempt.student_id = record.student_id
        attempt.debt_id = record.tuition.debt_id
        attempt.amount = record.tuition.amount
        transition(attempt, PaymentState.STUDENT_LOOKED_UP)
        self.session.add(attempt)
        await self.session.commit()

        logger.log_payment_event(attempt.id, "student_looked_up", attempt.state.value,
                                 student_id=attempt.student_id, amount=attempt.amount)
        return attempt

    async def confirm(self, payer: User, payment_id: str) -> PaymentAttempt:
        """STUDENT_LOOKED_UP -> AWAITING_OTP, issuing one challenge."""
        attempt = await self.get(payer, payment_id)
        ensure_transition(attempt.state, PaymentState.AWAITING_OTP)
        if attempt.amount > payer.available_balance:
            logger.log_payment_event(attempt.id, "insufficient_funds", attempt.state.value,
                                     amount=attempt.amount, available_balance=payer.available_balance)
            raise InsufficientFundsError(attempt.amount, payer.available_balance)

        challenge, code = await self.otp.issue(attempt.id, payer.email)
        await self._advance(attempt, PaymentState.AWAITING_OTP)
        await self.session.commit()

        await self.delivery.send(payer.email, code, challenge.expires_at, attempt.id)
        logger.log_payment_event(attempt.id, "otp_issued", attempt.state.value,
                                 expires_at=challenge.expires_at)
        return attempt

    async def verify(self, payer: User, payment_id: str, code: Optional[str]) -> Tuple[PaymentAttempt, Transaction]:
        """
        Check the submitted code and execute the payment.

        AWAITING_OTP -> OTP_VERIFIED -> PAYMENT_PROCESSING -> COMPLETED.
        A wrong code leaves the challenge live; an expired one sends the
        attempt back to STUDENT_LOOKED_UP.
        """
        attempt = await self._load(payer, payment_id)
        if attempt.state != PaymentState.AWAITING_OTP:
            raise OtpInvalidError("No active OTP for this payment")

        challenge = await self.otp.get_live(attempt.id)
        if challenge is None or self.otp.is_expired(challenge):
            await self._expire(attempt)
            raise OtpExpiredError()

        code = (code or "").strip()
        if not OTP_CODE_PATTERN.fullmatch(code):
            raise OtpInvalidError("Please enter a valid 6-digit OTP code")

        if not self.otp.matches(challenge, code):
            if self.otp.attempts_exhausted(challenge):
                await self.otp.discard(attempt.id)
                transition(attempt, PaymentState.STUDENT_LOOKED_UP)
                await self.session.commit()
                logger.log_payment_event(attempt.id, "otp_locked", attempt.state.value)
                raise OtpInvalidError(
                    "Too many invalid codes. Please confirm the payment again.",
                    details={"locked": True},
                )
            attempts = challenge.attempts
            await self.session.commit()
            logger.log_payment_event(attempt.id, "otp_mismatch", attempt.state.value, attempts=attempts)
            raise OtpInvalidError(details={"attempts": attempts})

        # Single use: only the request that deletes the challenge may go on
        if not await self.otp.consume(challenge):
            await self.session.rollback()
            raise OtpInvalidError("No active OTP for this payment")
        await self._advance(attempt, PaymentState.OTP_VERIFIED)
        attempt.otp_verified_at = self.clock()
        await self.session.commit()
        logger.log_payment_event(attempt.id, "otp_verified", attempt.state.value)

        transaction = await self._process(attempt)
        return attempt, transaction

    async def cancel(self, payer: User, payment_id: str) -> PaymentAttempt:
        """
        STUDENT_LOOKED_UP, AWAITING_OTP or OTP_VERIFIED -> IDLE, discarding the challenge.

        Once processing has claimed the attempt the cancel is refused.
        """
        attempt = await self._load(payer, payment_id)
        if attempt.state == PaymentState.IDLE:
            return attempt
        await self._advance(attempt, PaymentState.IDLE)
        await self.otp.discard(attempt.id)
        await self.session.commit()
        logger.log_payment_event(attempt.id, "cancelled", attempt.state.value)
        return attempt

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get(self, payer: User, payment_id: str) -> PaymentAttempt:
        """Load an attempt owned by ``payer``, applying OTP expiry."""
        attempt = await self._load(payer, payment_id)
        if attempt.state == PaymentState.AWAITING_OTP:
            challenge = await self.otp.get_live(attempt.id)
            if challenge is None or self.otp.is_expired(challenge):
                await self._expire(attempt)
        return attempt

    async def describe(self, attempt: PaymentAttempt, message: Optional[str] = None) -> schemas.PaymentAttemptResponse:
        """Client view of an attempt."""
        response = schemas.PaymentAttemptResponse(
            message=message,
            payment_id=attempt.id,
            state=attempt.state,
            failure_reason=attempt.failure_reason,
            transaction_id=attempt.transaction_id,
        )
        if attempt.debt_id is not None:
            debt = await self.session.get(TuitionDebt, attempt.debt_id)
            student = await self.students.get_student(attempt.student_id)
            if debt is not None and student is not None:
                response.student = student_schemas.StudentDebtRecord(
                    student_id=student.student_id,
                    full_name=student.full_name,
                    program=student.program,
                    tuition=student_schemas.TuitionDebt.model_validate(debt),
                )
        if attempt.state == PaymentState.AWAITING_OTP:
            challenge = await self.otp.get_live(attempt.id)
            if challenge is not None:
                response.otp = schemas.OtpChallengeInfo(
                    email=mask_email(challenge.target_email),
                    issued_at=challenge.issued_at,
                    expires_at=challenge.expires_at,
                    ttl_seconds=settings.OTP_TTL_SECONDS,
                    remaining_seconds=self.otp.remaining_seconds(challenge),
                )
        return response

    # ------------------------------------------------------------------
    # Housekeeping
    # ------------------------------------------------------------------

    async def expire_stale_challenges(self) -> int:
        """Return every attempt with an expired challenge to STUDENT_LOOKED_UP."""
        expired = 0
        for payment_id in await self.otp.expired_payment_ids():
            attempt = await self.session.get(PaymentAttempt, payment_id)
            if attempt is None or attempt.state != PaymentState.AWAITING_OTP:
                await self.otp.discard(payment_id)
                await self.session.commit()
                continue
            await self._expire(attempt)
            expired += 1
        return expired

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _load(self, payer: User, payment_id: str) -> PaymentAttempt:
        attempt = await self.session.get(PaymentAttempt, payment_id)
        if attempt is None or attempt.payer_id != payer.id:
            raise PaymentAttemptNotFoundError(payment_id)
        return attempt

    async def _advance(self, attempt: PaymentAttempt, target: PaymentState) -> None:
        """
        Move ``attempt`` to ``target`` only if the stored row still holds the
        state this request read.

        Another request may have moved the attempt since it was loaded, e.g.
        a cancel landing between OTP verification and processing. In that
        case the unit of work is rolled back and InvalidStateTransitionError
        reports the state actually stored.
        """
        current = PaymentState(attempt.state)
        ensure_transition(current, target)
        result = await self.session.execute(
            update(PaymentAttempt)
            .where(PaymentAttempt.id == attempt.id, PaymentAttempt.state == current)
            .values(state=target, updated_at=self.clock())
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            await self.session.rollback()
            await self.session.refresh(attempt)
            stored = PaymentState(attempt.state)
            logger.log_payment_event(attempt.id, "transition_lost", stored.value, wanted=target.value)
            raise InvalidStateTransitionError(stored.value, target.value)
        set_committed_value(attempt, "state", target)

    async def _expire(self, attempt: PaymentAttempt) -> None:
        await self.otp.discard(attempt.id)
        transition(attempt, PaymentState.STUDENT_LOOKED_UP)
        await self.session.commit()
        logger.log_payment_event(attempt.id, "otp_expired", attempt.state.value)

    async def _process(self, attempt: PaymentAttempt) -> Transaction:
        """OTP_VERIFIED -> PAYMENT_PROCESSING -> COMPLETED, or FAILED with nothing written."""
        payment_id = attempt.id
        await self._advance(attempt, PaymentState.PAYMENT_PROCESSING)
        await self.session.commit()

        try:
            transaction = await self.executor.execute(attempt)
            await self.session.commit()
        except (PaymentProcessingError, SQLAlchemyError) as e:
            await self.session.rollback()
            reason = e.message if isinstance(e, PaymentProcessingError) else "Payment could not be recorded"
            logger.error(f"Payment {payment_id} failed: {type(e).__name__}: {reason}",
                         exc_info=isinstance(e, SQLAlchemyError))
            await self._mark_failed(payment_id, reason)
            raise PaymentProcessingError(reason) from e

        logger.log_payment_event(payment_id, "completed", attempt.state.value,
                                 transaction_id=transaction.transaction_id, amount=transaction.amount)
        return transaction

    async def _mark_failed(self, payment_id: str, reason: str) -> None:
        attempt = await self.session.get(PaymentAttempt, payment_id)
        transition(attempt, PaymentState.FAILED)
        attempt.failure_reason = reason
        await self.session.commit()
        logger.log_payment_event(payment_id, "failed", attempt.state.value, reason=reason)
