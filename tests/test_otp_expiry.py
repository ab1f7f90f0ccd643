"""
Tests for OTP challenge lifetime and the background expiry sweep
"""
import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from components.otp.models import OtpChallenge
from components.otp.service import OtpService
from components.payment.service import PaymentWorkflowService
from components.payment.workflow import PaymentState
from components.student.models import Student
from components.user.models import User


@pytest.fixture
def workflow(db_session: AsyncSession, clock, outbox) -> PaymentWorkflowService:
    return PaymentWorkflowService(db_session, clock=clock, delivery=outbox)


class TestOtpService:

    @pytest.mark.asyncio
    async def test_reissue_replaces_old_challenge(self, db_session: AsyncSession, clock,
                                                  workflow: PaymentWorkflowService, alice: User, student: Student):
        attempt = await workflow.start(alice, '523K0077')
        otp = OtpService(db_session, clock)

        first, _ = await otp.issue(attempt.id, alice.email)
        second, _ = await otp.issue(attempt.id, alice.email)
        await db_session.commit()

        challenges = (await db_session.execute(select(OtpChallenge))).scalars().all()
        assert [challenge.id for challenge in challenges] == [second.id]
        assert first.id != second.id

    @pytest.mark.asyncio
    async def test_consume_succeeds_once(self, db_session: AsyncSession, clock,
                                         workflow: PaymentWorkflowService, alice: User, student: Student):
        attempt = await workflow.start(alice, '523K0077')
        otp = OtpService(db_session, clock)
        challenge, _ = await otp.issue(attempt.id, alice.email)

        assert await otp.consume(challenge) is True
        assert await otp.consume(challenge) is False

    @pytest.mark.asyncio
    async def test_expiry_is_inclusive(self, db_session: AsyncSession, clock,
                                       workflow: PaymentWorkflowService, alice: User, student: Student):
        attempt = await workflow.start(alice, '523K0077')
        otp = OtpService(db_session, clock)
        challenge, _ = await otp.issue(attempt.id, alice.email)

        clock.advance(299)
        assert not otp.is_expired(challenge)
        clock.advance(1)
        assert otp.is_expired(challenge)
        assert otp.remaining_seconds(challenge) == 0


class TestSweep:

    @pytest.mark.asyncio
    async def test_sweep_returns_attempts_to_lookup(self, db_session: AsyncSession, clock,
                                                    workflow: PaymentWorkflowService, alice: User,
                                                    student: Student):
        attempt = await workflow.start(alice, '523K0077')
        await workflow.confirm(alice, attempt.id)

        assert await workflow.expire_stale_challenges() == 0

        clock.advance(300)
        assert await workflow.expire_stale_challenges() == 1
        assert attempt.state == PaymentState.STUDENT_LOOKED_UP
        assert (await db_session.execute(select(OtpChallenge))).first() is None

    @pytest.mark.asyncio
    async def test_sweep_leaves_other_attempts_alone(self, clock, workflow: PaymentWorkflowService,
                                                     alice: User, student: Student):
        attempt = await workflow.start(alice, '523K0077')

        clock.advance(3600)
        assert await workflow.expire_stale_challenges() == 0
        assert attempt.state == PaymentState.STUDENT_LOOKED_UP
