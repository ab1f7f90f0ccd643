"""Server side OTP issuer."""

from datetime import datetime, timedelta
from typing import List, Optional, Tuple

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from components.core.clock import Clock, utcnow
from components.core.config import get_settings
from components.core.security import (
    generate_challenge_id,
    generate_otp_code,
    hash_otp_code,
    verify_otp_code,
)
from components.otp.models import OtpChallenge

settings = get_settings()


class OtpService:
    """
    Issues, checks and destroys OTP challenges.

    Methods only flush; the caller owns the transaction.
    """

    def __init__(self, session: AsyncSession, clock: Clock = utcnow):
        self.session = session
        self.clock = clock

    async def issue(self, payment_id: str, email: str) -> Tuple[OtpChallenge, str]:
        """Create the single live challenge for a payment, replacing any old one."""
        await self.discard(payment_id)

        code = generate_otp_code()
        challenge_id = generate_challenge_id()
        issued_at = self.clock()
        challenge = OtpChallenge(
            id=challenge_id,
            payment_id=payment_id,
            target_email=email,
            code_hash=hash_otp_code(challenge_id, code),
            issued_at=issued_at,
            expires_at=issued_at + timedelta(seconds=settings.OTP_TTL_SECONDS),
            attempts=0,
        )
        self.session.add(challenge)
        await self.session.flush()
        return challenge, code

    async def get_live(self, payment_id: str) -> Optional[OtpChallenge]:
        result = await self.session.execute(
            select(OtpChallenge).where(OtpChallenge.payment_id == payment_id)
        )
        return result.scalar_one_or_none()

    def is_expired(self, challenge: OtpChallenge, now: Optional[datetime] = None) -> bool:
        """A challenge is usable only strictly before its expiry."""
        return (now or self.clock()) >= challenge.expires_at

    def remaining_seconds(self, challenge: OtpChallenge) -> int:
        return max(0, int((challenge.expires_at - self.clock()).total_seconds()))

    def matches(self, challenge: OtpChallenge, code: str) -> bool:
        """Compare a code against the challenge, counting failed attempts."""
        if verify_otp_code(challenge.id, code, challenge.code_hash):
            return True
        challenge.attempts = (challenge.attempts or 0) + 1
        return False

    def attempts_exhausted(self, challenge: OtpChallenge) -> bool:
        limit = settings.OTP_MAX_ATTEMPTS
        return limit is not None and challenge.attempts >= limit

    async def consume(self, challenge: OtpChallenge) -> bool:
        """Delete the challenge; True only for the caller that actually removed it."""
        result = await self.session.execute(
            delete(OtpChallenge)
            .where(OtpChallenge.id == challenge.id)
        )
        return result.rowcount == 1

    async def discard(self, payment_id: str) -> None:
        await self.session.execute(
            delete(OtpChallenge)
            .where(OtpChallenge.payment_id == payment_id)
        )

    async def expired_payment_ids(self) -> List[str]:
        """Payments whose challenge has run out."""
        result = await self.session.execute(
            select(OtpChallenge.payment_id).where(OtpChallenge.expires_at <= self.clock())
        )
        return [row[0] for row in result.all()]
