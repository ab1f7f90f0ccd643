"""Credential verification and session handling."""

from datetime import timedelta
from typing import Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from components.core.clock import Clock, utcnow
from components.core.config import get_settings
from components.core.exceptions import AuthError, ServerError, SessionExpiredError, ValidationError
from components.core.logging_config import logger
from components.core.security import (
    DUMMY_PASSWORD_HASH,
    generate_session_token,
    hash_token,
    verify_password,
)
from components.user.models import User
from components.user.repository import AuthSessionRepository, UserRepository

settings = get_settings()

INVALID_CREDENTIALS = "Invalid username or password"


class CredentialVerifier:
    """Checks username/password pairs and manages opaque session tokens."""

    def __init__(self, session: AsyncSession, clock: Clock = utcnow):
        self.session = session
        self.clock = clock
        self.users = UserRepository(session)
        self.sessions = AuthSessionRepository(session)

    async def verify(self, username: Optional[str], password: Optional[str]) -> Tuple[User, str]:
        """
        Verify credentials and open a session.

        Returns the user and a fresh 64 hex char token. Raises ValidationError
        for missing input, AuthError for any credential mismatch and
        ServerError when storage is unavailable.
        """
        username = (username or "").strip()
        if not username or not password or not password.strip():
            raise ValidationError("Username and password are required")

        try:
            user = await self.users.get_by_username(username)
            # Hash even on a miss so response time does not reveal the username
            stored_hash = user.password_hash if user else DUMMY_PASSWORD_HASH
            if not verify_password(password, stored_hash) or user is None:
                logger.log_auth_event("login", False, username=username)
                raise AuthError(INVALID_CREDENTIALS)

            token = generate_session_token()
            now = self.clock()
            await self.sessions.create(
                user_id=user.id,
                token_hash=hash_token(token),
                created_at=now,
                expires_at=now + timedelta(minutes=settings.SESSION_TTL_MINUTES),
            )
        except SQLAlchemyError as e:
            logger.error(f"Login storage failure: {type(e).__name__}", exc_info=True)
            raise ServerError() from e

        logger.log_auth_event("login", True, username=username, user_id=user.id)
        return user, token

    async def authenticate(self, token: str) -> User:
        """Resolve a bearer token to its user."""
        auth_session = await self.sessions.get_active(hash_token(token), self.clock())
        if auth_session is None:
            raise SessionExpiredError()
        user = await self.users.get_by_id(auth_session.user_id)
        if user is None:
            raise SessionExpiredError()
        return user

    async def logout(self, token: str) -> bool:
        revoked = await self.sessions.revoke(hash_token(token), self.clock())
        logger.log_auth_event("logout", revoked)
        return revoked
