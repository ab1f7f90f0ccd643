"""Repository for user and session operations."""

from datetime import datetime
from typing import Optional
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from components.user.models import User, AuthSession
from components.core.security import get_password_hash


class UserRepository:
    """Repository for user operations."""

    def __init__(self, session: AsyncSession):
        """Initialize repository with database session."""
        self.session = session

    async def create(
        self,
        username: str,
        password: str,
        full_name: str,
        email: str,
        available_balance: int = 0,
        phone_number: Optional[str] = None,
        program: Optional[str] = None,
        student_id: Optional[str] = None,
    ) -> User:
        """Create a new user."""
        db_user = User(
            username=username,
            password_hash=get_password_hash(password),
            full_name=full_name,
            email=email,
            available_balance=available_balance,
            phone_number=phone_number,
            program=program,
            student_id=student_id,
        )
        self.session.add(db_user)
        await self.session.commit()
        await self.session.refresh(db_user)
        return db_user

    async def get_by_id(self, user_id: int) -> Optional[User]:
        """Get user by ID."""
        result = await self.session.execute(
            select(User).where(User.id == user_id)
        )
        return result.scalar_one_or_none()

    async def get_by_id_for_update(self, user_id: int) -> Optional[User]:
        """Get user by ID, locking the row until the transaction ends."""
        result = await self.session.execute(
            select(User)
            .where(User.id == user_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def get_by_username(self, username: str) -> Optional[User]:
        """Get user by exact username."""
        result = await self.session.execute(
            select(User).where(User.username == username)
        )
        return result.scalar_one_or_none()


class AuthSessionRepository:
    """Repository for login sessions."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, user_id: int, token_hash: str, created_at: datetime,
                     expires_at: datetime) -> AuthSession:
        auth_session = AuthSession(
            user_id=user_id,
            token_hash=token_hash,
            created_at=created_at,
            expires_at=expires_at,
        )
        self.session.add(auth_session)
        await self.session.commit()
        return auth_session

    async def get_active(self, token_hash: str, now: datetime) -> Optional[AuthSession]:
        """Get an unrevoked, unexpired session by token digest."""
        result = await self.session.execute(
            select(AuthSession).where(
                AuthSession.token_hash == token_hash,
                AuthSession.revoked_at.is_(None),
                AuthSession.expires_at > now,
            )
        )
        return result.scalar_one_or_none()

    async def revoke(self, token_hash: str, now: datetime) -> bool:
        result = await self.session.execute(
            update(AuthSession)
            .where(AuthSession.token_hash == token_hash, AuthSession.revoked_at.is_(None))
            .values(revoked_at=now)
        )
        await self.session.commit()
        return result.rowcount > 0
