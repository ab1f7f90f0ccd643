"""Authentication endpoints for login, logout and the current user."""

from fastapi import APIRouter, Depends
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession

from components.core.clock import Clock, get_clock
from components.core.exceptions import AuthError
from components.core.init_db import get_db
from components.core.logging_config import set_user_id
from components.core.schemas import MessageResponse
from components.user import schemas
from components.user.models import User
from components.user.service import CredentialVerifier

router = APIRouter(tags=["authentication"])
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="login")


async def get_current_user(
    db: AsyncSession = Depends(get_db),
    token: str = Depends(oauth2_scheme),
    clock: Clock = Depends(get_clock),
) -> User:
    """Get current user from the session token."""
    user = await CredentialVerifier(db, clock).authenticate(token)
    set_user_id(str(user.id))
    return user


@router.post("/login", response_model=schemas.LoginResponse)
async def login(
    credentials: schemas.LoginRequest,
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
) -> schemas.LoginResponse:
    """
    Check username and password and open a session.

    A wrong username and a wrong password give the same answer, with
    HTTP 200 and ``success: false``.
    """
    verifier = CredentialVerifier(db, clock)
    try:
        user, token = await verifier.verify(credentials.username, credentials.password)
    except AuthError as e:
        return schemas.LoginResponse(success=False, message=e.message)

    return schemas.LoginResponse(
        success=True,
        message="Login successful",
        user=schemas.User.model_validate(user),
        token=token,
    )


@router.post("/logout", response_model=MessageResponse)
async def logout(
    db: AsyncSession = Depends(get_db),
    token: str = Depends(oauth2_scheme),
    clock: Clock = Depends(get_clock),
) -> MessageResponse:
    """Revoke the current session token."""
    await CredentialVerifier(db, clock).logout(token)
    return MessageResponse(message="Logged out")


@router.get("/me", response_model=schemas.User)
async def read_current_user(current_user: User = Depends(get_current_user)):
    """Current user with the balance as stored on the server."""
    return current_user
