"""Security utilities for password hashing, session tokens and OTP codes."""

import hashlib
import hmac
import os
import secrets
from typing import Optional

from components.core.config import get_settings

settings = get_settings()

SESSION_TOKEN_BYTES = 32  # 256 bits, rendered as 64 hex chars
OTP_LENGTH = 6


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash."""
    try:
        salt, _ = hashed_password.split(':', 1)
    except ValueError:
        return False
    candidate = get_password_hash(plain_password, salt)
    return hmac.compare_digest(candidate.encode(), hashed_password.encode())


def get_password_hash(password: str, salt: Optional[str] = None) -> str:
    """Generate password hash using salted PBKDF2-SHA256."""
    if salt is None:
        salt = os.urandom(16).hex()
    digest = hashlib.pbkdf2_hmac(
        "sha256",
        password.encode(),
        salt.encode(),
        settings.PASSWORD_HASH_ITERATIONS,
    )
    return f"{salt}:{digest.hex()}"


# Verified against unknown usernames so a miss costs the same as a mismatch
DUMMY_PASSWORD_HASH = get_password_hash(secrets.token_hex(16))


def generate_session_token() -> str:
    """Create a new opaque session token."""
    return secrets.token_hex(SESSION_TOKEN_BYTES)


def hash_token(token: str) -> str:
    """Digest stored in place of a raw token."""
    return hashlib.sha256(token.encode()).hexdigest()


def generate_otp_code() -> str:
    """Random numeric one-time passcode."""
    return f"{secrets.randbelow(10 ** OTP_LENGTH):0{OTP_LENGTH}d}"


def generate_challenge_id() -> str:
    return secrets.token_urlsafe(24)


def hash_otp_code(challenge_id: str, code: str) -> str:
    """Bind an OTP code to its challenge before storing it."""
    return hmac.new(challenge_id.encode(), code.encode(), hashlib.sha256).hexdigest()


def verify_otp_code(challenge_id: str, code: str, code_hash: str) -> bool:
    return hmac.compare_digest(hash_otp_code(challenge_id, code), code_hash)
