"""Out-of-band delivery of one-time passcodes."""

from abc import ABC, abstractmethod
from datetime import datetime

from components.core.config import get_settings
from components.core.logging_config import logger

settings = get_settings()


def mask_email(email: str) -> str:
    """a***e@example.com style masking for logs and responses."""
    local, _, domain = email.partition("@")
    if len(local) <= 2:
        masked = local[:1] + "*"
    else:
        masked = f"{local[0]}{'*' * (len(local) - 2)}{local[-1]}"
    return f"{masked}@{domain}" if domain else masked


class OtpDelivery(ABC):
    """Channel that hands a code to the payer."""

    @abstractmethod
    async def send(self, email: str, code: str, expires_at: datetime, payment_id: str) -> None:
        ...


class LogOtpDelivery(OtpDelivery):
    """Writes the delivery to the log instead of sending mail."""

    async def send(self, email: str, code: str, expires_at: datetime, payment_id: str) -> None:
        logger.info(
            f"OTP sent to {mask_email(email)} for payment {payment_id}",
            extra={"event_type": "otp_sent", "payment_id": payment_id, "expires_at": expires_at},
        )
        if settings.OTP_LOG_CODES:
            logger.warning(f"OTP code for payment {payment_id}: {code}")


default_delivery = LogOtpDelivery()


def get_otp_delivery() -> OtpDelivery:
    """FastAPI dependency returning the configured delivery channel."""
    return default_delivery
