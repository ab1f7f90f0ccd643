"""
Exceptions raised by the tuition payment service.

Every error carries a machine readable ``code`` and the HTTP status the API
layer answers with. The API turns them into the common error envelope
``{"success": false, "message": ..., "code": ..., "details": ...}``.

Usage:
    from components.core.exceptions import StudentNotFoundError

    if record is None:
        raise StudentNotFoundError()
"""

from typing import Any, Dict, Optional


class TuitionPayError(Exception):
    """Base exception for all service errors"""

    status_code = 500

    def __init__(
        self,
        message: str,
        code: str = "INTERNAL_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": False,
            "message": self.message,
            "code": self.code,
            "details": self.details
        }


# ============================================
# Input & authentication errors
# ============================================

class ValidationError(TuitionPayError):
    """Missing or malformed input, rejected before any lookup"""

    status_code = 400

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code="VALIDATION_ERROR", details=details)


class AuthError(TuitionPayError):
    """Invalid credentials or session"""

    status_code = 401

    def __init__(self, message: str = "Invalid username or password"):
        super().__init__(message, code="AUTH_FAILED")


class SessionExpiredError(AuthError):
    """Session token unknown, revoked or expired"""

    def __init__(self):
        super().__init__("Session is invalid or has expired")
        self.code = "SESSION_INVALID"


# ============================================
# Resource errors (404-type)
# ============================================

class NotFoundError(TuitionPayError):
    """Base class for not found errors"""

    status_code = 404

    def __init__(self, message: str, code: str = "NOT_FOUND"):
        super().__init__(message, code=code)


class StudentNotFoundError(NotFoundError):
    """No student, or no outstanding tuition for the student"""

    def __init__(self):
        super().__init__(
            "Student ID not found or no pending tuition debt",
            code="STUDENT_NOT_FOUND"
        )


class TransactionNotFoundError(NotFoundError):
    def __init__(self, transaction_id: str):
        super().__init__(
            f"Transaction '{transaction_id}' not found",
            code="TRANSACTION_NOT_FOUND"
        )


class PaymentAttemptNotFoundError(NotFoundError):
    def __init__(self, payment_id: str):
        super().__init__(
            f"Payment '{payment_id}' not found",
            code="PAYMENT_NOT_FOUND"
        )


# ============================================
# Payment workflow errors
# ============================================

class InsufficientFundsError(TuitionPayError):
    """Debt amount exceeds the payer's available balance"""

    status_code = 400

    def __init__(self, amount: int, available_balance: int):
        super().__init__(
            "Insufficient balance. Please top up your account.",
            code="INSUFFICIENT_FUNDS",
            details={"amount": amount, "available_balance": available_balance}
        )


class OtpInvalidError(TuitionPayError):
    """Submitted code is malformed or does not match the live challenge"""

    status_code = 400

    def __init__(self, message: str = "Invalid OTP code", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code="OTP_INVALID", details=details)


class OtpExpiredError(TuitionPayError):
    """Challenge expired before it was verified"""

    status_code = 400

    def __init__(self):
        super().__init__(
            "OTP has expired. Please request a new one.",
            code="OTP_EXPIRED"
        )


class InvalidStateTransitionError(TuitionPayError):
    """Workflow operation not allowed in the attempt's current state"""

    status_code = 409

    def __init__(self, current: str, target: str):
        super().__init__(
            f"Cannot move payment from {current} to {target}",
            code="INVALID_STATE",
            details={"current_state": current, "target_state": target}
        )


class PaymentProcessingError(TuitionPayError):
    """Payment execution failed; nothing was debited"""

    status_code = 500

    def __init__(self, message: str = "Payment processing failed. Please try again."):
        super().__init__(message, code="PAYMENT_FAILED")


# ============================================
# Infrastructure errors
# ============================================

class ServerError(TuitionPayError):
    """Storage or connectivity failure. Internal detail is never exposed."""

    status_code = 500

    def __init__(self, message: str = "Server error. Please try again later."):
        super().__init__(message, code="SERVER_ERROR")
