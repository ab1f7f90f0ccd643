"""States and allowed transitions of the payment confirmation workflow."""

import enum
from typing import Dict, FrozenSet

from components.core.exceptions import InvalidStateTransitionError


class PaymentState(str, enum.Enum):
    IDLE = "IDLE"
    STUDENT_LOOKED_UP = "STUDENT_LOOKED_UP"
    AWAITING_OTP = "AWAITING_OTP"
    OTP_VERIFIED = "OTP_VERIFIED"
    PAYMENT_PROCESSING = "PAYMENT_PROCESSING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


TERMINAL_STATES: FrozenSet[PaymentState] = frozenset({PaymentState.COMPLETED, PaymentState.FAILED})

TRANSITIONS: Dict[PaymentState, FrozenSet[PaymentState]] = {
    PaymentState.IDLE: frozenset({PaymentState.STUDENT_LOOKED_UP}),
    PaymentState.STUDENT_LOOKED_UP: frozenset({PaymentState.AWAITING_OTP, PaymentState.IDLE}),
    # Back to STUDENT_LOOKED_UP on expiry or attempt lockout
    PaymentState.AWAITING_OTP: frozenset({
        PaymentState.OTP_VERIFIED,
        PaymentState.STUDENT_LOOKED_UP,
        PaymentState.IDLE,
    }),
    PaymentState.OTP_VERIFIED: frozenset({PaymentState.PAYMENT_PROCESSING, PaymentState.IDLE}),
    PaymentState.PAYMENT_PROCESSING: frozenset({PaymentState.COMPLETED, PaymentState.FAILED}),
    PaymentState.COMPLETED: frozenset(),
    PaymentState.FAILED: frozenset(),
}


def can_transition(current: PaymentState, target: PaymentState) -> bool:
    return target in TRANSITIONS[PaymentState(current)]


def ensure_transition(current: PaymentState, target: PaymentState) -> None:
    """Raise InvalidStateTransitionError unless current -> target is allowed."""
    if not can_transition(current, target):
        raise InvalidStateTransitionError(PaymentState(current).value, PaymentState(target).value)


def transition(attempt, target: PaymentState) -> PaymentState:
    """Move a workflow context object to ``target``; returns the previous state."""
    previous = PaymentState(attempt.state)
    ensure_transition(previous, target)
    attempt.state = target
    return previous
