"""
Unit tests for the payment state machine
"""
from types import SimpleNamespace

import pytest

from components.core.exceptions import InvalidStateTransitionError
from components.payment.workflow import (
    TERMINAL_STATES,
    TRANSITIONS,
    PaymentState,
    can_transition,
    ensure_transition,
    transition,
)


class TestTransitions:

    def test_happy_path(self):
        attempt = SimpleNamespace(state=PaymentState.IDLE)
        path = [
            PaymentState.STUDENT_LOOKED_UP,
            PaymentState.AWAITING_OTP,
            PaymentState.OTP_VERIFIED,
            PaymentState.PAYMENT_PROCESSING,
            PaymentState.COMPLETED,
        ]
        for target in path:
            transition(attempt, target)
        assert attempt.state == PaymentState.COMPLETED

    def test_transition_returns_previous_state(self):
        attempt = SimpleNamespace(state=PaymentState.AWAITING_OTP)
        assert transition(attempt, PaymentState.STUDENT_LOOKED_UP) == PaymentState.AWAITING_OTP

    @pytest.mark.parametrize('state', sorted(TERMINAL_STATES))
    def test_terminal_states_are_final(self, state):
        for target in PaymentState:
            assert not can_transition(state, target)

    def test_payment_cannot_skip_otp(self):
        with pytest.raises(InvalidStateTransitionError) as exc_info:
            ensure_transition(PaymentState.STUDENT_LOOKED_UP, PaymentState.PAYMENT_PROCESSING)
        assert exc_info.value.details == {
            'current_state': 'STUDENT_LOOKED_UP',
            'target_state': 'PAYMENT_PROCESSING',
        }

    def test_processing_cannot_be_cancelled(self):
        assert not can_transition(PaymentState.PAYMENT_PROCESSING, PaymentState.IDLE)

    def test_otp_expiry_returns_to_lookup(self):
        assert can_transition(PaymentState.AWAITING_OTP, PaymentState.STUDENT_LOOKED_UP)

    def test_failed_state_keeps_attempt_unchanged(self):
        attempt = SimpleNamespace(state=PaymentState.COMPLETED)
        with pytest.raises(InvalidStateTransitionError):
            transition(attempt, PaymentState.IDLE)
        assert attempt.state == PaymentState.COMPLETED

    def test_every_state_has_an_entry(self):
        assert set(TRANSITIONS) == set(PaymentState)

    def test_accepts_stored_string_values(self):
        assert can_transition('AWAITING_OTP', PaymentState.OTP_VERIFIED)
