"""
Unit tests for OTP delivery channels
"""
from datetime import datetime

import pytest

from components.otp.delivery import LogOtpDelivery, OtpDelivery, get_otp_delivery, mask_email


class TestChannels:

    def test_base_channel_cannot_be_used_directly(self):
        with pytest.raises(TypeError):
            OtpDelivery()

    def test_channel_without_send_is_rejected(self):
        class Silent(OtpDelivery):
            pass

        with pytest.raises(TypeError):
            Silent()

    @pytest.mark.asyncio
    async def test_default_channel_sends(self):
        delivery = get_otp_delivery()

        assert isinstance(delivery, LogOtpDelivery)
        assert isinstance(delivery, OtpDelivery)
        await delivery.send('alice@example.com', '123456', datetime(2025, 9, 28, 10, 5), 'payment-1')


class TestMaskEmail:

    def test_long_local_part(self):
        assert mask_email('alice@example.com') == 'a***e@example.com'

    def test_short_local_part(self):
        assert mask_email('al@example.com') == 'a*@example.com'
