"""Factory for choosing the SMS provider from settings."""

from gateway.adapters.sms.africastalking_client import AfricasTalkingSmsSender
from gateway.adapters.sms.base import AbstractSmsSender
from gateway.adapters.sms.console import ConsoleSmsSender
from gateway.adapters.sms.twilio_client import TwilioSmsSender
from gateway.core.config import SmsSettings, settings


def create_sms_sender(sms_settings: SmsSettings | None = None) -> AbstractSmsSender:
    """Instantiate the SMS sender for the configured provider.

    Twilio wins when all three of its credentials are present, then
    Africa's Talking when an API key is present. Without either, messages are
    only logged.

    Args:
        sms_settings: Optional SMS settings; defaults to global settings.

    Returns:
        AbstractSmsSender: Configured sender instance.
    """
    cfg = sms_settings or settings.sms

    if cfg.twilio_account_sid and cfg.twilio_auth_token and cfg.twilio_phone_number:
        return TwilioSmsSender(
            account_sid=cfg.twilio_account_sid,
            auth_token=cfg.twilio_auth_token,
            from_number=cfg.twilio_phone_number,
            timeout_seconds=cfg.timeout_seconds,
        )

    if cfg.africastalking_api_key:
        return AfricasTalkingSmsSender(
            api_key=cfg.africastalking_api_key,
            username=cfg.africastalking_username,
            sender_id=cfg.africastalking_sender_id,
            timeout_seconds=cfg.timeout_seconds,
        )

    return ConsoleSmsSender()
