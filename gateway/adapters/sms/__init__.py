"""SMS adapter layer - abstracts over text message providers."""

from gateway.adapters.sms.africastalking_client import AfricasTalkingSmsSender
from gateway.adapters.sms.base import AbstractSmsSender, SmsResult
from gateway.adapters.sms.console import ConsoleSmsSender
from gateway.adapters.sms.factory import create_sms_sender
from gateway.adapters.sms.twilio_client import TwilioSmsSender

__all__ = [
    "AbstractSmsSender",
    "AfricasTalkingSmsSender",
    "ConsoleSmsSender",
    "SmsResult",
    "TwilioSmsSender",
    "create_sms_sender",
]
