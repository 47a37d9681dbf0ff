"""Payment gateway adapters."""

from gateway.adapters.payments.mpesa_client import MpesaClient

__all__ = ["MpesaClient"]
