"""Alpha Energy gateway: phone verification and M-Pesa proxy service."""
