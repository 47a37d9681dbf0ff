from __future__ import annotations

from gateway.api.routes.health import router as health_router
from gateway.api.routes.mpesa import router as mpesa_router
from gateway.api.routes.otp import router as otp_router

__all__ = ["health_router", "mpesa_router", "otp_router"]
