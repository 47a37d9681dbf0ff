"""Application factory for the FastAPI app.

Builds the app and the state it owns: one OTP registry, one rate limiter,
the SMS sender and the M-Pesa client. Nothing stateful lives at module level.
"""

from __future__ import annotations

import time
from contextlib import asynccontextmanager
from typing import AsyncIterator, Callable

from fastapi import FastAPI

from gateway.adapters.payments.mpesa_client import MpesaClient
from gateway.adapters.rate_limit.base import AbstractRateLimiter
from gateway.adapters.rate_limit.in_memory import InMemoryFixedWindowRateLimiter
from gateway.adapters.sms.base import AbstractSmsSender
from gateway.adapters.sms.factory import create_sms_sender
from gateway.api.routes import health_router, mpesa_router, otp_router
from gateway.core.config import Settings, settings as default_settings
from gateway.core.exception_handlers import setup_exception_handlers
from gateway.core.logging import configure_logging
from gateway.core.middleware import rate_limit_middleware, request_id_middleware
from gateway.core.openapi import apply_openapi_customizations
from gateway.core.sweeper import StoreSweeper
from gateway.services.otp_registry import OtpRegistry
from gateway.services.otp_service import OtpService
from gateway.services.payment_service import PaymentService


@asynccontextmanager
async def _lifespan(app: FastAPI) -> AsyncIterator[None]:
    sweeper: StoreSweeper | None = app.state.sweeper
    if sweeper is not None:
        await sweeper.start()
    try:
        yield
    finally:
        if sweeper is not None:
            await sweeper.stop()
        await app.state.otp_service.sms_sender.aclose()
        await app.state.payment_service.client.aclose()


def create_app(
    *,
    config: Settings | None = None,
    sms_sender: AbstractSmsSender | None = None,
    mpesa_client: MpesaClient | None = None,
    rate_limiter: AbstractRateLimiter | None = None,
    clock: Callable[[], float] = time.time,
) -> FastAPI:
    """Create and configure the FastAPI application instance.

    Args:
        config: Settings to build from; defaults to the global settings.
        sms_sender: Optional SMS sender; defaults to the configured provider.
        mpesa_client: Optional M-Pesa client; defaults to the configured gateway.
        rate_limiter: Optional limiter; defaults to an in-memory fixed window.
        clock: Time source shared by the OTP registry and the default limiter.

    Returns:
        Configured FastAPI app with state, middleware, handlers and routers.
    """
    cfg = config or default_settings

    # Logging first so subsequent init logs are formatted as desired
    configure_logging(cfg.log)

    app = FastAPI(
        title="Alpha Energy Gateway",
        description=(
            "Phone verification (one-time codes by SMS) and M-Pesa STK push proxy "
            "for the Alpha Energy fuel station dashboard. Every route except "
            "/health is rate limited per client and path."
        ),
        version="0.1.0",
        lifespan=_lifespan,
    )

    registry = OtpRegistry(
        code_length=cfg.otp.code_length,
        ttl_seconds=cfg.otp.ttl_seconds,
        max_attempts=cfg.otp.max_attempts,
        clock=clock,
    )
    limiter = rate_limiter or InMemoryFixedWindowRateLimiter(
        limit=cfg.rate_limit.requests,
        window_seconds=cfg.rate_limit.window_seconds,
        clock=clock,
    )

    app.state.settings = cfg
    app.state.otp_registry = registry
    app.state.rate_limiter = limiter
    app.state.otp_service = OtpService(
        registry=registry,
        sms_sender=sms_sender or create_sms_sender(cfg.sms),
        brand_name=cfg.sms.brand_name,
    )
    app.state.payment_service = PaymentService(
        client=mpesa_client
        or MpesaClient(base_url=cfg.mpesa.base_url, timeout_seconds=cfg.mpesa.timeout_seconds),
        default_description=cfg.mpesa.default_description,
    )
    app.state.sweeper = (
        StoreSweeper(
            {"otp": registry, "rate_limit": limiter},
            interval=cfg.sweep.interval_seconds,
        )
        if cfg.sweep.interval_seconds > 0
        else None
    )

    # Middleware (last registered is outermost)
    app.middleware("http")(rate_limit_middleware)
    app.middleware("http")(request_id_middleware)

    setup_exception_handlers(app)

    app.include_router(otp_router, prefix="/api")
    app.include_router(mpesa_router, prefix="/api")
    app.include_router(health_router)

    apply_openapi_customizations(app)

    return app
