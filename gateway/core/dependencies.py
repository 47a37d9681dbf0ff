"""FastAPI dependencies resolving per-app state.

Stores and clients are built once in create_app() and live on app.state;
routes reach them only through these functions.
"""

from __future__ import annotations

from fastapi import Request

from gateway.core.config import Settings
from gateway.services.otp_service import OtpService
from gateway.services.payment_service import PaymentService


def get_otp_service(request: Request) -> OtpService:
    return request.app.state.otp_service


def get_payment_service(request: Request) -> PaymentService:
    return request.app.state.payment_service


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings
