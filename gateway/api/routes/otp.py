from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from gateway.core.config import Settings
from gateway.core.dependencies import get_app_settings, get_otp_service
from gateway.core.errors import DispatchAppError, ValidationAppError
from gateway.core.exception_handlers import otp_failure_response
from gateway.schemas.otp import OtpActionRequest, OtpActionResponse, OtpErrorResponse
from gateway.services.otp_service import SEND_ACTION, OtpService, validate_action

router = APIRouter(tags=["OTP"])


@router.post(
    "/send-otp",
    response_model=OtpActionResponse,
    response_model_exclude_none=True,
    responses={
        400: {"model": OtpErrorResponse, "description": "Invalid input or failed verification."},
        500: {"model": OtpErrorResponse, "description": "SMS provider rejected the message."},
    },
)
async def otp_action(
    payload: OtpActionRequest,
    service: Annotated[OtpService, Depends(get_otp_service)],
    config: Annotated[Settings, Depends(get_app_settings)],
) -> OtpActionResponse | JSONResponse:
    """Send or verify a one-time code.

    ``action="send"`` issues a new code (replacing any pending one) and texts
    it. ``action="verify"`` checks ``otp`` against the pending code; three
    wrong attempts discard it.

    Verification failures (not found, expired, mismatch, too many attempts)
    are rendered by the global OTP error handler.
    """
    try:
        if not payload.phone:
            raise ValidationAppError(
                code="phone_required",
                message="Phone number is required",
                details={"field": "phone"},
            )
        action = validate_action(payload.action)

        if action == SEND_ACTION:
            outcome = await service.send(payload.phone)
            expose = config.app.expose_otp_in_response and not config.is_production
            return OtpActionResponse(
                message=f"OTP sent to {outcome.masked_phone}",
                provider=outcome.provider,
                otp=outcome.code if expose else None,
            )

        service.verify(payload.phone, payload.otp)
        return OtpActionResponse(message="OTP verified successfully")
    except (ValidationAppError, DispatchAppError) as exc:
        return otp_failure_response(exc)
