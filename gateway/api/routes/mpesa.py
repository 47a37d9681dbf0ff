from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Query

from gateway.core.dependencies import get_payment_service
from gateway.schemas.payment import PaymentStatusResponse, StkPushRequest, StkPushResponse
from gateway.services.payment_service import PaymentService

router = APIRouter(tags=["M-Pesa"])


@router.post("/mpesa", response_model=StkPushResponse, response_model_exclude_none=True)
async def stk_push(
    payload: StkPushRequest,
    service: Annotated[PaymentService, Depends(get_payment_service)],
) -> StkPushResponse:
    """Start an M-Pesa STK push.

    The phone must be ``07XXXXXXXX`` or ``254XXXXXXXXX`` and is forwarded as
    ``254XXXXXXXXX`` (no plus). Gateway refusals map to 400, an unreachable
    gateway to 502.
    """
    return await service.stk_push(
        phone=payload.phone,
        amount=payload.amount,
        account=payload.account,
        description=payload.description,
    )


@router.get("/mpesa", response_model=PaymentStatusResponse)
async def payment_status(
    service: Annotated[PaymentService, Depends(get_payment_service)],
    checkout_request_id: Annotated[str | None, Query(alias="checkoutRequestId")] = None,
) -> PaymentStatusResponse:
    """Look up an STK push by checkout request id."""
    return await service.check_status(checkout_request_id)
