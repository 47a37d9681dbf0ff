"""M-Pesa STK push orchestration and response shaping."""

from __future__ import annotations

import logging
import math
import time
from typing import Any

from gateway.adapters.payments.mpesa_client import MpesaClient
from gateway.core.errors import PaymentDeclinedError, ValidationAppError
from gateway.schemas.payment import PaymentStatusResponse, StkPushResponse
from gateway.utils.phone import mask_phone, normalize_stk_phone

logger = logging.getLogger(__name__)

MIN_AMOUNT_KES = 1


def _first_present(data: dict[str, Any], *keys: str) -> Any:
    for key in keys:
        value = data.get(key)
        if value is not None:
            return value
    return None


def interpret_result_code(data: dict[str, Any]) -> str:
    """Map the gateway status body to completed/pending/failed.

    Only an integer resultCode of 0 is completed and only an explicit null is
    pending. A missing key, the string "0" and every other code are failed.
    """
    if "resultCode" not in data:
        return "failed"
    result_code = data["resultCode"]
    if result_code is None:
        return "pending"
    if isinstance(result_code, int) and not isinstance(result_code, bool) and result_code == 0:
        return "completed"
    return "failed"


class PaymentService:
    """Validates STK push requests and forwards them to the gateway."""

    def __init__(self, *, client: MpesaClient, default_description: str = "Fuel Purchase") -> None:
        self.client = client
        self.default_description = default_description

    async def stk_push(
        self,
        *,
        phone: str | None,
        amount: float | None,
        account: str | None = None,
        description: str | None = None,
    ) -> StkPushResponse:
        """Start an STK push for phone.

        Raises:
            ValidationAppError: Missing phone or amount, invalid phone, or an
                amount that is not a finite number of at least 1.
            PaymentDeclinedError: The gateway answered with success=false.
            PaymentGatewayAppError: The gateway could not be reached.
        """
        if not phone or not amount:
            raise ValidationAppError(
                code="missing_fields",
                message="Phone and amount are required",
            )
        formatted_phone = normalize_stk_phone(phone)
        if not math.isfinite(amount) or amount < MIN_AMOUNT_KES:
            raise ValidationAppError(
                code="invalid_amount",
                message="Amount must be at least KES 1",
                details={"field": "amount"},
            )

        account_ref = account or f"WEB-{int(time.time() * 1000)}"
        logger.info(
            "mpesa.stk_push",
            extra={
                "phone_masked": mask_phone(formatted_phone),
                "amount": amount,
                "account": account_ref,
            },
        )

        data = await self.client.stk_push(
            phone=formatted_phone,
            amount=amount,
            account=account_ref,
            description=description or self.default_description,
        )

        if not data.get("success"):
            message = data.get("message") or "Failed to initiate M-Pesa payment"
            logger.warning("mpesa.stk_push_declined", extra={"gateway_message": message})
            raise PaymentDeclinedError(code="mpesa_declined", message=message)

        return StkPushResponse(
            success=True,
            message=data.get("message") or "STK Push sent! Check your phone.",
            checkout_request_id=_first_present(data, "checkout_request_id", "CheckoutRequestID"),
            merchant_request_id=_first_present(data, "merchant_request_id", "MerchantRequestID"),
            sale_id=_first_present(data, "sale_id", "saleId"),
        )

    async def check_status(self, checkout_request_id: str | None) -> PaymentStatusResponse:
        """Look up the outcome of an STK push.

        Raises:
            ValidationAppError: If checkout_request_id is missing.
            PaymentGatewayAppError: The gateway could not be reached.
        """
        if not checkout_request_id:
            raise ValidationAppError(
                code="missing_checkout_request_id",
                message="checkoutRequestId is required",
                details={"field": "checkoutRequestId"},
            )

        data = await self.client.check_status(checkout_request_id)
        result_code = data.get("resultCode")
        status = interpret_result_code(data)
        logger.info(
            "mpesa.status_checked",
            extra={"checkout_request_id": checkout_request_id, "status": status},
        )

        return PaymentStatusResponse(
            success=data.get("success"),
            result_code=result_code,
            result_desc=data.get("resultDesc"),
            checkout_request_id=data.get("checkoutRequestID"),
            amount=data.get("amount"),
            mpesa_receipt_number=data.get("mpesaReceiptNumber"),
            transaction_date=data.get("transactionDate"),
            status=status,
        )
