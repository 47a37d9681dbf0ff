"""HTTP client for the M-Pesa STK push backend."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from gateway.core.errors import PaymentGatewayAppError

logger = logging.getLogger(__name__)

STK_PUSH_PATH = "/stkpush.php"
CHECK_STATUS_PATH = "/check_status.php"


class MpesaClient:
    """Thin async wrapper over the STK push and status endpoints.

    Returns the gateway's JSON body untouched; shaping happens in
    PaymentService.
    """

    def __init__(
        self,
        base_url: str,
        timeout_seconds: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.client = httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout_seconds,
            transport=transport,
        )

    async def _request(self, method: str, path: str, **kwargs: Any) -> dict[str, Any]:
        try:
            response = await self.client.request(method, path, **kwargs)
        except httpx.HTTPError as exc:
            logger.error(
                "mpesa.gateway_unreachable",
                extra={"path": path, "error_type": type(exc).__name__},
            )
            raise PaymentGatewayAppError(
                code="mpesa_gateway_unreachable",
                message="Failed to reach the M-Pesa gateway",
            ) from exc

        try:
            payload = response.json()
        except ValueError as exc:
            logger.error(
                "mpesa.invalid_response",
                extra={"path": path, "status_code": response.status_code},
            )
            raise PaymentGatewayAppError(
                code="mpesa_invalid_response",
                message="M-Pesa gateway returned an invalid response",
                details={"http_status": response.status_code},
            ) from exc

        if not isinstance(payload, dict):
            raise PaymentGatewayAppError(
                code="mpesa_invalid_response",
                message="M-Pesa gateway returned an invalid response",
                details={"http_status": response.status_code},
            )
        return payload

    async def stk_push(
        self,
        *,
        phone: str,
        amount: float,
        account: str,
        description: str,
    ) -> dict[str, Any]:
        """Ask the gateway to prompt phone for payment.

        Args:
            phone: Digits-only ``254XXXXXXXXX`` number.
            amount: Amount in KES.
            account: Account reference shown on the customer's handset.
            description: Transaction description.
        """
        return await self._request(
            "POST",
            STK_PUSH_PATH,
            json={
                "phone": phone,
                "amount": amount,
                "account": account,
                "description": description,
            },
        )

    async def check_status(self, checkout_request_id: str) -> dict[str, Any]:
        return await self._request(
            "GET",
            CHECK_STATUS_PATH,
            params={"checkout_request_id": checkout_request_id},
        )

    async def aclose(self) -> None:
        await self.client.aclose()
