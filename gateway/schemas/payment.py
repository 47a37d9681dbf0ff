"""Pydantic schemas for the M-Pesa proxy endpoints."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class StkPushRequest(BaseModel):
    """Body of ``POST /api/mpesa``."""

    phone: str | None = Field(default=None, description="07XXXXXXXX or 254XXXXXXXXX.")
    amount: float | None = Field(default=None, description="Amount in KES (>= 1).")
    account: str | None = Field(default=None, description="Account reference.")
    description: str | None = Field(default=None, description="Transaction description.")


class StkPushResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool
    message: str
    checkout_request_id: str | None = Field(default=None, alias="checkoutRequestId")
    merchant_request_id: str | None = Field(default=None, alias="merchantRequestId")
    sale_id: str | int | None = Field(default=None, alias="saleId")


class PaymentStatusResponse(BaseModel):
    """Gateway status for a checkout request, with an interpreted status."""

    model_config = ConfigDict(populate_by_name=True)

    success: bool | None = None
    result_code: int | str | None = Field(default=None, alias="resultCode")
    result_desc: str | None = Field(default=None, alias="resultDesc")
    checkout_request_id: str | None = Field(default=None, alias="checkoutRequestId")
    amount: float | str | None = None
    mpesa_receipt_number: str | None = Field(default=None, alias="mpesaReceiptNumber")
    transaction_date: str | int | None = Field(default=None, alias="transactionDate")
    status: Literal["completed", "pending", "failed"] = Field(
        ...,
        description="completed when resultCode is 0, pending when it is null, failed otherwise.",
    )
