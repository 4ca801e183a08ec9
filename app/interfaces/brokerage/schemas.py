"""
Pydantic schemas for brokerage API request/response validation.

These schemas enforce input validation and define the API contract.
All fields use strict typing with constraints.
No business logic belongs here.
"""

from datetime import datetime
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, Field

ID_MAX_LEN = 255
ORDER_AMOUNT_DESCRIPTION = "Exact decimal amount, strictly positive, at most two decimal places"
LEDGER_AMOUNT_DESCRIPTION = "Exact decimal amount, strictly positive, at most four decimal places"


class CreateOrderRequest(BaseModel):
    """Request schema for placing an order.

    Attributes:
        customer_id: Owner of the order.
        asset_name: Asset to buy or sell.
        side: BUY reserves cash, SELL reserves the asset.
        size: Quantity of the asset.
        price: Cash price per unit.
    """

    customer_id: str = Field(..., min_length=1, max_length=ID_MAX_LEN)
    asset_name: str = Field(..., min_length=1, max_length=ID_MAX_LEN)
    side: Literal["BUY", "SELL"]
    size: Decimal = Field(
        ..., gt=0, max_digits=19, decimal_places=2, description=ORDER_AMOUNT_DESCRIPTION
    )
    price: Decimal = Field(
        ..., gt=0, max_digits=19, decimal_places=2, description=ORDER_AMOUNT_DESCRIPTION
    )


class MatchOrderRequest(BaseModel):
    """Request schema for the administrative match endpoint."""

    order_id: str = Field(..., min_length=1, max_length=ID_MAX_LEN)


class DepositAssetRequest(BaseModel):
    """Request schema for crediting an asset to a customer."""

    customer_id: str = Field(..., min_length=1, max_length=ID_MAX_LEN)
    asset_name: str = Field(..., min_length=1, max_length=ID_MAX_LEN)
    amount: Decimal = Field(
        ..., gt=0, max_digits=21, decimal_places=4, description=LEDGER_AMOUNT_DESCRIPTION
    )


class OrderResponse(BaseModel):
    """Response schema for a single order."""

    order_id: str
    customer_id: str
    asset_name: str
    side: str
    size: Decimal
    price: Decimal
    total_value: Decimal
    status: str
    created_at: datetime


class BalanceResponse(BaseModel):
    """Response schema for a single asset balance."""

    customer_id: str
    asset_name: str
    total: Decimal
    usable: Decimal
    reserved: Decimal


class HealthResponse(BaseModel):
    """Response schema for the health check endpoint."""

    status: str
    version: str


class ErrorResponse(BaseModel):
    """Standard error response body."""

    error: str
    detail: str | None = None
