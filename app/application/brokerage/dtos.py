"""
Data Transfer Objects for the brokerage application layer.

DTOs carry data between the interface and application layers.
They are plain dataclasses with no behavior.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal


@dataclass(frozen=True)
class CreateOrderCommand:
    """Input DTO for placing an order.

    Attributes:
        customer_id: Owner of the order.
        asset_name: Asset being bought or sold.
        side: "BUY" or "SELL".
        size: Quantity of the asset.
        price: Cash price per unit of the asset.
    """

    customer_id: str
    asset_name: str
    side: str
    size: Decimal
    price: Decimal


@dataclass(frozen=True)
class CancelOrderCommand:
    """Input DTO for canceling a pending order of a customer."""

    order_id: str
    customer_id: str


@dataclass(frozen=True)
class MatchOrderCommand:
    """Input DTO for the administrative match of a pending order."""

    order_id: str


@dataclass(frozen=True)
class GetOrderQuery:
    """Input DTO for reading one order of a customer."""

    order_id: str
    customer_id: str


@dataclass(frozen=True)
class ListOrdersQuery:
    """Input DTO for listing a customer's orders.

    Attributes:
        customer_id: Owner of the orders.
        start_date: Optional inclusive lower bound on creation time.
        end_date: Optional inclusive upper bound on creation time.
    """

    customer_id: str
    start_date: datetime | None = None
    end_date: datetime | None = None


@dataclass(frozen=True)
class GetBalanceQuery:
    """Input DTO for reading one balance."""

    customer_id: str
    asset_name: str


@dataclass(frozen=True)
class ListBalancesQuery:
    """Input DTO for listing all balances of a customer."""

    customer_id: str


@dataclass(frozen=True)
class DepositAssetCommand:
    """Input DTO for crediting an asset to a customer.

    Attributes:
        customer_id: Customer receiving the asset.
        asset_name: Asset credited (the cash asset for money deposits).
        amount: Positive amount to credit.
    """

    customer_id: str
    asset_name: str
    amount: Decimal


@dataclass(frozen=True)
class OrderResult:
    """Output DTO for an order.

    Attributes:
        order_id: Unique identifier of the order.
        customer_id: Owner of the order.
        asset_name: Asset being traded.
        side: "BUY" or "SELL".
        size: Quantity of the asset.
        price: Cash price per unit.
        total_value: size * price.
        status: "PENDING", "MATCHED" or "CANCELED".
        created_at: Creation timestamp (UTC).
    """

    order_id: str
    customer_id: str
    asset_name: str
    side: str
    size: Decimal
    price: Decimal
    total_value: Decimal
    status: str
    created_at: datetime


@dataclass(frozen=True)
class BalanceResult:
    """Output DTO for a balance.

    Attributes:
        customer_id: Holder of the balance.
        asset_name: Asset held.
        total: Total amount held.
        usable: Amount free for new orders.
        reserved: Amount committed to pending orders.
    """

    customer_id: str
    asset_name: str
    total: Decimal
    usable: Decimal
    reserved: Decimal
