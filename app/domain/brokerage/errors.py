"""
Domain-specific errors for the brokerage bounded context.

All errors raised from the domain layer must be defined here.
These are mapped to HTTP responses at the interface layer.
No framework imports allowed.
"""

from typing import Optional


class BrokerageDomainError(Exception):
    """Base error for all brokerage domain errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(self.message)


class InvalidArgumentError(BrokerageDomainError):
    """Raised when an operation receives malformed input."""

    def __init__(self, reason: str) -> None:
        super().__init__(f"Invalid argument: {reason}")
        self.reason = reason


class AssetNotFoundError(BrokerageDomainError):
    """Raised when a customer holds no balance record for an asset."""

    def __init__(self, customer_id: str, asset_name: str) -> None:
        super().__init__(
            f"Asset {asset_name} not found for customer {customer_id}"
        )
        self.customer_id = customer_id
        self.asset_name = asset_name


class InsufficientFundsError(BrokerageDomainError):
    """Raised when the usable balance cannot cover a reservation."""

    def __init__(
        self, customer_id: str, asset_name: str, required: str, available: str
    ) -> None:
        super().__init__(
            f"Customer {customer_id} has insufficient {asset_name}. "
            f"Required: {required}, Available: {available}"
        )
        self.customer_id = customer_id
        self.asset_name = asset_name
        self.required = required
        self.available = available


class InvalidStateError(BrokerageDomainError):
    """Raised when a balance mutation would break the ledger invariants."""

    def __init__(self, reason: str) -> None:
        super().__init__(f"Invalid state: {reason}")
        self.reason = reason


class OrderNotFoundError(BrokerageDomainError):
    """Raised when an order cannot be found, optionally scoped to a customer."""

    def __init__(self, order_id: str, customer_id: Optional[str] = None) -> None:
        if customer_id is None:
            message = f"Order not found: {order_id}"
        else:
            message = f"Order {order_id} not found for customer {customer_id}"
        super().__init__(message)
        self.order_id = order_id
        self.customer_id = customer_id


class InvalidOrderStatusError(BrokerageDomainError):
    """Raised when an operation is attempted on an order that is not PENDING."""

    def __init__(self, order_id: str, status: str, operation: str) -> None:
        super().__init__(f"Cannot {operation} order {order_id} with status {status}")
        self.order_id = order_id
        self.status = status
        self.operation = operation
