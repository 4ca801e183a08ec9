"""
Domain entities for the brokerage bounded context.

Entities represent core business objects with identity and lifecycle.
They contain no framework imports and no IO operations.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from uuid import uuid4

from app.domain.brokerage.errors import (
    InsufficientFundsError,
    InvalidArgumentError,
    InvalidOrderStatusError,
    InvalidStateError,
)

CASH_ASSET = "TRY"
ZERO = Decimal("0")
# Order size and price carry cents; their product, and so any ledger
# amount, at most four places.
ORDER_PLACES = 2
LEDGER_PLACES = 4
MAX_AMOUNT = Decimal(10) ** 17


class OrderSide(Enum):
    """Direction of an order relative to the traded asset."""

    BUY = "BUY"
    SELL = "SELL"


class OrderStatus(Enum):
    """Lifecycle state of an order. MATCHED and CANCELED are terminal."""

    PENDING = "PENDING"
    MATCHED = "MATCHED"
    CANCELED = "CANCELED"


def to_amount(value: object, name: str, places: int = LEDGER_PLACES) -> Decimal:
    """Coerce a monetary input to an exact, strictly positive Decimal.

    Binary floats are refused outright: amounts must arrive as Decimal,
    int or a decimal string. The amount must stay below ``MAX_AMOUNT``
    and have at most ``places`` decimal places, which keeps every sum
    and product the ledger computes exact.

    Raises:
        InvalidArgumentError: If the value is not a finite positive decimal
            within those bounds.
    """
    if isinstance(value, bool) or isinstance(value, float):
        raise InvalidArgumentError(f"{name} must be an exact decimal, got {value!r}")
    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, (int, str)):
        try:
            amount = Decimal(value)
        except ArithmeticError:
            raise InvalidArgumentError(f"{name} is not a decimal: {value!r}") from None
    else:
        raise InvalidArgumentError(f"{name} must be an exact decimal, got {value!r}")

    if not amount.is_finite() or amount <= ZERO:
        raise InvalidArgumentError(f"{name} must be positive, got {amount}")
    if amount >= MAX_AMOUNT:
        raise InvalidArgumentError(f"{name} must be below {MAX_AMOUNT:f}, got {amount}")
    if amount.quantize(Decimal(1).scaleb(-places)) != amount:
        raise InvalidArgumentError(
            f"{name} allows at most {places} decimal places, got {amount}"
        )
    if amount.as_tuple().exponent > 0:
        amount = amount.quantize(Decimal(1))
    return amount


def require_identifier(value: object, name: str) -> str:
    """Return the identifier if it is a non-blank string."""
    if not isinstance(value, str) or not value.strip():
        raise InvalidArgumentError(f"{name} cannot be empty")
    return value


@dataclass
class Balance:
    """A customer's holding of one asset.

    ``usable`` is the part of ``total`` not committed to pending orders.
    Every mutation keeps ``0 <= usable <= total``.
    """

    customer_id: str
    asset_name: str
    total: Decimal
    usable: Decimal

    @classmethod
    def opened(cls, customer_id: str, asset_name: str, amount: Decimal) -> "Balance":
        """Create a fresh, fully usable balance."""
        return cls(customer_id=customer_id, asset_name=asset_name, total=amount, usable=amount)

    @property
    def key(self) -> tuple[str, str]:
        return (self.customer_id, self.asset_name)

    @property
    def reserved(self) -> Decimal:
        """Amount committed to pending orders."""
        return self.total - self.usable

    def has_sufficient(self, amount: Decimal) -> bool:
        return self.usable >= amount

    def reserve(self, amount: Decimal) -> None:
        if not self.has_sufficient(amount):
            raise InsufficientFundsError(
                self.customer_id, self.asset_name, str(amount), str(self.usable)
            )
        self.usable -= amount

    def release(self, amount: Decimal) -> Decimal:
        """Return ``amount`` to usable, capped at ``total``.

        Returns:
            The part of ``amount`` that exceeded the outstanding
            reservation and was dropped by the cap (zero normally).
        """
        restored = self.usable + amount
        if restored > self.total:
            self.usable = self.total
            return restored - self.total
        self.usable = restored
        return ZERO

    def increase(self, amount: Decimal) -> None:
        self.total += amount
        self.usable += amount

    def decrease(self, amount: Decimal) -> None:
        if amount > self.total:
            raise InvalidStateError(
                f"cannot decrease {self.asset_name} of customer {self.customer_id} "
                f"by {amount}, total is {self.total}"
            )
        self.total -= amount
        # Free balance taken beyond what was usable never drives usable negative.
        self.usable = max(self.usable - amount, ZERO)


@dataclass(frozen=True)
class Reservation:
    """The asset and amount an order holds while it is PENDING."""

    asset_name: str
    amount: Decimal


@dataclass
class Order:
    """A BUY or SELL order for a customer against one asset."""

    customer_id: str
    asset_name: str
    side: OrderSide
    size: Decimal
    price: Decimal
    created_at: datetime
    order_id: str = field(default_factory=lambda: str(uuid4()))
    status: OrderStatus = OrderStatus.PENDING

    @property
    def total_value(self) -> Decimal:
        return self.size * self.price

    @property
    def is_pending(self) -> bool:
        return self.status is OrderStatus.PENDING

    def reservation(self, cash_asset: str = CASH_ASSET) -> Reservation:
        """Return what this order reserves: cash for a BUY, the asset for a SELL."""
        if self.side is OrderSide.BUY:
            return Reservation(asset_name=cash_asset, amount=self.total_value)
        return Reservation(asset_name=self.asset_name, amount=self.size)

    def cancel(self) -> None:
        self._transition(OrderStatus.CANCELED, "cancel")

    def match(self) -> None:
        self._transition(OrderStatus.MATCHED, "match")

    def _transition(self, target: OrderStatus, operation: str) -> None:
        if not self.is_pending:
            raise InvalidOrderStatusError(self.order_id, self.status.value, operation)
        self.status = target
