"""
Tests for the brokerage domain entities and errors.

Tests entities in isolation. No storage, locking or IO involved.
"""

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from app.domain.brokerage.entities import (
    MAX_AMOUNT,
    ORDER_PLACES,
    Balance,
    Order,
    OrderSide,
    OrderStatus,
    Reservation,
    require_identifier,
    to_amount,
)
from app.domain.brokerage.errors import (
    AssetNotFoundError,
    BrokerageDomainError,
    InsufficientFundsError,
    InvalidArgumentError,
    InvalidOrderStatusError,
    InvalidStateError,
    OrderNotFoundError,
)

NOW = datetime(2024, 1, 1, tzinfo=timezone.utc)


def _order(side: OrderSide = OrderSide.BUY, size: str = "10", price: str = "150") -> Order:
    return Order(
        customer_id="CUST001",
        asset_name="AAPL",
        side=side,
        size=Decimal(size),
        price=Decimal(price),
        created_at=NOW,
    )


class TestToAmount:
    """Tests for amount coercion."""

    @pytest.mark.parametrize("value", [Decimal("1.5"), 3, "0.0001"])
    def test_accepts_exact_decimals(self, value: object) -> None:
        """Decimal, int and decimal strings become a Decimal."""
        assert to_amount(value, "amount") == Decimal(str(value))

    @pytest.mark.parametrize("value", [0, Decimal("-1"), "0.00", "NaN", "Infinity"])
    def test_rejects_non_positive_or_non_finite(self, value: object) -> None:
        """Zero, negatives and non-finite values are invalid arguments."""
        with pytest.raises(InvalidArgumentError):
            to_amount(value, "amount")

    @pytest.mark.parametrize("value", [1.5, True, None, "abc", [1]])
    def test_rejects_floats_and_garbage(self, value: object) -> None:
        """Binary floats, booleans and non-numeric input are refused."""
        with pytest.raises(InvalidArgumentError):
            to_amount(value, "amount")

    @pytest.mark.parametrize(
        "value", ["1e500000", "100000000000000000", "0.00001", "1E-10"]
    )
    def test_rejects_out_of_range_amounts(self, value: str) -> None:
        """Amounts at or above the bound, or finer than four places, are refused."""
        with pytest.raises(InvalidArgumentError):
            to_amount(value, "amount")

    def test_order_places_are_stricter(self) -> None:
        """Order sizes and prices stop at cents."""
        assert to_amount("1.25", "price", ORDER_PLACES) == Decimal("1.25")
        with pytest.raises(InvalidArgumentError):
            to_amount("1.255", "price", ORDER_PLACES)

    def test_positive_exponent_is_normalized(self) -> None:
        """Scientific notation comes back as a plain integer amount."""
        amount = to_amount(Decimal("1E+2"), "amount")
        assert amount == Decimal("100")
        assert str(amount) == "100"

    def test_largest_amount_accepted(self) -> None:
        """The greatest four-place amount below the bound is valid."""
        value = MAX_AMOUNT - Decimal("0.0001")
        assert to_amount(value, "amount") == value

    def test_blank_identifier_rejected(self) -> None:
        """Identifiers must be non-blank strings."""
        assert require_identifier("CUST001", "customer_id") == "CUST001"
        with pytest.raises(InvalidArgumentError, match="customer_id cannot be empty"):
            require_identifier("  ", "customer_id")


class TestBalance:
    """Tests for the Balance entity."""

    def test_opened_balance_is_fully_usable(self) -> None:
        """A new balance starts with usable equal to total."""
        balance = Balance.opened("CUST001", "TRY", Decimal("100"))
        assert balance.total == balance.usable == Decimal("100")
        assert balance.reserved == Decimal("0")
        assert balance.key == ("CUST001", "TRY")

    def test_reserve_moves_usable_to_reserved(self) -> None:
        """Reserving lowers usable and leaves total alone."""
        balance = Balance.opened("CUST001", "TRY", Decimal("100"))
        balance.reserve(Decimal("30"))
        assert balance.total == Decimal("100")
        assert balance.usable == Decimal("70")
        assert balance.reserved == Decimal("30")

    def test_reserve_beyond_usable_fails_unchanged(self) -> None:
        """Over-reserving raises and mutates nothing."""
        balance = Balance.opened("CUST001", "TRY", Decimal("100"))
        with pytest.raises(InsufficientFundsError) as exc_info:
            balance.reserve(Decimal("100.01"))
        assert exc_info.value.required == "100.01"
        assert exc_info.value.available == "100"
        assert balance.usable == Decimal("100")

    def test_release_is_capped_at_total(self) -> None:
        """Releasing more than reserved clamps usable and reports the excess."""
        balance = Balance("CUST001", "TRY", total=Decimal("100"), usable=Decimal("90"))
        excess = balance.release(Decimal("25"))
        assert balance.usable == Decimal("100")
        assert excess == Decimal("15")

    def test_release_within_reservation_reports_no_excess(self) -> None:
        """A normal release restores usable and returns zero."""
        balance = Balance("CUST001", "TRY", total=Decimal("100"), usable=Decimal("60"))
        assert balance.release(Decimal("40")) == Decimal("0")
        assert balance.usable == Decimal("100")

    def test_decrease_never_makes_usable_negative(self) -> None:
        """Debiting more than usable (but within total) floors usable at zero."""
        balance = Balance("CUST001", "TRY", total=Decimal("100"), usable=Decimal("20"))
        balance.decrease(Decimal("50"))
        assert balance.total == Decimal("50")
        assert balance.usable == Decimal("0")

    def test_decrease_beyond_total_is_invalid_state(self) -> None:
        """Debiting more than total raises and mutates nothing."""
        balance = Balance.opened("CUST001", "TRY", Decimal("10"))
        with pytest.raises(InvalidStateError):
            balance.decrease(Decimal("11"))
        assert balance.total == Decimal("10")


class TestOrder:
    """Tests for the Order entity."""

    def test_new_order_is_pending_with_uuid(self) -> None:
        """Orders start PENDING with a generated id."""
        order = _order()
        assert order.status is OrderStatus.PENDING
        assert len(order.order_id) == 36
        assert order.order_id != _order().order_id

    def test_buy_reserves_cash_value(self) -> None:
        """A BUY reserves size * price of the cash asset."""
        order = _order(OrderSide.BUY, "10", "150")
        assert order.total_value == Decimal("1500")
        assert order.reservation() == Reservation("TRY", Decimal("1500"))
        assert order.reservation("USD").asset_name == "USD"

    def test_sell_reserves_asset_size(self) -> None:
        """A SELL reserves size units of the traded asset."""
        order = _order(OrderSide.SELL, "4", "150")
        assert order.reservation() == Reservation("AAPL", Decimal("4"))

    def test_terminal_orders_cannot_transition(self) -> None:
        """MATCHED and CANCELED are terminal."""
        matched = _order()
        matched.match()
        with pytest.raises(InvalidOrderStatusError, match="Cannot cancel order .* MATCHED"):
            matched.cancel()

        canceled = _order()
        canceled.cancel()
        with pytest.raises(InvalidOrderStatusError, match="Cannot match order .* CANCELED"):
            canceled.match()
        assert canceled.status is OrderStatus.CANCELED


class TestDomainErrors:
    """Tests for domain error messages and attributes."""

    def test_all_errors_share_the_base(self) -> None:
        """Every domain error is a BrokerageDomainError with a message."""
        errors = [
            InvalidArgumentError("bad"),
            AssetNotFoundError("CUST001", "AAPL"),
            InsufficientFundsError("CUST001", "TRY", "20000", "10000"),
            InvalidStateError("broken"),
            OrderNotFoundError("o-1"),
            InvalidOrderStatusError("o-1", "MATCHED", "cancel"),
        ]
        for error in errors:
            assert isinstance(error, BrokerageDomainError)
            assert str(error) == error.message

    def test_insufficient_funds_message(self) -> None:
        """InsufficientFundsError names the asset and both amounts."""
        error = InsufficientFundsError("CUST001", "TRY", "20000", "10000")
        assert error.message == (
            "Customer CUST001 has insufficient TRY. Required: 20000, Available: 10000"
        )

    def test_order_not_found_scoped_to_customer(self) -> None:
        """OrderNotFoundError mentions the customer when one is given."""
        assert OrderNotFoundError("o-1").message == "Order not found: o-1"
        assert OrderNotFoundError("o-1", "CUST002").message == (
            "Order o-1 not found for customer CUST002"
        )
