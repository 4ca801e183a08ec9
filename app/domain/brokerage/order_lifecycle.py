"""
Domain service: Order lifecycle.

Drives orders through PENDING -> MATCHED | CANCELED and keeps the ledger
in step with them: a PENDING order always has exactly one outstanding
reservation, a terminal order has none.

Each state-changing operation pairs its ledger step with the order update
in one unit of work:
    - create: reserve, then persist the PENDING order
    - cancel: release the reservation, then flip to CANCELED
    - match:  settle the transfer, then flip to MATCHED

Lock order is always the order's key before any balance key, and every
lock is held before the writing unit of work opens.
"""

import logging
import threading
from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Optional

from app.domain.brokerage.entities import (
    ORDER_PLACES,
    Order,
    OrderSide,
    OrderStatus,
    require_identifier,
    to_amount,
)
from app.domain.brokerage.errors import (
    InvalidArgumentError,
    InvalidOrderStatusError,
    OrderNotFoundError,
)
from app.domain.brokerage.ledger import Ledger
from app.domain.brokerage.ports import UnitOfWork
from app.shared.locking import balance_key, order_key

logger = logging.getLogger(__name__)


def _as_utc(moment: Optional[datetime]) -> Optional[datetime]:
    """Treat naive datetimes as UTC so they compare with stored timestamps."""
    if moment is None or moment.tzinfo is not None:
        return moment
    return moment.replace(tzinfo=timezone.utc)


class MonotonicClock:
    """UTC clock whose readings strictly increase.

    Two orders created within the same clock tick still get distinct,
    correctly ordered timestamps.
    """

    def __init__(self, source: Callable[[], datetime] = lambda: datetime.now(timezone.utc)) -> None:
        self._source = source
        self._last: Optional[datetime] = None
        self._lock = threading.Lock()

    def now(self) -> datetime:
        with self._lock:
            current = self._source()
            if self._last is not None and current <= self._last:
                current = self._last + timedelta(microseconds=1)
            self._last = current
            return current


class OrderLifecycle:
    """Orchestrates order state changes against the ledger."""

    def __init__(self, ledger: Ledger, clock: Optional[MonotonicClock] = None) -> None:
        self._ledger = ledger
        self._locks = ledger.locks
        self._uow_factory = ledger.uow_factory
        self._clock = clock or MonotonicClock()

    def create_order(
        self,
        customer_id: str,
        asset_name: str,
        side: OrderSide,
        size: Decimal,
        price: Decimal,
    ) -> Order:
        """Reserve funds and record a new PENDING order.

        Raises:
            InvalidArgumentError: On empty identifiers, a size or price that is
                not a positive amount of at most two decimal places, a total
                value out of range, or an order for the cash asset itself.
            AssetNotFoundError: If the reserved asset is not held.
            InsufficientFundsError: If usable balance is too low.
        """
        require_identifier(customer_id, "customer_id")
        require_identifier(asset_name, "asset_name")
        if not isinstance(side, OrderSide):
            raise InvalidArgumentError(f"side must be BUY or SELL, got {side!r}")
        size = to_amount(size, "size", ORDER_PLACES)
        price = to_amount(price, "price", ORDER_PLACES)
        to_amount(size * price, "total_value")
        if asset_name == self._ledger.cash_asset:
            raise InvalidArgumentError(
                f"{asset_name} is the cash asset and cannot be traded against itself"
            )

        logger.info(
            "Creating %s order for customer %s - %s %s at %s",
            side.value, customer_id, size, asset_name, price,
        )

        draft = Order(
            customer_id=customer_id,
            asset_name=asset_name,
            side=side,
            size=size,
            price=price,
            created_at=self._clock.now(),
        )
        reservation = draft.reservation(self._ledger.cash_asset)

        with self._locks.hold(balance_key(customer_id, reservation.asset_name)):
            with self._uow_factory() as uow:
                self._ledger.within(uow).reserve(
                    customer_id, reservation.asset_name, reservation.amount
                )
                uow.orders.save(draft)
                uow.commit()

        logger.info("Order created successfully: %s", draft.order_id)
        return draft

    def cancel_order(self, order_id: str, customer_id: str) -> Order:
        """Release a PENDING order's reservation and mark it CANCELED.

        Raises:
            OrderNotFoundError: If the customer has no such order.
            InvalidOrderStatusError: If the order is no longer PENDING.
        """
        require_identifier(order_id, "order_id")
        require_identifier(customer_id, "customer_id")
        logger.info("Canceling order %s for customer %s", order_id, customer_id)

        with self._locks.hold(order_key(order_id)):
            order = self.get_order(order_id, customer_id)
            self._require_pending(order, "cancel")

            reservation = order.reservation(self._ledger.cash_asset)
            with self._locks.hold(balance_key(order.customer_id, reservation.asset_name)):
                with self._uow_factory() as uow:
                    order = self._reload_pending(uow, order_id, "cancel")
                    self._ledger.within(uow).release(
                        order.customer_id, reservation.asset_name, reservation.amount
                    )
                    order.cancel()
                    uow.orders.save(order)
                    uow.commit()

        logger.info("Order %s canceled successfully", order_id)
        return order

    def match_order(self, order_id: str) -> Order:
        """Settle a PENDING order and mark it MATCHED.

        Raises:
            OrderNotFoundError: If the order does not exist.
            InvalidOrderStatusError: If the order is no longer PENDING.
        """
        require_identifier(order_id, "order_id")
        logger.info("Matching order: %s", order_id)

        with self._locks.hold(order_key(order_id)):
            with self._uow_factory() as uow:
                order = uow.orders.get(order_id)
            if order is None:
                raise OrderNotFoundError(order_id)
            self._require_pending(order, "match")

            keys = (
                balance_key(order.customer_id, self._ledger.cash_asset),
                balance_key(order.customer_id, order.asset_name),
            )
            with self._locks.hold(*keys):
                with self._uow_factory() as uow:
                    order = self._reload_pending(uow, order_id, "match")
                    self._ledger.within(uow).settle_match(
                        order.customer_id, order.asset_name, order.side, order.size, order.price
                    )
                    order.match()
                    uow.orders.save(order)
                    uow.commit()

        logger.info("Order %s matched successfully", order_id)
        return order

    def get_order(self, order_id: str, customer_id: str) -> Order:
        with self._uow_factory() as uow:
            order = uow.orders.get_for_customer(order_id, customer_id)
        if order is None:
            raise OrderNotFoundError(order_id, customer_id)
        return order

    def list_orders(
        self,
        customer_id: str,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> list[Order]:
        """Return a customer's orders, newest first, optionally within a date range."""
        start = _as_utc(start)
        end = _as_utc(end)
        if start is not None and end is not None and start > end:
            raise InvalidArgumentError(f"start {start} is after end {end}")
        logger.debug("Listing orders for customer %s from %s to %s", customer_id, start, end)
        with self._uow_factory() as uow:
            return uow.orders.list_by_customer(customer_id, start, end)

    def list_pending_orders(self) -> list[Order]:
        """Return every PENDING order, oldest first."""
        with self._uow_factory() as uow:
            return uow.orders.list_by_status(OrderStatus.PENDING)

    def _reload_pending(self, uow: UnitOfWork, order_id: str, operation: str) -> Order:
        """Re-read the order under the writing transaction and check it is PENDING."""
        order = uow.orders.get(order_id)
        if order is None:
            raise OrderNotFoundError(order_id)
        self._require_pending(order, operation)
        return order

    @staticmethod
    def _require_pending(order: Order, operation: str) -> None:
        if not order.is_pending:
            raise InvalidOrderStatusError(order.order_id, order.status.value, operation)
