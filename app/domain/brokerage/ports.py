"""
Port interfaces (ABCs) for the brokerage bounded context.

Ports define the contracts that the domain requires from the outside world.
Infrastructure adapters implement these interfaces.
The domain layer never depends on concrete implementations.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from types import TracebackType
from typing import Optional

from app.domain.brokerage.entities import Balance, Order, OrderStatus


class BalanceRepository(ABC):
    """Port for reading and upserting balances keyed by (customer, asset)."""

    @abstractmethod
    def get(self, customer_id: str, asset_name: str) -> Optional[Balance]:
        """Return the balance for a customer and asset, or None if absent.

        The returned object is a private copy: mutating it has no effect
        until it is passed back to ``save``.
        """
        raise NotImplementedError

    @abstractmethod
    def save(self, balance: Balance) -> None:
        """Insert or replace a balance."""
        raise NotImplementedError

    @abstractmethod
    def list_by_customer(self, customer_id: str) -> list[Balance]:
        """Return all balances of a customer ordered by asset name."""
        raise NotImplementedError

    @abstractmethod
    def count(self) -> int:
        """Return the number of balance records in the store."""
        raise NotImplementedError


class OrderRepository(ABC):
    """Port for reading and upserting orders keyed by order id."""

    @abstractmethod
    def get(self, order_id: str) -> Optional[Order]:
        """Return an order by id, or None if absent."""
        raise NotImplementedError

    @abstractmethod
    def get_for_customer(self, order_id: str, customer_id: str) -> Optional[Order]:
        """Return an order only if it belongs to the given customer."""
        raise NotImplementedError

    @abstractmethod
    def save(self, order: Order) -> None:
        """Insert or replace an order."""
        raise NotImplementedError

    @abstractmethod
    def list_by_customer(
        self,
        customer_id: str,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> list[Order]:
        """Return a customer's orders, newest first.

        Args:
            customer_id: Owner of the orders.
            start: Optional inclusive lower bound on ``created_at``.
            end: Optional inclusive upper bound on ``created_at``.
        """
        raise NotImplementedError

    @abstractmethod
    def list_by_status(self, status: OrderStatus) -> list[Order]:
        """Return all orders in a status, oldest first."""
        raise NotImplementedError


class UnitOfWork(ABC):
    """Transaction scope over both repositories.

    Writes become visible to other units of work only on ``commit``.
    Leaving the ``with`` block without committing, or because of an
    exception, discards every write made inside it.
    """

    balances: BalanceRepository
    orders: OrderRepository

    def __enter__(self) -> "UnitOfWork":
        return self

    def __exit__(
        self,
        exc_type: Optional[type[BaseException]],
        exc: Optional[BaseException],
        tb: Optional[TracebackType],
    ) -> None:
        self.rollback()

    @abstractmethod
    def commit(self) -> None:
        """Make all staged writes durable and visible."""
        raise NotImplementedError

    @abstractmethod
    def rollback(self) -> None:
        """Discard staged writes. A no-op after ``commit``."""
        raise NotImplementedError
