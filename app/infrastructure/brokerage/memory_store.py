"""
Adapter: In-memory balance and order storage.

Implements the UnitOfWork port over plain dictionaries.
Used for local development, tests, and whenever no DATABASE_URL is set.
State lives for the lifetime of the process.
"""

import threading
from copy import copy
from datetime import datetime
from typing import Optional

from app.domain.brokerage.entities import Balance, Order, OrderStatus
from app.domain.brokerage.ports import BalanceRepository, OrderRepository, UnitOfWork


class InMemoryStore:
    """Committed state shared by all units of work of one process."""

    def __init__(self) -> None:
        self.lock = threading.Lock()
        self.balances: dict[tuple[str, str], Balance] = {}
        self.orders: dict[str, Order] = {}

    def unit_of_work(self) -> "InMemoryUnitOfWork":
        return InMemoryUnitOfWork(self)


class _InMemoryBalanceRepository(BalanceRepository):
    """Reads committed balances through a per-transaction write buffer."""

    def __init__(self, store: InMemoryStore) -> None:
        self._store = store
        self.staged: dict[tuple[str, str], Balance] = {}

    def get(self, customer_id: str, asset_name: str) -> Optional[Balance]:
        key = (customer_id, asset_name)
        if key in self.staged:
            return copy(self.staged[key])
        with self._store.lock:
            balance = self._store.balances.get(key)
        return copy(balance) if balance is not None else None

    def save(self, balance: Balance) -> None:
        self.staged[balance.key] = copy(balance)

    def list_by_customer(self, customer_id: str) -> list[Balance]:
        with self._store.lock:
            merged = {
                key: balance
                for key, balance in self._store.balances.items()
                if key[0] == customer_id
            }
        merged.update(
            {key: balance for key, balance in self.staged.items() if key[0] == customer_id}
        )
        return [copy(merged[key]) for key in sorted(merged)]

    def count(self) -> int:
        with self._store.lock:
            keys = set(self._store.balances)
        return len(keys | set(self.staged))


class _InMemoryOrderRepository(OrderRepository):
    """Reads committed orders through a per-transaction write buffer."""

    def __init__(self, store: InMemoryStore) -> None:
        self._store = store
        self.staged: dict[str, Order] = {}

    def _snapshot(self) -> dict[str, Order]:
        with self._store.lock:
            orders = dict(self._store.orders)
        orders.update(self.staged)
        return orders

    def get(self, order_id: str) -> Optional[Order]:
        order = self._snapshot().get(order_id)
        return copy(order) if order is not None else None

    def get_for_customer(self, order_id: str, customer_id: str) -> Optional[Order]:
        order = self.get(order_id)
        if order is None or order.customer_id != customer_id:
            return None
        return order

    def save(self, order: Order) -> None:
        self.staged[order.order_id] = copy(order)

    def list_by_customer(
        self,
        customer_id: str,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> list[Order]:
        orders = [
            order
            for order in self._snapshot().values()
            if order.customer_id == customer_id
            and (start is None or order.created_at >= start)
            and (end is None or order.created_at <= end)
        ]
        orders.sort(key=lambda o: o.created_at, reverse=True)
        return [copy(order) for order in orders]

    def list_by_status(self, status: OrderStatus) -> list[Order]:
        orders = [order for order in self._snapshot().values() if order.status is status]
        orders.sort(key=lambda o: o.created_at)
        return [copy(order) for order in orders]


class InMemoryUnitOfWork(UnitOfWork):
    """Buffers writes and applies them to the store in one step on commit."""

    def __init__(self, store: InMemoryStore) -> None:
        self._store = store
        self.balances = _InMemoryBalanceRepository(store)
        self.orders = _InMemoryOrderRepository(store)

    def commit(self) -> None:
        with self._store.lock:
            self._store.balances.update(self.balances.staged)
            self._store.orders.update(self.orders.staged)
        self.balances.staged = {}
        self.orders.staged = {}

    def rollback(self) -> None:
        self.balances.staged = {}
        self.orders.staged = {}
