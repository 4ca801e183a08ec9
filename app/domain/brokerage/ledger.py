"""
Domain service: Asset ledger.

Owns per-(customer, asset) balances and the reservations held against
them. Every mutation runs under the balance's key lock inside a single
unit of work, so concurrent callers on the same balance are serialized
and a failed step leaves no partial write behind.

Operations:
    - reserve / release: move amounts between usable and reserved
    - increase / decrease: credit or debit the total
    - settle_match: the two-legged transfer performed when an order matches
"""

import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from decimal import Decimal
from typing import Optional

from app.domain.brokerage.entities import (
    CASH_ASSET,
    ORDER_PLACES,
    Balance,
    OrderSide,
    require_identifier,
    to_amount,
)
from app.domain.brokerage.errors import AssetNotFoundError
from app.domain.brokerage.ports import BalanceRepository, UnitOfWork
from app.shared.locking import KeyedLocks, balance_key

logger = logging.getLogger(__name__)

UnitOfWorkFactory = Callable[[], UnitOfWork]


def settlement_legs(
    cash_asset: str,
    asset_name: str,
    side: OrderSide,
    size: Decimal,
    price: Decimal,
) -> tuple[tuple[str, Decimal], tuple[str, Decimal]]:
    """Return the ``(asset, amount)`` debited and credited by a match."""
    value = to_amount(size * price, "total_value")
    if side is OrderSide.BUY:
        return (cash_asset, value), (asset_name, size)
    return (asset_name, size), (cash_asset, value)


class LedgerTransaction:
    """Balance operations bound to an open unit of work.

    Performs no locking and never commits: the caller owns both. Used by
    ``Ledger`` for its own operations and by the order lifecycle to fold
    ledger work into the same transaction as an order update.
    """

    def __init__(self, balances: BalanceRepository, cash_asset: str = CASH_ASSET) -> None:
        self._balances = balances
        self._cash_asset = cash_asset

    def _require(self, customer_id: str, asset_name: str) -> Balance:
        balance = self._balances.get(customer_id, asset_name)
        if balance is None:
            raise AssetNotFoundError(customer_id, asset_name)
        return balance

    def reserve(self, customer_id: str, asset_name: str, amount: Decimal) -> Balance:
        amount = to_amount(amount, "amount")
        balance = self._require(customer_id, asset_name)
        balance.reserve(amount)
        self._balances.save(balance)
        logger.debug(
            "Reserved %s %s for customer %s, usable now %s",
            amount, asset_name, customer_id, balance.usable,
        )
        return balance

    def release(self, customer_id: str, asset_name: str, amount: Decimal) -> Balance:
        amount = to_amount(amount, "amount")
        balance = self._require(customer_id, asset_name)
        excess = balance.release(amount)
        if excess:
            logger.warning(
                "Release of %s %s for customer %s exceeded the reserved amount by %s; "
                "usable capped at total %s",
                amount, asset_name, customer_id, excess, balance.total,
            )
        self._balances.save(balance)
        logger.debug(
            "Released %s %s for customer %s, usable now %s",
            amount, asset_name, customer_id, balance.usable,
        )
        return balance

    def increase(self, customer_id: str, asset_name: str, amount: Decimal) -> Balance:
        amount = to_amount(amount, "amount")
        balance = self._balances.get(customer_id, asset_name)
        if balance is None:
            balance = Balance.opened(customer_id, asset_name, amount)
        else:
            balance.increase(amount)
        self._balances.save(balance)
        logger.debug(
            "Increased %s %s for customer %s, total now %s",
            amount, asset_name, customer_id, balance.total,
        )
        return balance

    def decrease(self, customer_id: str, asset_name: str, amount: Decimal) -> Balance:
        amount = to_amount(amount, "amount")
        balance = self._require(customer_id, asset_name)
        balance.decrease(amount)
        self._balances.save(balance)
        logger.debug(
            "Decreased %s %s for customer %s, total now %s",
            amount, asset_name, customer_id, balance.total,
        )
        return balance

    def has_sufficient(self, customer_id: str, asset_name: str, amount: Decimal) -> bool:
        amount = to_amount(amount, "amount")
        balance = self._balances.get(customer_id, asset_name)
        return balance is not None and balance.has_sufficient(amount)

    def settle_match(
        self,
        customer_id: str,
        asset_name: str,
        side: OrderSide,
        size: Decimal,
        price: Decimal,
    ) -> tuple[Balance, Balance]:
        """Transfer balances for a matched order.

        BUY debits ``size * price`` of cash and credits ``size`` of the
        asset; SELL debits ``size`` of the asset and credits the cash.
        The debited amount is the order's outstanding reservation, so it
        is consumed: total drops by the amount while usable is unchanged.
        A debit larger than what is reserved is logged by ``release``.

        Returns:
            The debited and the credited balance, in that order.
        """
        size = to_amount(size, "size", ORDER_PLACES)
        price = to_amount(price, "price", ORDER_PLACES)
        (debit_asset, debit_amount), (credit_asset, credit_amount) = settlement_legs(
            self._cash_asset, asset_name, side, size, price
        )

        self.release(customer_id, debit_asset, debit_amount)
        debited = self.decrease(customer_id, debit_asset, debit_amount)
        credited = self.increase(customer_id, credit_asset, credit_amount)
        logger.debug(
            "Settled %s for customer %s: -%s %s, +%s %s",
            side.value, customer_id, debit_amount, debit_asset, credit_amount, credit_asset,
        )
        return debited, credited


class Ledger:
    """Thread-safe entry point for balance operations.

    Each public method validates its input, takes the lock of every
    balance it touches and runs in its own unit of work.
    """

    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        locks: Optional[KeyedLocks] = None,
        cash_asset: str = CASH_ASSET,
    ) -> None:
        self._uow_factory = uow_factory
        self._locks = locks or KeyedLocks()
        self._cash_asset = cash_asset

    @property
    def locks(self) -> KeyedLocks:
        return self._locks

    @property
    def cash_asset(self) -> str:
        return self._cash_asset

    @property
    def uow_factory(self) -> UnitOfWorkFactory:
        return self._uow_factory

    def within(self, uow: UnitOfWork) -> LedgerTransaction:
        """Return ledger operations bound to a unit of work the caller controls."""
        return LedgerTransaction(uow.balances, self._cash_asset)

    @contextmanager
    def _transaction(self, customer_id: str, *asset_names: str) -> Iterator[LedgerTransaction]:
        require_identifier(customer_id, "customer_id")
        for asset_name in asset_names:
            require_identifier(asset_name, "asset_name")
        keys = [balance_key(customer_id, asset_name) for asset_name in asset_names]
        with self._locks.hold(*keys), self._uow_factory() as uow:
            yield self.within(uow)
            uow.commit()

    def reserve(self, customer_id: str, asset_name: str, amount: Decimal) -> Balance:
        """Move ``amount`` from usable to reserved.

        Raises:
            InvalidArgumentError: If ``amount`` is not positive.
            AssetNotFoundError: If the customer holds no such asset.
            InsufficientFundsError: If usable is below ``amount``.
        """
        amount = to_amount(amount, "amount")
        with self._transaction(customer_id, asset_name) as tx:
            return tx.reserve(customer_id, asset_name, amount)

    def release(self, customer_id: str, asset_name: str, amount: Decimal) -> Balance:
        """Return ``amount`` from reserved to usable, capped at total."""
        amount = to_amount(amount, "amount")
        with self._transaction(customer_id, asset_name) as tx:
            return tx.release(customer_id, asset_name, amount)

    def increase(self, customer_id: str, asset_name: str, amount: Decimal) -> Balance:
        """Credit ``amount``, opening the balance if the customer has none."""
        amount = to_amount(amount, "amount")
        with self._transaction(customer_id, asset_name) as tx:
            return tx.increase(customer_id, asset_name, amount)

    def decrease(self, customer_id: str, asset_name: str, amount: Decimal) -> Balance:
        """Debit ``amount`` from total and usable.

        Raises:
            AssetNotFoundError: If the customer holds no such asset.
            InvalidStateError: If ``amount`` exceeds the total.
        """
        amount = to_amount(amount, "amount")
        with self._transaction(customer_id, asset_name) as tx:
            return tx.decrease(customer_id, asset_name, amount)

    def has_sufficient(self, customer_id: str, asset_name: str, amount: Decimal) -> bool:
        """Return whether usable covers ``amount``. A missing balance is insufficient."""
        amount = to_amount(amount, "amount")
        with self._uow_factory() as uow:
            return self.within(uow).has_sufficient(customer_id, asset_name, amount)

    def settle_match(
        self,
        customer_id: str,
        asset_name: str,
        side: OrderSide,
        size: Decimal,
        price: Decimal,
    ) -> tuple[Balance, Balance]:
        """Run both legs of a match settlement as one transaction.

        No order reservation backs this call, so the debited amount is
        reserved first and must be usable. Reservations held by pending
        orders are left in place.

        Raises:
            InsufficientFundsError: If the debited amount is not usable.
        """
        size = to_amount(size, "size", ORDER_PLACES)
        price = to_amount(price, "price", ORDER_PLACES)
        (debit_asset, debit_amount), _ = settlement_legs(
            self._cash_asset, asset_name, side, size, price
        )
        with self._transaction(customer_id, self._cash_asset, asset_name) as tx:
            tx.reserve(customer_id, debit_asset, debit_amount)
            return tx.settle_match(customer_id, asset_name, side, size, price)

    def get_balance(self, customer_id: str, asset_name: str) -> Balance:
        with self._uow_factory() as uow:
            balance = uow.balances.get(customer_id, asset_name)
        if balance is None:
            raise AssetNotFoundError(customer_id, asset_name)
        return balance

    def list_balances(self, customer_id: str) -> list[Balance]:
        with self._uow_factory() as uow:
            return uow.balances.list_by_customer(customer_id)
