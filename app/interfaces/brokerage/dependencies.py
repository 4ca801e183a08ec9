"""
Dependency injection for the brokerage bounded context.

Builds the storage adapter, ledger and order lifecycle once per
application and provides FastAPI dependency functions that wire them
into use cases via constructor injection.
This is the composition root for the brokerage context.
"""

import logging
from dataclasses import dataclass
from typing import Union

from fastapi import Request

from app.application.brokerage.cancel_order import CancelOrderUseCase
from app.application.brokerage.create_order import CreateOrderUseCase
from app.application.brokerage.deposit_asset import DepositAssetUseCase
from app.application.brokerage.get_balance import GetBalanceUseCase
from app.application.brokerage.get_order import GetOrderUseCase
from app.application.brokerage.list_balances import ListBalancesUseCase
from app.application.brokerage.list_orders import ListOrdersUseCase
from app.application.brokerage.list_pending_orders import ListPendingOrdersUseCase
from app.application.brokerage.match_order import MatchOrderUseCase
from app.core.config import Settings
from app.domain.brokerage.ledger import Ledger
from app.domain.brokerage.order_lifecycle import OrderLifecycle
from app.infrastructure.brokerage.memory_store import InMemoryStore
from app.infrastructure.brokerage.sql_store import SqlStore

logger = logging.getLogger(__name__)


@dataclass
class BrokerageServices:
    """Long-lived engine components shared by every request."""

    store: Union[InMemoryStore, SqlStore]
    ledger: Ledger
    lifecycle: OrderLifecycle


def build_brokerage_services(settings: Settings) -> BrokerageServices:
    """Build the store, ledger and lifecycle described by the settings."""
    if settings.uses_database():
        store: Union[InMemoryStore, SqlStore] = SqlStore.from_url(settings.database_url)
        store.create_schema()
    else:
        logger.info("No DATABASE_URL configured, keeping balances and orders in memory")
        store = InMemoryStore()

    ledger = Ledger(store.unit_of_work, cash_asset=settings.cash_asset)
    return BrokerageServices(store=store, ledger=ledger, lifecycle=OrderLifecycle(ledger))


def get_brokerage_services(request: Request) -> BrokerageServices:
    """Return the services attached to the running application."""
    return request.app.state.brokerage


def get_create_order_use_case(request: Request) -> CreateOrderUseCase:
    """Build CreateOrderUseCase with its engine dependencies."""
    return CreateOrderUseCase(lifecycle=get_brokerage_services(request).lifecycle)


def get_cancel_order_use_case(request: Request) -> CancelOrderUseCase:
    """Build CancelOrderUseCase with its engine dependencies."""
    return CancelOrderUseCase(lifecycle=get_brokerage_services(request).lifecycle)


def get_match_order_use_case(request: Request) -> MatchOrderUseCase:
    """Build MatchOrderUseCase with its engine dependencies."""
    return MatchOrderUseCase(lifecycle=get_brokerage_services(request).lifecycle)


def get_order_use_case(request: Request) -> GetOrderUseCase:
    """Build GetOrderUseCase with its engine dependencies."""
    return GetOrderUseCase(lifecycle=get_brokerage_services(request).lifecycle)


def get_list_orders_use_case(request: Request) -> ListOrdersUseCase:
    """Build ListOrdersUseCase with its engine dependencies."""
    return ListOrdersUseCase(lifecycle=get_brokerage_services(request).lifecycle)


def get_list_pending_orders_use_case(request: Request) -> ListPendingOrdersUseCase:
    """Build ListPendingOrdersUseCase with its engine dependencies."""
    return ListPendingOrdersUseCase(lifecycle=get_brokerage_services(request).lifecycle)


def get_balance_use_case(request: Request) -> GetBalanceUseCase:
    """Build GetBalanceUseCase with its engine dependencies."""
    return GetBalanceUseCase(ledger=get_brokerage_services(request).ledger)


def get_list_balances_use_case(request: Request) -> ListBalancesUseCase:
    """Build ListBalancesUseCase with its engine dependencies."""
    return ListBalancesUseCase(ledger=get_brokerage_services(request).ledger)


def get_deposit_asset_use_case(request: Request) -> DepositAssetUseCase:
    """Build DepositAssetUseCase with its engine dependencies."""
    return DepositAssetUseCase(ledger=get_brokerage_services(request).ledger)
