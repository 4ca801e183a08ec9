"""
Entity-to-DTO mapping shared by the brokerage use cases.
"""

from app.application.brokerage.dtos import BalanceResult, OrderResult
from app.domain.brokerage.entities import Balance, Order


def to_order_result(order: Order) -> OrderResult:
    return OrderResult(
        order_id=order.order_id,
        customer_id=order.customer_id,
        asset_name=order.asset_name,
        side=order.side.value,
        size=order.size,
        price=order.price,
        total_value=order.total_value,
        status=order.status.value,
        created_at=order.created_at,
    )


def to_balance_result(balance: Balance) -> BalanceResult:
    return BalanceResult(
        customer_id=balance.customer_id,
        asset_name=balance.asset_name,
        total=balance.total,
        usable=balance.usable,
        reserved=balance.reserved,
    )
