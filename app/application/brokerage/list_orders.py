"""
Use case: List a customer's orders.

Input: ListOrdersQuery (customer_id, optional start_date / end_date)
Output: list[OrderResult], newest first
Side effects: None (read-only query).
Failure cases: InvalidArgumentError when start_date is after end_date.
"""

import logging

from app.application.brokerage.dtos import ListOrdersQuery, OrderResult
from app.application.brokerage.mappers import to_order_result
from app.domain.brokerage.order_lifecycle import OrderLifecycle

logger = logging.getLogger(__name__)


class ListOrdersUseCase:
    """Orchestrates listing a customer's orders."""

    def __init__(self, lifecycle: OrderLifecycle) -> None:
        self._lifecycle = lifecycle

    def execute(self, query: ListOrdersQuery) -> list[OrderResult]:
        """Run the list orders use case.

        Args:
            query: Customer and optional creation-time window.

        Returns:
            The customer's orders, newest first.
        """
        logger.info(
            "Listing orders for customer=%s from=%s to=%s",
            query.customer_id,
            query.start_date,
            query.end_date,
        )
        orders = self._lifecycle.list_orders(
            query.customer_id, start=query.start_date, end=query.end_date
        )
        return [to_order_result(order) for order in orders]
