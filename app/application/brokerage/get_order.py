"""
Use case: Read one order of a customer.

Input: GetOrderQuery (order_id, customer_id)
Output: OrderResult
Side effects: None (read-only query).
Failure cases: OrderNotFoundError.
"""

import logging

from app.application.brokerage.dtos import GetOrderQuery, OrderResult
from app.application.brokerage.mappers import to_order_result
from app.domain.brokerage.order_lifecycle import OrderLifecycle

logger = logging.getLogger(__name__)


class GetOrderUseCase:
    """Returns a single order, hiding orders owned by other customers."""

    def __init__(self, lifecycle: OrderLifecycle) -> None:
        self._lifecycle = lifecycle

    def execute(self, query: GetOrderQuery) -> OrderResult:
        logger.debug("Getting order=%s for customer=%s", query.order_id, query.customer_id)
        order = self._lifecycle.get_order(query.order_id, query.customer_id)
        return to_order_result(order)
