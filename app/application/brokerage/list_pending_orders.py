"""
Use case: List every pending order for administrative matching.

Input: None
Output: list[OrderResult], oldest first
Side effects: None (read-only query).
Failure cases: None.
"""

import logging

from app.application.brokerage.dtos import OrderResult
from app.application.brokerage.mappers import to_order_result
from app.domain.brokerage.order_lifecycle import OrderLifecycle

logger = logging.getLogger(__name__)


class ListPendingOrdersUseCase:
    """Returns the matching queue: all PENDING orders in FIFO order."""

    def __init__(self, lifecycle: OrderLifecycle) -> None:
        self._lifecycle = lifecycle

    def execute(self) -> list[OrderResult]:
        orders = self._lifecycle.list_pending_orders()
        logger.info("Found %d pending orders", len(orders))
        return [to_order_result(order) for order in orders]
