"""
Use case: Cancel a customer's pending order.

Input: CancelOrderCommand (order_id, customer_id)
Output: OrderResult (status CANCELED)
Side effects: Releases the order's reservation.
Failure cases: OrderNotFoundError, InvalidOrderStatusError.
"""

import logging

from app.application.brokerage.dtos import CancelOrderCommand, OrderResult
from app.application.brokerage.mappers import to_order_result
from app.domain.brokerage.order_lifecycle import OrderLifecycle

logger = logging.getLogger(__name__)


class CancelOrderUseCase:
    """Orchestrates order cancellation for the owning customer."""

    def __init__(self, lifecycle: OrderLifecycle) -> None:
        self._lifecycle = lifecycle

    def execute(self, command: CancelOrderCommand) -> OrderResult:
        """Run the cancel order use case.

        Raises:
            OrderNotFoundError: If the customer has no such order.
            InvalidOrderStatusError: If the order is already MATCHED or CANCELED.
        """
        logger.info(
            "Canceling order=%s for customer=%s", command.order_id, command.customer_id
        )
        order = self._lifecycle.cancel_order(command.order_id, command.customer_id)
        return to_order_result(order)
