"""
Use case: Match a pending order (administrative).

Input: MatchOrderCommand (order_id)
Output: OrderResult (status MATCHED)
Side effects: Settles the order: debits the reserved side, credits the other.
Failure cases: OrderNotFoundError, InvalidOrderStatusError.
"""

import logging

from app.application.brokerage.dtos import MatchOrderCommand, OrderResult
from app.application.brokerage.mappers import to_order_result
from app.domain.brokerage.order_lifecycle import OrderLifecycle

logger = logging.getLogger(__name__)


class MatchOrderUseCase:
    """Orchestrates matching of a single pending order.

    Matching is not scoped to a customer; access control belongs to
    the interface layer.
    """

    def __init__(self, lifecycle: OrderLifecycle) -> None:
        self._lifecycle = lifecycle

    def execute(self, command: MatchOrderCommand) -> OrderResult:
        """Run the match order use case.

        Raises:
            OrderNotFoundError: If the order does not exist.
            InvalidOrderStatusError: If the order is already MATCHED or CANCELED.
        """
        logger.info("Matching order=%s", command.order_id)
        order = self._lifecycle.match_order(command.order_id)
        return to_order_result(order)
