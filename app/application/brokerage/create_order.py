"""
Use case: Place a BUY or SELL order for a customer.

Input: CreateOrderCommand (customer_id, asset_name, side, size, price)
Output: OrderResult (status PENDING)
Side effects: Reserves cash (BUY) or the asset (SELL), persists the order.
Failure cases: InvalidArgumentError, AssetNotFoundError, InsufficientFundsError.
"""

import logging

from app.application.brokerage.dtos import CreateOrderCommand, OrderResult
from app.application.brokerage.mappers import to_order_result
from app.domain.brokerage.entities import OrderSide
from app.domain.brokerage.errors import InvalidArgumentError
from app.domain.brokerage.order_lifecycle import OrderLifecycle

logger = logging.getLogger(__name__)


class CreateOrderUseCase:
    """Orchestrates order placement.

    Parses the side and delegates reservation and persistence to the
    OrderLifecycle, which does both in one transaction.
    """

    def __init__(self, lifecycle: OrderLifecycle) -> None:
        self._lifecycle = lifecycle

    def execute(self, command: CreateOrderCommand) -> OrderResult:
        """Run the create order use case.

        Args:
            command: The order to place.

        Returns:
            The newly created PENDING order.

        Raises:
            InvalidArgumentError: If the side or an amount is invalid.
            AssetNotFoundError: If the customer does not hold the reserved asset.
            InsufficientFundsError: If the usable balance cannot cover the order.
        """
        logger.info(
            "Placing %s order for customer=%s asset=%s",
            command.side,
            command.customer_id,
            command.asset_name,
        )

        try:
            side = OrderSide(command.side)
        except ValueError:
            raise InvalidArgumentError(
                f"side must be BUY or SELL, got {command.side!r}"
            ) from None

        order = self._lifecycle.create_order(
            customer_id=command.customer_id,
            asset_name=command.asset_name,
            side=side,
            size=command.size,
            price=command.price,
        )
        return to_order_result(order)
