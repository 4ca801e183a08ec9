"""
Use case: Credit an asset to a customer.

Input: DepositAssetCommand (customer_id, asset_name, amount)
Output: BalanceResult after the credit
Side effects: Increases total and usable, opening the balance if needed.
Failure cases: InvalidArgumentError.
"""

import logging

from app.application.brokerage.dtos import BalanceResult, DepositAssetCommand
from app.application.brokerage.mappers import to_balance_result
from app.domain.brokerage.ledger import Ledger

logger = logging.getLogger(__name__)


class DepositAssetUseCase:
    """Orchestrates crediting an asset through the ledger."""

    def __init__(self, ledger: Ledger) -> None:
        self._ledger = ledger

    def execute(self, command: DepositAssetCommand) -> BalanceResult:
        """Run the deposit use case.

        Args:
            command: Customer, asset and amount to credit.

        Returns:
            The balance after the credit.

        Raises:
            InvalidArgumentError: If the amount is not positive or an id is empty.
        """
        logger.info(
            "Depositing %s %s for customer=%s",
            command.amount,
            command.asset_name,
            command.customer_id,
        )
        balance = self._ledger.increase(
            command.customer_id, command.asset_name, command.amount
        )
        return to_balance_result(balance)
