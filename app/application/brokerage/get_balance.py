"""
Use case: Read one asset balance of a customer.

Input: GetBalanceQuery (customer_id, asset_name)
Output: BalanceResult
Side effects: None (read-only query).
Failure cases: AssetNotFoundError.
"""

import logging

from app.application.brokerage.dtos import BalanceResult, GetBalanceQuery
from app.application.brokerage.mappers import to_balance_result
from app.domain.brokerage.ledger import Ledger

logger = logging.getLogger(__name__)


class GetBalanceUseCase:
    """Returns total, usable and reserved amounts of one asset."""

    def __init__(self, ledger: Ledger) -> None:
        self._ledger = ledger

    def execute(self, query: GetBalanceQuery) -> BalanceResult:
        logger.debug(
            "Getting balance of asset=%s for customer=%s", query.asset_name, query.customer_id
        )
        balance = self._ledger.get_balance(query.customer_id, query.asset_name)
        return to_balance_result(balance)
