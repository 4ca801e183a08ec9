"""
Use case: List all asset balances of a customer.

Input: ListBalancesQuery (customer_id)
Output: list[BalanceResult], ordered by asset name
Side effects: None (read-only query).
Failure cases: None. An unknown customer simply has no balances.
"""

import logging

from app.application.brokerage.dtos import BalanceResult, ListBalancesQuery
from app.application.brokerage.mappers import to_balance_result
from app.domain.brokerage.ledger import Ledger

logger = logging.getLogger(__name__)


class ListBalancesUseCase:
    """Orchestrates listing a customer's balances."""

    def __init__(self, ledger: Ledger) -> None:
        self._ledger = ledger

    def execute(self, query: ListBalancesQuery) -> list[BalanceResult]:
        logger.info("Listing balances for customer=%s", query.customer_id)
        return [to_balance_result(b) for b in self._ledger.list_balances(query.customer_id)]
