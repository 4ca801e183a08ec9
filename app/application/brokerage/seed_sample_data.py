"""
Use case: Seed sample balances into an empty store.

Input: None
Output: Number of balances credited (0 when the store already had data)
Side effects: Credits the sample balances through the ledger.
Failure cases: None.
"""

import logging
from decimal import Decimal

from app.domain.brokerage.ledger import Ledger

logger = logging.getLogger(__name__)

SAMPLE_BALANCES: tuple[tuple[str, str, Decimal], ...] = (
    ("CUST001", "TRY", Decimal("10000.00")),
    ("CUST002", "TRY", Decimal("15000.00")),
    ("CUST001", "AAPL", Decimal("50.00")),
)


class SeedSampleDataUseCase:
    """Credits a small fixed set of balances for local development.

    Cash balances in the sample set are credited to the configured
    cash asset.
    """

    def __init__(self, ledger: Ledger) -> None:
        self._ledger = ledger

    def _store_is_empty(self) -> bool:
        with self._ledger.uow_factory() as uow:
            return uow.balances.count() == 0

    def execute(self) -> int:
        logger.info("Initializing store with sample data...")
        if not self._store_is_empty():
            logger.info("Store already contains data, skipping initialization")
            return 0

        for customer_id, asset_name, amount in SAMPLE_BALANCES:
            if asset_name == "TRY":
                asset_name = self._ledger.cash_asset
            self._ledger.increase(customer_id, asset_name, amount)

        logger.info("Created %d sample balances", len(SAMPLE_BALANCES))
        return len(SAMPLE_BALANCES)
