"""Storage adapters for balances and orders."""
