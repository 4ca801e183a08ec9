"""
Application layer for the brokerage bounded context.

Use cases coordinate the ledger and the order lifecycle to fulfill
business operations. No framework or infrastructure imports allowed.
"""
