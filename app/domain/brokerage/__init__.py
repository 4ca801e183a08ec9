"""
Brokerage bounded context: domain layer.

This module contains all domain logic for the brokerage context:
- Asset balances and the reservation ledger
- Order lifecycle (create, cancel, match)
- Storage ports consumed by both
"""
