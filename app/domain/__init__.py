"""
Domain layer package.

Entities, domain services (ledger, order lifecycle) and port interfaces.
No framework imports and no IO here; persistence is reached only
through the UnitOfWork port.
"""
