"""
Infrastructure layer package.

Storage adapters implementing the domain's UnitOfWork port: an
in-process store and a SQLAlchemy-backed store.
"""
