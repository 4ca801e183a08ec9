"""
Adapter: SQL balance and order storage.

Implements the UnitOfWork port on a SQLAlchemy engine. Each unit of work
is one database transaction on one connection.

Amounts are stored as plain decimal strings and timestamps as fixed-width
ISO-8601 UTC strings, so every backend round-trips them exactly and
ordering by ``created_at`` is chronological. Upserts use
``INSERT ... ON CONFLICT DO UPDATE`` (PostgreSQL and SQLite).

On PostgreSQL, single-row balance and order reads take ``FOR UPDATE``
row locks, so several processes sharing one database serialize their
read-modify-write cycles. SQLite has no row locks: against a SQLite
file, run a single process and rely on the in-process key locks.
"""

import logging
from datetime import datetime, timezone
from decimal import Decimal
from types import TracebackType
from typing import Any, Optional

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Connection, Engine, Transaction

from app.domain.brokerage.entities import Balance, Order, OrderSide, OrderStatus
from app.domain.brokerage.ports import BalanceRepository, OrderRepository, UnitOfWork

logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%S.%fZ"

SCHEMA_STATEMENTS = (
    """
    CREATE TABLE IF NOT EXISTS balances (
        customer_id VARCHAR(255) NOT NULL,
        asset_name  VARCHAR(255) NOT NULL,
        total       VARCHAR(64)  NOT NULL,
        usable      VARCHAR(64)  NOT NULL,
        PRIMARY KEY (customer_id, asset_name)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS orders (
        order_id    VARCHAR(36)  PRIMARY KEY,
        customer_id VARCHAR(255) NOT NULL,
        asset_name  VARCHAR(255) NOT NULL,
        side        VARCHAR(4)   NOT NULL,
        size        VARCHAR(64)  NOT NULL,
        price       VARCHAR(64)  NOT NULL,
        status      VARCHAR(8)   NOT NULL,
        created_at  VARCHAR(32)  NOT NULL
    )
    """,
    "CREATE INDEX IF NOT EXISTS ix_orders_customer_created ON orders (customer_id, created_at)",
    "CREATE INDEX IF NOT EXISTS ix_orders_status_created ON orders (status, created_at)",
)

_ORDER_COLUMNS = "order_id, customer_id, asset_name, side, size, price, status, created_at"


def _amount_to_db(amount: Decimal) -> str:
    return format(amount, "f")


def _timestamp_to_db(moment: datetime) -> str:
    return moment.astimezone(timezone.utc).strftime(TIMESTAMP_FORMAT)


def _timestamp_from_db(value: str) -> datetime:
    return datetime.strptime(value, TIMESTAMP_FORMAT).replace(tzinfo=timezone.utc)


def _row_lock(lock_rows: bool) -> str:
    return " FOR UPDATE" if lock_rows else ""


def _row_to_order(row: Any) -> Order:
    return Order(
        order_id=row[0],
        customer_id=row[1],
        asset_name=row[2],
        side=OrderSide(row[3]),
        size=Decimal(row[4]),
        price=Decimal(row[5]),
        status=OrderStatus(row[6]),
        created_at=_timestamp_from_db(row[7]),
    )


class _SqlBalanceRepository(BalanceRepository):
    """Balances table access on the unit of work's connection."""

    def __init__(self, connection: Connection, lock_rows: bool = False) -> None:
        self._conn = connection
        self._lock_rows = lock_rows

    def get(self, customer_id: str, asset_name: str) -> Optional[Balance]:
        row = self._conn.execute(
            text(
                """
                SELECT customer_id, asset_name, total, usable
                FROM balances
                WHERE customer_id = :customer_id AND asset_name = :asset_name
                """
                + _row_lock(self._lock_rows)
            ),
            {"customer_id": customer_id, "asset_name": asset_name},
        ).fetchone()
        if not row:
            return None
        return Balance(
            customer_id=row[0],
            asset_name=row[1],
            total=Decimal(row[2]),
            usable=Decimal(row[3]),
        )

    def save(self, balance: Balance) -> None:
        self._conn.execute(
            text(
                """
                INSERT INTO balances (customer_id, asset_name, total, usable)
                VALUES (:customer_id, :asset_name, :total, :usable)
                ON CONFLICT (customer_id, asset_name)
                DO UPDATE SET
                    total = EXCLUDED.total,
                    usable = EXCLUDED.usable
                """
            ),
            {
                "customer_id": balance.customer_id,
                "asset_name": balance.asset_name,
                "total": _amount_to_db(balance.total),
                "usable": _amount_to_db(balance.usable),
            },
        )

    def list_by_customer(self, customer_id: str) -> list[Balance]:
        rows = self._conn.execute(
            text(
                """
                SELECT customer_id, asset_name, total, usable
                FROM balances
                WHERE customer_id = :customer_id
                ORDER BY asset_name ASC
                """
            ),
            {"customer_id": customer_id},
        ).fetchall()
        return [
            Balance(
                customer_id=r[0],
                asset_name=r[1],
                total=Decimal(r[2]),
                usable=Decimal(r[3]),
            )
            for r in rows
        ]

    def count(self) -> int:
        return self._conn.execute(text("SELECT COUNT(*) FROM balances")).scalar_one()


class _SqlOrderRepository(OrderRepository):
    """Orders table access on the unit of work's connection."""

    def __init__(self, connection: Connection, lock_rows: bool = False) -> None:
        self._conn = connection
        self._lock_rows = lock_rows

    def get(self, order_id: str) -> Optional[Order]:
        row = self._conn.execute(
            text(
                f"SELECT {_ORDER_COLUMNS} FROM orders WHERE order_id = :order_id"
                + _row_lock(self._lock_rows)
            ),
            {"order_id": order_id},
        ).fetchone()
        return _row_to_order(row) if row else None

    def get_for_customer(self, order_id: str, customer_id: str) -> Optional[Order]:
        row = self._conn.execute(
            text(
                f"""
                SELECT {_ORDER_COLUMNS} FROM orders
                WHERE order_id = :order_id AND customer_id = :customer_id
                """
            ),
            {"order_id": order_id, "customer_id": customer_id},
        ).fetchone()
        return _row_to_order(row) if row else None

    def save(self, order: Order) -> None:
        self._conn.execute(
            text(
                f"""
                INSERT INTO orders ({_ORDER_COLUMNS})
                VALUES (:order_id, :customer_id, :asset_name, :side,
                        :size, :price, :status, :created_at)
                ON CONFLICT (order_id)
                DO UPDATE SET status = EXCLUDED.status
                """
            ),
            {
                "order_id": order.order_id,
                "customer_id": order.customer_id,
                "asset_name": order.asset_name,
                "side": order.side.value,
                "size": _amount_to_db(order.size),
                "price": _amount_to_db(order.price),
                "status": order.status.value,
                "created_at": _timestamp_to_db(order.created_at),
            },
        )

    def list_by_customer(
        self,
        customer_id: str,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> list[Order]:
        query = f"SELECT {_ORDER_COLUMNS} FROM orders WHERE customer_id = :customer_id"
        params: dict[str, str] = {"customer_id": customer_id}

        if start is not None:
            query += " AND created_at >= :start"
            params["start"] = _timestamp_to_db(start)

        if end is not None:
            query += " AND created_at <= :end"
            params["end"] = _timestamp_to_db(end)

        query += " ORDER BY created_at DESC"
        rows = self._conn.execute(text(query), params).fetchall()
        return [_row_to_order(r) for r in rows]

    def list_by_status(self, status: OrderStatus) -> list[Order]:
        rows = self._conn.execute(
            text(
                f"""
                SELECT {_ORDER_COLUMNS} FROM orders
                WHERE status = :status
                ORDER BY created_at ASC
                """
            ),
            {"status": status.value},
        ).fetchall()
        return [_row_to_order(r) for r in rows]


class SqlUnitOfWork(UnitOfWork):
    """One database transaction spanning both repositories."""

    def __init__(self, engine: Engine) -> None:
        self._engine = engine
        self._connection: Optional[Connection] = None
        self._transaction: Optional[Transaction] = None

    def __enter__(self) -> "SqlUnitOfWork":
        self._connection = self._engine.connect()
        self._transaction = self._connection.begin()
        # SQLite has no row locks; it serializes writers on the whole file.
        lock_rows = self._connection.dialect.name != "sqlite"
        self.balances = _SqlBalanceRepository(self._connection, lock_rows)
        self.orders = _SqlOrderRepository(self._connection, lock_rows)
        return self

    def __exit__(
        self,
        exc_type: Optional[type[BaseException]],
        exc: Optional[BaseException],
        tb: Optional[TracebackType],
    ) -> None:
        try:
            super().__exit__(exc_type, exc, tb)
        finally:
            if self._connection is not None:
                self._connection.close()
                self._connection = None

    def commit(self) -> None:
        self._transaction.commit()

    def rollback(self) -> None:
        if self._transaction is not None and self._transaction.is_active:
            self._transaction.rollback()


class SqlStore:
    """Owns the engine and hands out units of work on it."""

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    @classmethod
    def from_url(cls, database_url: str) -> "SqlStore":
        """Build a store from a SQLAlchemy database URL."""
        return cls(create_engine(database_url, pool_pre_ping=True))

    @property
    def engine(self) -> Engine:
        return self._engine

    def create_schema(self) -> None:
        """Create the balances and orders tables if they do not exist."""
        with self._engine.begin() as conn:
            for statement in SCHEMA_STATEMENTS:
                conn.execute(text(statement))
        logger.info("Brokerage schema ready on %s", self._engine.url.render_as_string(hide_password=True))

    def unit_of_work(self) -> SqlUnitOfWork:
        return SqlUnitOfWork(self._engine)
