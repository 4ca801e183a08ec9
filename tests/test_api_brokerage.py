"""
Tests for the brokerage API endpoints.

Drives the FastAPI app through TestClient with fresh in-memory services
per test. Validates status codes, response bodies and error mapping.
"""

from decimal import Decimal
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from app.core.config import Settings
from app.domain.brokerage.errors import OrderNotFoundError
from app.domain.brokerage.ledger import Ledger
from app.domain.brokerage.order_lifecycle import OrderLifecycle
from app.infrastructure.brokerage.memory_store import InMemoryStore
from app.interfaces.brokerage.dependencies import BrokerageServices
from app.main import create_app

API = "/api/v1"


def _services() -> BrokerageServices:
    store = InMemoryStore()
    ledger = Ledger(store.unit_of_work)
    return BrokerageServices(store=store, ledger=ledger, lifecycle=OrderLifecycle(ledger))


@pytest.fixture
def services() -> BrokerageServices:
    services = _services()
    services.ledger.increase("CUST001", "TRY", Decimal("10000"))
    services.ledger.increase("CUST001", "AAPL", Decimal("50"))
    return services


@pytest.fixture
def client(services: BrokerageServices) -> TestClient:
    app = create_app(Settings(rate_limit_enabled=False), services=services)
    return TestClient(app)


def _place(client: TestClient, side: str = "BUY", size: str = "10", price: str = "150") -> dict:
    response = client.post(
        f"{API}/orders",
        json={
            "customer_id": "CUST001",
            "asset_name": "AAPL",
            "side": side,
            "size": size,
            "price": price,
        },
    )
    assert response.status_code == 201, response.text
    return response.json()


def _asset(client: TestClient, asset_name: str, customer_id: str = "CUST001") -> dict:
    response = client.get(f"{API}/assets/{asset_name}", params={"customer_id": customer_id})
    assert response.status_code == 200, response.text
    return response.json()


class TestHealthEndpoint:
    """Tests for GET /api/v1/health."""

    def test_health(self, client: TestClient) -> None:
        """Health returns ok and the configured version."""
        response = client.get(f"{API}/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok", "version": Settings().version}


class TestOrdersEndpoints:
    """Tests for /api/v1/orders."""

    def test_create_order(self, client: TestClient) -> None:
        """POST /orders returns 201 with the PENDING order and reserves cash."""
        body = _place(client)
        assert body["status"] == "PENDING"
        assert body["side"] == "BUY"
        assert Decimal(body["total_value"]) == Decimal("1500")
        assert Decimal(_asset(client, "TRY")["usable"]) == Decimal("8500")

    def test_insufficient_funds(self, client: TestClient) -> None:
        """An unaffordable BUY returns 400 INSUFFICIENT_FUNDS."""
        response = client.post(
            f"{API}/orders",
            json={
                "customer_id": "CUST001",
                "asset_name": "AAPL",
                "side": "BUY",
                "size": "100",
                "price": "200",
            },
        )
        assert response.status_code == 400
        assert response.json()["error"] == "INSUFFICIENT_FUNDS"
        assert "Required: 20000" in response.json()["detail"]
        assert Decimal(_asset(client, "TRY")["usable"]) == Decimal("10000")

    def test_cash_self_trade_rejected(self, client: TestClient) -> None:
        """Ordering the cash asset returns 400 INVALID_ARGUMENT."""
        response = client.post(
            f"{API}/orders",
            json={"customer_id": "CUST001", "asset_name": "TRY", "side": "BUY", "size": "1", "price": "1"},
        )
        assert response.status_code == 400
        assert response.json()["error"] == "INVALID_ARGUMENT"

    @pytest.mark.parametrize(
        "overrides",
        [
            {"side": "HOLD"},
            {"size": "0"},
            {"price": "-1"},
            {"customer_id": ""},
            {"size": "1e500000", "price": "1e600000"},
            {"size": "0.0000000001"},
            {"price": "1.001"},
            {"size": "100000000000000000"},
        ],
    )
    def test_schema_validation(self, client: TestClient, overrides: dict) -> None:
        """Malformed bodies are rejected with 422 before reaching the engine."""
        payload = {"customer_id": "CUST001", "asset_name": "AAPL", "side": "BUY", "size": "1", "price": "1"}
        payload.update(overrides)
        assert client.post(f"{API}/orders", json=payload).status_code == 422

    def test_total_value_out_of_range(self, client: TestClient) -> None:
        """A size and price that are each valid but whose product is too large return 400."""
        response = client.post(
            f"{API}/orders",
            json={
                "customer_id": "CUST001",
                "asset_name": "AAPL",
                "side": "BUY",
                "size": "9999999999999999",
                "price": "9999999999999999",
            },
        )
        assert response.status_code == 400
        assert response.json()["error"] == "INVALID_ARGUMENT"
        assert Decimal(_asset(client, "TRY")["usable"]) == Decimal("10000")

    def test_get_and_list_orders(self, client: TestClient) -> None:
        """Orders can be fetched by id and listed newest first."""
        first = _place(client, size="1")
        second = _place(client, size="2")

        response = client.get(f"{API}/orders/{first['order_id']}", params={"customer_id": "CUST001"})
        assert response.status_code == 200
        assert response.json()["order_id"] == first["order_id"]

        listed = client.get(f"{API}/orders", params={"customer_id": "CUST001"}).json()
        assert [o["order_id"] for o in listed] == [second["order_id"], first["order_id"]]

    def test_list_orders_date_range(self, client: TestClient) -> None:
        """start_date and end_date are inclusive bounds; inverted ranges are 400."""
        order = _place(client)
        created = order["created_at"]

        response = client.get(
            f"{API}/orders",
            params={"customer_id": "CUST001", "start_date": created, "end_date": created},
        )
        assert [o["order_id"] for o in response.json()] == [order["order_id"]]

        response = client.get(
            f"{API}/orders",
            params={
                "customer_id": "CUST001",
                "start_date": "2030-01-02T00:00:00Z",
                "end_date": "2030-01-01T00:00:00Z",
            },
        )
        assert response.status_code == 400
        assert response.json()["error"] == "INVALID_ARGUMENT"

    def test_order_of_other_customer_is_hidden(self, client: TestClient) -> None:
        """Another customer's order id returns 404 ORDER_NOT_FOUND."""
        order = _place(client)
        response = client.get(f"{API}/orders/{order['order_id']}", params={"customer_id": "CUST002"})
        assert response.status_code == 404
        assert response.json()["error"] == "ORDER_NOT_FOUND"

    def test_cancel_order(self, client: TestClient) -> None:
        """DELETE returns 204 and restores usable; a second cancel is 400."""
        order = _place(client)
        url = f"{API}/orders/{order['order_id']}"

        response = client.delete(url, params={"customer_id": "CUST001"})
        assert response.status_code == 204
        assert response.content == b""
        assert Decimal(_asset(client, "TRY")["usable"]) == Decimal("10000")

        response = client.delete(url, params={"customer_id": "CUST001"})
        assert response.status_code == 400
        assert response.json()["error"] == "INVALID_ORDER_STATUS"

    def test_customer_id_required(self, client: TestClient) -> None:
        """Customer-scoped routes require the customer_id query parameter."""
        assert client.get(f"{API}/orders").status_code == 422
        assert client.get(f"{API}/assets").status_code == 422


class TestAssetsEndpoints:
    """Tests for /api/v1/assets."""

    def test_list_assets(self, client: TestClient) -> None:
        """Balances are listed by asset name with reserved amounts."""
        _place(client, side="SELL", size="5")
        body = client.get(f"{API}/assets", params={"customer_id": "CUST001"}).json()
        assert [b["asset_name"] for b in body] == ["AAPL", "TRY"]
        assert Decimal(body[0]["reserved"]) == Decimal("5")

    def test_missing_asset(self, client: TestClient) -> None:
        """Unknown balances return 404 ASSET_NOT_FOUND."""
        response = client.get(f"{API}/assets/GOOG", params={"customer_id": "CUST001"})
        assert response.status_code == 404
        assert response.json() == {
            "error": "ASSET_NOT_FOUND",
            "detail": "Asset GOOG not found for customer CUST001",
        }


class TestAdminEndpoints:
    """Tests for /api/v1/admin."""

    def test_match_by_body(self, client: TestClient) -> None:
        """Matching a BUY settles cash and credits the asset."""
        order = _place(client)
        response = client.post(f"{API}/admin/match-order", json={"order_id": order["order_id"]})
        assert response.status_code == 200
        assert response.json()["status"] == "MATCHED"

        cash = _asset(client, "TRY")
        assert Decimal(cash["total"]) == Decimal("8500")
        assert Decimal(cash["usable"]) == Decimal("8500")
        assert Decimal(_asset(client, "AAPL")["total"]) == Decimal("60")

    def test_match_by_path_and_rematch(self, client: TestClient) -> None:
        """The path variant matches; matching again returns 400."""
        order = _place(client, side="SELL")
        url = f"{API}/admin/orders/{order['order_id']}/match"
        assert client.post(url).status_code == 200
        response = client.post(url)
        assert response.status_code == 400
        assert response.json()["error"] == "INVALID_ORDER_STATUS"

    def test_match_unknown(self, client: TestClient) -> None:
        """Unknown order ids return 404."""
        response = client.post(f"{API}/admin/match-order", json={"order_id": "missing"})
        assert response.status_code == 404
        assert response.json()["error"] == "ORDER_NOT_FOUND"

    def test_pending_orders(self, client: TestClient) -> None:
        """Only PENDING orders are listed, oldest first."""
        first = _place(client, size="1")
        second = _place(client, size="2")
        third = _place(client, size="3")
        client.delete(f"{API}/orders/{second['order_id']}", params={"customer_id": "CUST001"})

        body = client.get(f"{API}/admin/pending-orders").json()
        assert [o["order_id"] for o in body] == [first["order_id"], third["order_id"]]

    def test_deposit(self, client: TestClient) -> None:
        """Deposits open new balances; non-positive or too fine amounts are 422."""
        response = client.post(
            f"{API}/admin/assets/deposit",
            json={"customer_id": "CUST002", "asset_name": "TRY", "amount": "250.75"},
        )
        assert response.status_code == 200
        assert Decimal(response.json()["total"]) == Decimal("250.75")

        response = client.post(
            f"{API}/admin/assets/deposit",
            json={"customer_id": "CUST002", "asset_name": "TRY", "amount": "0"},
        )
        assert response.status_code == 422

        response = client.post(
            f"{API}/admin/assets/deposit",
            json={"customer_id": "CUST002", "asset_name": "TRY", "amount": "0.00001"},
        )
        assert response.status_code == 422


class TestCrossCutting:
    """Tests for security headers, rate limiting and unexpected errors."""

    def test_security_headers_present(self, client: TestClient) -> None:
        """Secure headers are set on every response."""
        response = client.get(f"{API}/health")
        assert response.headers["X-Content-Type-Options"] == "nosniff"
        assert response.headers["X-Frame-Options"] == "DENY"
        assert response.headers["Cache-Control"] == "no-store"

    def test_rate_limit_returns_429(self) -> None:
        """Exceeding the default limit returns HTTP 429."""
        app = create_app(Settings(rate_limit_default="2/minute"), services=_services())
        client = TestClient(app)
        statuses = [client.get(f"{API}/health").status_code for _ in range(3)]
        assert statuses == [200, 200, 429]

    def test_unexpected_error_is_opaque(self) -> None:
        """Non-domain failures return 500 without internals."""
        services = _services()
        services.lifecycle = MagicMock(spec=OrderLifecycle)
        services.lifecycle.list_pending_orders.side_effect = RuntimeError("database exploded")
        app = create_app(Settings(rate_limit_enabled=False), services=services)
        client = TestClient(app, raise_server_exceptions=False)

        response = client.get(f"{API}/admin/pending-orders")
        assert response.status_code == 500
        assert response.json() == {"error": "INTERNAL_ERROR", "detail": "Internal server error"}
        assert "exploded" not in response.text

    def test_domain_error_subclass_keeps_its_mapping(self) -> None:
        """A specialised domain error is mapped like the error it extends."""

        class ArchivedOrderNotFoundError(OrderNotFoundError):
            pass

        services = _services()
        services.lifecycle = MagicMock(spec=OrderLifecycle)
        services.lifecycle.get_order.side_effect = ArchivedOrderNotFoundError("ORD-1", "CUST001")
        app = create_app(Settings(rate_limit_enabled=False), services=services)
        client = TestClient(app, raise_server_exceptions=False)

        response = client.get(f"{API}/orders/ORD-1", params={"customer_id": "CUST001"})
        assert response.status_code == 404
        assert response.json() == {
            "error": "ORDER_NOT_FOUND",
            "detail": "Order ORD-1 not found for customer CUST001",
        }
