"""
Centralized Test Configuration.
"""

import json
from typing import Any, Dict, List, Optional
from urllib.parse import unquote

import httpx
import pytest
from httpx import AsyncClient, ASGITransport

from petshop_shipping.app.main import app
from petshop_shipping.app.core.dependencies import get_backend_transport
from petshop_shipping.app.core.session import InMemorySessionStore
from petshop_shipping.app.schemas.order import OrderRecord
from petshop_shipping.app.services.order_board import OrderBoard
from petshop_shipping.app.services.orders_client import OrdersClient
from petshop_shipping.app.services.tracking_client import TrackingClient

TEST_BACKEND_URL = "http://backend.test"
TEST_TOKEN = "admin-session-token"

TRACKING_PREFIX = "/api/v1/tracking"
ORDERS_PREFIX = "/api/v1/orders"


class FakeTrackingBackend:
    """
    In-process stand-in for the storefront backend's tracking API.

    Orders are kept in wire format; ``carrier`` holds what the carrier
    currently reports per order and is what sync reconciles against.
    """

    def __init__(self):
        self.orders: Dict[str, Dict[str, Any]] = {}
        self.carrier: Dict[str, Dict[str, Any]] = {}
        self.requests: List[httpx.Request] = []
        self.failures: Dict[str, Any] = {}
        self.invoice_url: Optional[str] = None
        self._shipment_seq = 0

    # Test helpers

    def add_order(self, order_id: str, **fields) -> Dict[str, Any]:
        order = {"_id": order_id, "orderId": f"PET-{order_id}"}
        order.update(fields)
        self.orders[order_id] = order
        return order

    def carrier_reports(self, order_id: str, status: str, **tracking) -> None:
        report = {"current_status": status}
        report.update(tracking)
        self.carrier[order_id] = report

    def fail(self, route: str, status_code: int = 500, body: Any = None) -> None:
        """Make the next request to ``route`` (e.g. "sync-status") fail."""
        self.failures[route] = (status_code, body)

    def disconnect(self, route: str) -> None:
        self.failures[route] = "disconnect"

    def requests_to(self, route: str) -> List[httpx.Request]:
        return [request for request in self.requests if route in request.url.path]

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    # Request handling

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = unquote(request.url.path)

        for route, failure in list(self.failures.items()):
            if route in path:
                del self.failures[route]
                if failure == "disconnect":
                    raise httpx.ConnectError("Connection refused", request=request)
                status_code, body = failure
                if body is None:
                    return httpx.Response(status_code)
                return httpx.Response(status_code, json=body)

        if path == f"{ORDERS_PREFIX}/all":
            return httpx.Response(200, json={"orders": list(self.orders.values())})

        if not path.startswith(TRACKING_PREFIX):
            return httpx.Response(404, json={"message": "Not found"})

        route = path[len(TRACKING_PREFIX):]
        if route.startswith("/create/"):
            return self._create(route[len("/create/"):])
        if route == "/track":
            return self._track(request)
        if route.startswith("/update/"):
            return self._update(route[len("/update/"):], json.loads(request.content or b"{}"))
        if route.startswith("/sync-status/"):
            return self._sync(route[len("/sync-status/"):])
        if route == "/couriers":
            return httpx.Response(200, json={"couriers": [
                {"courier_name": "Delhivery", "rate": 72.5, "etd": "3 days"},
                {"courier_name": "Bluedart", "rate": 110.0, "etd": "2 days"},
            ]})
        if route == "/pickup-locations":
            return httpx.Response(200, json={"pickupLocations": [{"pickup_location": "Warehouse-1"}]})
        if route.startswith("/return/"):
            order_id = route[len("/return/"):]
            order = self.orders.get(order_id)
            if order is None:
                return httpx.Response(404, json={"message": "Order not found"})
            order["shipmentStatus"] = "Returning"
            return httpx.Response(200, json={"order": order})
        return httpx.Response(404, json={"message": "Not found"})

    def _create(self, order_id: str) -> httpx.Response:
        order = self.orders.get(order_id)
        if order is None:
            return httpx.Response(404, json={"message": "Order not found"})
        if order.get("shipmentId"):
            return httpx.Response(400, json={"message": "Shipment already exists for this order"})
        self._shipment_seq += 1
        shipment = {"shipment_id": f"SR-{self._shipment_seq}", "order_id": order_id}
        if self.invoice_url:
            shipment["invoice_url"] = self.invoice_url
        order["shipmentId"] = shipment["shipment_id"]
        order["shipmentStatus"] = "Processing"
        return httpx.Response(201, json={"shipment": shipment})

    def _track(self, request: httpx.Request) -> httpx.Response:
        order_id = request.url.params.get("orderId")
        awb = request.url.params.get("awb")
        if awb:
            matches = [oid for oid, order in self.orders.items() if order.get("awbNumber") == awb]
            if not matches:
                return httpx.Response(404, json={"message": "No shipment found for this AWB"})
            return httpx.Response(200, json={"tracking": self.carrier.get(matches[0], {})})
        order = self.orders.get(order_id)
        if order is None:
            return httpx.Response(404, json={"message": "Order not found"})
        return httpx.Response(200, json={
            "tracking": self.carrier.get(order_id, {}),
            "orderDetails": order,
        })

    def _update(self, order_id: str, body: Dict[str, Any]) -> httpx.Response:
        order = self.orders.get(order_id)
        if order is None:
            return httpx.Response(404, json={"message": "Order not found"})
        order.update(body)
        return httpx.Response(200, json={"order": order, "message": "Order tracking updated"})

    def _sync(self, order_id: str) -> httpx.Response:
        order = self.orders.get(order_id)
        if order is None:
            return httpx.Response(404, json={"message": "Order not found"})
        tracking = self.carrier.get(order_id)
        if tracking is None:
            return httpx.Response(400, json={"message": "No tracking data available from carrier"})
        status_updated = order.get("shipmentStatus") != tracking["current_status"]
        order["shipmentStatus"] = tracking["current_status"]
        if tracking.get("awb"):
            order["awbNumber"] = tracking["awb"]
        if tracking.get("courier_name"):
            order["courier"] = tracking["courier_name"]
        return httpx.Response(200, json={
            "order": order,
            "tracking": tracking,
            "statusUpdated": status_updated,
            "message": "Status updated" if status_updated else "Status already up to date",
        })


# Mock Redis for reliability in CI/CD
class MockRedis:
    def __init__(self):
        self.store = {}
        self._closed = False

    async def ping(self):
        return not self._closed

    async def get(self, key):
        if self._closed:
            return None
        return self.store.get(key)

    async def set(self, key, value, ex=None):
        if self._closed:
            return False
        self.store[key] = value
        return True

    async def delete(self, key):
        if key in self.store:
            del self.store[key]
            return 1
        return 0

    async def aclose(self):
        self._closed = True
        self.store = {}


# Redis Fixture
@pytest.fixture
def mock_redis():
    return MockRedis()


@pytest.fixture
def backend():
    return FakeTrackingBackend()


@pytest.fixture
def session_store():
    return InMemorySessionStore({"token": TEST_TOKEN})


@pytest.fixture
async def tracking_client(backend, session_store):
    client = TrackingClient(session_store, base_url=TEST_BACKEND_URL, transport=backend.transport)
    yield client
    await client.aclose()


@pytest.fixture
async def orders_client(backend, session_store):
    client = OrdersClient(session_store, base_url=TEST_BACKEND_URL, transport=backend.transport)
    yield client
    await client.aclose()


@pytest.fixture
def board():
    return OrderBoard()


@pytest.fixture
def shipped_order(backend, board):
    """Order with a booked, dispatched shipment in status Shipped."""
    wire = backend.add_order(
        "ord-1001",
        shipmentId="SR-77",
        awbNumber="AWB123456",
        shipmentStatus="Shipped",
        courier="Delhivery",
        paymentInfo={"status": "Paid", "amount": 1499.0},
    )
    board.load([OrderRecord.model_validate(dict(wire))])
    return board.get("ord-1001")


@pytest.fixture
def unshipped_order(backend, board):
    wire = backend.add_order("ord-2002", paymentInfo={"status": "Pending", "amount": 799.0})
    board.load(board.orders() + [OrderRecord.model_validate(dict(wire))])
    return board.get("ord-2002")


@pytest.fixture
async def client(backend):
    """Async client for the admin API, wired to the fake backend."""
    async def override_transport():
        return backend.transport

    app.dependency_overrides[get_backend_transport] = override_transport
    app.state.order_board = OrderBoard()
    app.state.session_store = InMemorySessionStore({"token": TEST_TOKEN})

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides = {}
