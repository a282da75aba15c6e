"""
Tests for shipment creation and manual tracking entry.
"""

import json

import pytest

from petshop_shipping.app.domain.shipping.creation import ShipmentCreator
from petshop_shipping.app.schemas.order import OrderRecord, ShipmentStage
from petshop_shipping.app.schemas.tracking import ErrorKind


@pytest.fixture
def creator(tracking_client, board):
    return ShipmentCreator(tracking_client, board)


# TEST 1: Confirmation depends on the invoice
@pytest.mark.asyncio
async def test_create_with_invoice(creator, backend, board, unshipped_order):
    backend.invoice_url = "https://invoices.example/SR-1.pdf"

    outcome = await creator.create_shipment("ord-2002")

    assert outcome.success is True
    assert outcome.message == "Shipment created successfully! The invoice is ready to download."
    assert outcome.invoice_url == "https://invoices.example/SR-1.pdf"

    order = board.get("ord-2002")
    assert order.shipment_id == "SR-1"
    assert order.invoice_url == "https://invoices.example/SR-1.pdf"
    assert order.stage == ShipmentStage.PROCESSING


@pytest.mark.asyncio
async def test_create_without_invoice(creator, board, unshipped_order):
    outcome = await creator.create_shipment("ord-2002")

    assert outcome.success is True
    assert outcome.message == "Shipment created successfully!"
    assert outcome.invoice_url is None
    assert board.get("ord-2002").invoice_url is None


# TEST 2: Creation is only for unshipped orders
@pytest.mark.asyncio
async def test_create_on_shipped_order_rejected(creator, backend, shipped_order):
    outcome = await creator.create_shipment("ord-1001")

    assert outcome.success is False
    assert outcome.message == "Shipment already created for this order"
    assert outcome.error_kind == ErrorKind.VALIDATION
    assert backend.requests_to("create") == []


@pytest.mark.asyncio
async def test_create_failure_surfaces_backend_message(creator, backend, board, unshipped_order):
    backend.fail("create", status_code=422, body={"message": "Pickup address incomplete"})

    outcome = await creator.create_shipment("ord-2002")

    assert outcome.success is False
    assert outcome.message == "Pickup address incomplete"
    assert board.get("ord-2002").stage == ShipmentStage.UNSHIPPED


# TEST 3: Manual tracking entry
@pytest.mark.asyncio
async def test_update_tracking_links_awb_on_unshipped_order(creator, backend, board, unshipped_order):
    outcome = await creator.update_tracking("ord-2002", {"awbNumber": "AWB999", "courier": "Bluedart"})

    assert outcome.success is True
    order = board.get("ord-2002")
    assert order.awb_number == "AWB999"
    assert order.courier == "Bluedart"
    assert order.stage == ShipmentStage.DISPATCHED


@pytest.mark.asyncio
async def test_update_tracking_courier_only_on_unshipped_order_rejected(creator, backend, unshipped_order):
    outcome = await creator.update_tracking("ord-2002", {"courier": "Bluedart"})

    assert outcome.success is False
    assert outcome.message == "Create a shipment for this order first"
    assert backend.requests == []


@pytest.mark.asyncio
async def test_update_tracking_checks_status_transition(creator, backend, shipped_order):
    outcome = await creator.update_tracking("ord-1001", {"courier": "Bluedart", "shipmentStatus": "Pending"})

    assert outcome.success is False
    assert outcome.error == "ERR_SHIPMENT_001"
    assert backend.requests_to("update") == []


@pytest.mark.asyncio
async def test_update_tracking_with_forward_status(creator, backend, board, shipped_order):
    outcome = await creator.update_tracking("ord-1001", {"awbNumber": "AWB777", "shipmentStatus": "Delivered"})

    assert outcome.success is True
    assert json.loads(backend.requests[-1].content) == {"awbNumber": "AWB777", "shipmentStatus": "Delivered"}
    order = board.get("ord-1001")
    assert order.awb_number == "AWB777"
    assert order.shipment_status == "Delivered"


# TEST 4: Booking confirmed without shipment details
@pytest.mark.asyncio
async def test_create_confirmed_by_message_only(creator, backend, board, unshipped_order):
    backend.fail("create", status_code=201, body={"message": "Shipment created"})

    outcome = await creator.create_shipment("ord-2002")

    assert outcome.success is True
    assert outcome.message == "Shipment created successfully!"
    assert outcome.shipment is None
    assert outcome.invoice_url is None


# TEST 5: Leaving a special status through manual tracking entry is flagged
@pytest.mark.asyncio
async def test_update_tracking_reports_unconstrained(creator, backend, board, shipped_order):
    board.merge_order("ord-1001", OrderRecord.model_validate({"_id": "ord-1001", "shipmentStatus": "Returning"}))
    backend.orders["ord-1001"]["shipmentStatus"] = "Returning"

    outcome = await creator.update_tracking("ord-1001", {"courier": "Bluedart", "shipmentStatus": "Processing"})

    assert outcome.success is True
    assert outcome.unconstrained is True
    assert board.get("ord-1001").shipment_status == "Processing"


@pytest.mark.asyncio
async def test_update_tracking_without_status_is_constrained(creator, shipped_order):
    outcome = await creator.update_tracking("ord-1001", {"courier": "Bluedart"})

    assert outcome.success is True
    assert outcome.unconstrained is False
