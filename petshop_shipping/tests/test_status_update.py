"""
Tests for manual shipment status updates.

Covers:
1. Backward moves rejected before any request is sent
2. Forward moves persisted and merged into the board
3. Backend failures surfaced verbatim
4. Special statuses and the unconstrained flag
"""

import json

import pytest

from petshop_shipping.app.domain.shipping.status_update import ShipmentStatusUpdater
from petshop_shipping.app.models.shipment_enums import ShipmentStatus
from petshop_shipping.app.schemas.tracking import ErrorKind


@pytest.fixture
def updater(tracking_client, board):
    return ShipmentStatusUpdater(tracking_client, board)


# TEST 1: Backward moves are rejected locally
@pytest.mark.asyncio
async def test_backward_move_rejected_without_request(updater, backend, board, shipped_order):
    outcome = await updater.update_status("ord-1001", ShipmentStatus.PROCESSING)

    assert outcome.success is False
    assert outcome.error_kind == ErrorKind.VALIDATION
    assert outcome.error == "ERR_SHIPMENT_001"
    assert "'Shipped'" in outcome.message
    assert "'Processing'" in outcome.message
    assert backend.requests_to("update") == []
    assert board.get("ord-1001").shipment_status == "Shipped"


# TEST 2: Forward moves are persisted
@pytest.mark.asyncio
async def test_forward_move_persisted(updater, backend, board, shipped_order):
    outcome = await updater.update_status("ord-1001", ShipmentStatus.OUT_FOR_DELIVERY)

    assert outcome.success is True
    assert outcome.message == "Order tracking updated"
    assert outcome.order.shipment_status == "Out for Delivery"
    assert outcome.unconstrained is False

    request = backend.requests_to("update")[-1]
    assert request.method == "PUT"
    assert json.loads(request.content) == {"shipmentStatus": "Out for Delivery"}
    assert backend.orders["ord-1001"]["shipmentStatus"] == "Out for Delivery"
    assert board.get("ord-1001").shipment_status == "Out for Delivery"


@pytest.mark.asyncio
async def test_same_status_is_sent(updater, backend, shipped_order):
    outcome = await updater.update_status("ord-1001", ShipmentStatus.SHIPPED)

    assert outcome.success is True
    assert len(backend.requests_to("update")) == 1


# TEST 3: Backend failures
@pytest.mark.asyncio
async def test_backend_message_returned_verbatim(updater, backend, board, shipped_order):
    backend.fail("update", status_code=403, body={"message": "Admin access required"})

    outcome = await updater.update_status("ord-1001", ShipmentStatus.DELIVERED)

    assert outcome.success is False
    assert outcome.message == "Admin access required"
    assert outcome.error_kind == ErrorKind.BACKEND
    assert board.get("ord-1001").shipment_status == "Shipped"


@pytest.mark.asyncio
async def test_backend_failure_without_message(updater, backend, shipped_order):
    backend.fail("update", status_code=500)

    outcome = await updater.update_status("ord-1001", ShipmentStatus.DELIVERED)

    assert outcome.success is False
    assert outcome.message == "Failed to update order tracking information"


# TEST 4: Special statuses
@pytest.mark.asyncio
async def test_special_status_always_allowed(updater, board, shipped_order):
    outcome = await updater.update_status("ord-1001", ShipmentStatus.CANCELLED)

    assert outcome.success is True
    assert board.get("ord-1001").shipment_status == "Cancelled"


@pytest.mark.asyncio
async def test_leaving_special_status_is_flagged(updater, backend, board, shipped_order):
    await updater.update_status("ord-1001", ShipmentStatus.RETURNING)

    outcome = await updater.update_status("ord-1001", ShipmentStatus.PROCESSING)

    assert outcome.success is True
    assert outcome.unconstrained is True
    assert board.get("ord-1001").shipment_status == "Processing"


# TEST 5: Stage gating
@pytest.mark.asyncio
async def test_unshipped_order_status_update_rejected(updater, backend, unshipped_order):
    outcome = await updater.update_status("ord-2002", ShipmentStatus.PROCESSING)

    assert outcome.success is False
    assert outcome.message == "Create a shipment for this order first"
    assert outcome.error == "ERR_SHIPMENT_002"
    assert backend.requests == []
