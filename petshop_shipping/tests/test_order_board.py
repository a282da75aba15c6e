"""
Unit tests for the order board (filters and merge semantics).
"""

import pytest

from petshop_shipping.app.core.exceptions import ResourceNotFoundError
from petshop_shipping.app.schemas.order import OrderRecord, ShipmentStage
from petshop_shipping.app.services.order_board import BoardFilter, OrderBoard


def _order(**data):
    return OrderRecord.model_validate(data)


@pytest.fixture
def loaded_board():
    return OrderBoard([
        _order(_id="a1", orderId="PET-100", awbNumber="AWB-DEL-1", shipmentId="SR-1",
               shipmentStatus="Shipped", paymentInfo={"status": "Paid", "amount": 10}),
        _order(_id="b2", orderId="PET-200", paymentInfo={"status": "Pending", "amount": 20}),
        _order(_id="c3", orderId="PET-300", shipmentId="SR-3", paymentInfo={"status": "Paid", "amount": 30}),
    ])


def test_order_record_defaults():
    order = _order(_id=42)
    assert order.id == "42"
    assert order.shipment_status == "Pending"
    assert order.stage == ShipmentStage.UNSHIPPED
    assert order.is_paid is False


def test_order_record_keeps_unknown_status():
    order = _order(_id="x", shipmentStatus="Lost in depot")
    assert order.shipment_status == "Lost in depot"
    assert order.status is None


@pytest.mark.parametrize("status_filter,expected", [
    (BoardFilter.ALL, ["a1", "b2", "c3"]),
    (BoardFilter.SHIPPED, ["a1"]),
    (BoardFilter.UNSHIPPED, ["b2", "c3"]),
    (BoardFilter.PAID, ["a1", "c3"]),
])
def test_filters(loaded_board, status_filter, expected):
    assert [order.id for order in loaded_board.filter(status_filter=status_filter)] == expected


def test_search_matches_ids_and_awb(loaded_board):
    assert [o.id for o in loaded_board.filter(search="pet-2")] == ["b2"]
    assert [o.id for o in loaded_board.filter(search="awb-del")] == ["a1"]
    assert [o.id for o in loaded_board.filter(search="C3")] == ["c3"]
    assert loaded_board.filter(search="nothing") == []


def test_unknown_filter_rejected(loaded_board):
    with pytest.raises(ValueError):
        loaded_board.filter(status_filter="archived")


def test_require_unknown_order(loaded_board):
    with pytest.raises(ResourceNotFoundError):
        loaded_board.require("zz")


def test_merge_only_sent_fields(loaded_board):
    changed = loaded_board.merge_order("a1", _order(_id="a1", courier="Bluedart"))

    assert changed is True
    order = loaded_board.get("a1")
    assert order.courier == "Bluedart"
    assert order.awb_number == "AWB-DEL-1"
    assert order.shipment_status == "Shipped"


def test_merge_restricted_to_fields(loaded_board):
    source = _order(_id="a1", shipmentStatus="Delivered", paymentInfo={"status": "Refunded"})

    loaded_board.merge_order("a1", source, fields=("shipmentStatus",))

    order = loaded_board.get("a1")
    assert order.shipment_status == "Delivered"
    assert order.payment_info.status == "Paid"


def test_merge_equal_values_is_noop(loaded_board):
    before = loaded_board.snapshot("a1")

    changed = loaded_board.merge_order("a1", _order(_id="a1", shipmentStatus="Shipped", awbNumber="AWB-DEL-1"))

    assert changed is False
    assert loaded_board.snapshot("a1") == before


def test_merge_unknown_order_adds_it(loaded_board):
    assert loaded_board.merge_order("d4", _order(_id="d4", shipmentStatus="Processing")) is True
    assert "d4" in loaded_board
    assert len(loaded_board) == 4


def test_reload_keeps_tracking_of_remaining_orders(loaded_board):
    loaded_board.merge_tracking("a1", {"current_status": "In Transit"})
    loaded_board.merge_tracking("b2", {"current_status": "Pickup Scheduled"})

    loaded_board.load([_order(_id="a1")])

    assert loaded_board.tracking_for("a1") == {"current_status": "In Transit"}
    assert loaded_board.tracking_for("b2") == {}


def test_merge_tracking_reports_change(loaded_board):
    assert loaded_board.merge_tracking("a1", {"current_status": "In Transit"}) is True
    assert loaded_board.merge_tracking("a1", {"current_status": "In Transit"}) is False
    assert loaded_board.merge_tracking("a1", None) is False


def test_merge_nested_record_keeps_absent_keys(loaded_board):
    source = _order(_id="a1", shipmentStatus="Processing", paymentInfo={"status": "Refunded"})

    assert loaded_board.merge_order("a1", source) is True

    order = loaded_board.get("a1")
    assert order.shipment_status == "Processing"
    assert order.payment_info.status == "Refunded"
    assert order.payment_info.amount == 10


def test_merge_partial_nested_record_with_equal_values_is_noop(loaded_board):
    before = loaded_board.snapshot("a1")

    changed = loaded_board.merge_order("a1", _order(_id="a1", paymentInfo={"status": "Paid"}))

    assert changed is False
    assert loaded_board.snapshot("a1") == before
