"""
Which shipment actions each order stage allows.

An unshipped order (no shipment id, no AWB) can only have a shipment created.
Once a shipment exists it can be tracked, synced and have its status edited,
but not created again.
"""

from petshop_shipping.app.core.exceptions import ShipmentStageError
from petshop_shipping.app.schemas.order import OrderRecord, ShipmentStage


class ShipmentAction:
    CREATE_SHIPMENT = "create_shipment"
    UPDATE_STATUS = "update_status"
    UPDATE_TRACKING = "update_tracking"
    SYNC_STATUS = "sync_status"


def allowed_actions(order: OrderRecord) -> frozenset:
    if order.stage == ShipmentStage.UNSHIPPED:
        return frozenset({ShipmentAction.CREATE_SHIPMENT})
    return frozenset({
        ShipmentAction.UPDATE_STATUS,
        ShipmentAction.UPDATE_TRACKING,
        ShipmentAction.SYNC_STATUS,
    })


def require_action(order: OrderRecord, action: str) -> None:
    """
    Raises:
        ShipmentStageError: action not available at the order's stage
    """
    if action in allowed_actions(order):
        return
    if action == ShipmentAction.CREATE_SHIPMENT:
        message = "Shipment already created for this order"
    else:
        message = "Create a shipment for this order first"
    raise ShipmentStageError(message, order_id=order.id, stage=order.stage.value)
