"""
Tracking lookups for the customer tracking page and the admin details panel.

A failed lookup never blocks the view: the admin panel falls back to the
order fields already on the board.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from petshop_shipping.app.domain.shipping.presentation import (
    CarrierProgress,
    DeliveryEstimate,
    ShipmentView,
    carrier_progress,
    estimated_delivery,
    resolve_current_status,
    shipment_view,
)
from petshop_shipping.app.schemas.order import OrderRecord
from petshop_shipping.app.schemas.tracking import ErrorKind
from petshop_shipping.app.services.order_board import OrderBoard
from petshop_shipping.app.services.tracking_client import TrackingClient
from petshop_shipping.app.services.tracking_history import TrackingHistory

logger = logging.getLogger("petshop_shipping.tracking_lookup")


class TrackingIdType:
    ORDER = "order"
    AWB = "awb"


@dataclass
class TrackingLookup:
    success: bool
    message: Optional[str] = None
    error_kind: Optional[ErrorKind] = None
    status_code: Optional[int] = None
    tracking: Optional[Dict[str, Any]] = None
    order_details: Optional[OrderRecord] = None
    progress: Optional[CarrierProgress] = None
    estimate: Optional[DeliveryEstimate] = None
    history: Optional[List[Dict[str, str]]] = None


@dataclass
class ShipmentDetailsLookup:
    view: ShipmentView
    message: Optional[str] = None
    error_kind: Optional[ErrorKind] = None

    @property
    def degraded(self) -> bool:
        return not self.view.from_carrier


async def track(
    tracking_client: TrackingClient,
    tracking_id: str,
    id_type: str = TrackingIdType.ORDER,
    history: Optional[TrackingHistory] = None,
) -> TrackingLookup:
    """Look up tracking by order id or AWB; successful lookups go to history."""
    if id_type == TrackingIdType.AWB:
        result = await tracking_client.track_by_awb(tracking_id)
    elif id_type == TrackingIdType.ORDER:
        result = await tracking_client.track_by_order_id(tracking_id)
    else:
        raise ValueError(f"Unknown tracking id type: {id_type}")

    if not result.success:
        return TrackingLookup(
            success=False,
            message=result.message,
            error_kind=result.error_kind,
            status_code=result.status_code,
        )

    recent = None
    if history is not None:
        recent = await history.record(tracking_id, id_type)

    current_status = resolve_current_status(result.tracking, result.order_details)
    return TrackingLookup(
        success=True,
        message=result.message,
        tracking=result.tracking,
        order_details=result.order_details,
        progress=carrier_progress(current_status),
        estimate=estimated_delivery(result.tracking),
        history=recent,
    )


async def shipment_details(tracking_client: TrackingClient, board: OrderBoard, order_id: str) -> ShipmentDetailsLookup:
    """
    Carrier tracking merged over the board record.

    Raises:
        ResourceNotFoundError: order is not on the board
    """
    order = board.require(order_id)
    result = await tracking_client.track_by_order_id(order_id)

    if not result.success:
        logger.warning(
            "Tracking unavailable, showing local order fields",
            extra={"order_id": order_id, "error_kind": result.error_kind}
        )
        return ShipmentDetailsLookup(
            view=shipment_view(order),
            message=result.message,
            error_kind=result.error_kind,
        )

    if result.order_details is None:
        logger.warning("Tracking response missing orderDetails", extra={"order_id": order_id})

    board.merge_tracking(order_id, result.tracking)
    return ShipmentDetailsLookup(
        view=shipment_view(order, board.tracking_for(order_id)),
        message=result.message,
    )
