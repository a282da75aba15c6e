"""
Shipment creation and manual tracking entry (admin).
"""

import logging
from typing import Any, Dict

from petshop_shipping.app.core.exceptions import AppException
from petshop_shipping.app.domain.shipping.stages import ShipmentAction, require_action
from petshop_shipping.app.domain.shipping.status_rules import check_transition
from petshop_shipping.app.schemas.order import OrderRecord, ShipmentStage
from petshop_shipping.app.schemas.shipment import CreateShipmentOutcome, UpdateOutcome
from petshop_shipping.app.schemas.tracking import ErrorKind, ShipmentDetails
from petshop_shipping.app.services.order_board import OrderBoard
from petshop_shipping.app.services.tracking_client import TrackingClient

logger = logging.getLogger("petshop_shipping.creation")


def _booking_fields(order_id: str, shipment: ShipmentDetails) -> OrderRecord:
    """Order fields implied by a fresh carrier booking."""
    data: Dict[str, Any] = {"_id": order_id}
    if shipment.shipment_id:
        data["shipmentId"] = shipment.shipment_id
    if shipment.awb_code:
        data["awbNumber"] = shipment.awb_code
    if shipment.courier_name:
        data["courier"] = shipment.courier_name
    if shipment.invoice_url:
        data["invoiceUrl"] = shipment.invoice_url
    return OrderRecord.model_validate(data)


class ShipmentCreator:

    def __init__(self, tracking_client: TrackingClient, board: OrderBoard):
        self.tracking_client = tracking_client
        self.board = board

    async def create_shipment(self, order_id: str) -> CreateShipmentOutcome:
        """
        Book a carrier shipment for an unshipped order.

        When the carrier returns an invoice the outcome carries its link;
        otherwise it is a plain confirmation.
        """
        try:
            order = self.board.require(order_id)
            require_action(order, ShipmentAction.CREATE_SHIPMENT)
        except AppException as exc:
            return CreateShipmentOutcome(success=False, message=exc.message, error=exc.error_code,
                                         error_kind=ErrorKind.VALIDATION)

        result = await self.tracking_client.create_shipment(order_id)
        if not result.success:
            return CreateShipmentOutcome(
                success=False,
                message=result.message or "Failed to create shipment",
                error=result.error,
                error_kind=result.error_kind,
                status_code=result.status_code,
            )

        if result.shipment is not None:
            self.board.merge_order(order_id, _booking_fields(order_id, result.shipment))

        invoice_url = result.invoice_url
        message = "Shipment created successfully!"
        if invoice_url:
            message = "Shipment created successfully! The invoice is ready to download."

        logger.info(
            "Shipment created",
            extra={"order_id": order_id, "has_invoice": bool(invoice_url)}
        )
        return CreateShipmentOutcome(
            success=True,
            message=message,
            shipment=result.shipment,
            invoice_url=invoice_url,
        )

    async def update_tracking(self, order_id: str, fields: Dict[str, Any]) -> UpdateOutcome:
        """
        Manually set AWB, shipment id, courier and optionally status.

        An unshipped order accepts this only when the fields link a shipment
        (shipment id or AWB). A status in ``fields`` goes through the same
        transition check as a status update.
        """
        verdict = None
        try:
            order = self.board.require(order_id)
            links_shipment = bool(fields.get("shipmentId") or fields.get("awbNumber"))
            if not (order.stage == ShipmentStage.UNSHIPPED and links_shipment):
                require_action(order, ShipmentAction.UPDATE_TRACKING)
            if fields.get("shipmentStatus"):
                verdict = check_transition(order.shipment_status, fields["shipmentStatus"])
        except AppException as exc:
            return UpdateOutcome(success=False, message=exc.message, error=exc.error_code,
                                 error_kind=ErrorKind.VALIDATION)

        result = await self.tracking_client.update_tracking_info(order_id, fields)
        if not result.success:
            return UpdateOutcome(
                success=False,
                message=result.message or "Failed to update tracking information",
                error=result.error,
                error_kind=result.error_kind,
                status_code=result.status_code,
            )

        if result.order is not None:
            self.board.merge_order(order_id, result.order)

        return UpdateOutcome(
            success=True,
            message=result.message,
            order=self.board.get(order_id),
            unconstrained=verdict is not None and verdict.unconstrained,
        )
