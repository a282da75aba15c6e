"""
Manual shipment status update.
"""

import logging

from petshop_shipping.app.core.exceptions import AppException
from petshop_shipping.app.domain.shipping.stages import ShipmentAction, require_action
from petshop_shipping.app.domain.shipping.status_rules import check_transition
from petshop_shipping.app.models.shipment_enums import ShipmentStatus
from petshop_shipping.app.schemas.shipment import UpdateOutcome
from petshop_shipping.app.schemas.tracking import ErrorKind
from petshop_shipping.app.services.order_board import OrderBoard
from petshop_shipping.app.services.tracking_client import TrackingClient

logger = logging.getLogger("petshop_shipping.status_update")


class ShipmentStatusUpdater:

    def __init__(self, tracking_client: TrackingClient, board: OrderBoard):
        self.tracking_client = tracking_client
        self.board = board

    async def update_status(self, order_id: str, new_status: ShipmentStatus) -> UpdateOutcome:
        """
        Validate and persist a status change, then merge the backend's order.

        Same-status requests are not blocked here; the admin screen disables
        them.
        """
        try:
            order = self.board.require(order_id)
            require_action(order, ShipmentAction.UPDATE_STATUS)
            verdict = check_transition(order.shipment_status, new_status)
        except AppException as exc:
            logger.info(
                "Status update rejected",
                extra={"order_id": order_id, "proposed_status": str(new_status), "reason": exc.message}
            )
            return UpdateOutcome(success=False, message=exc.message, error=exc.error_code,
                                 error_kind=ErrorKind.VALIDATION)

        status_value = new_status.value if isinstance(new_status, ShipmentStatus) else str(new_status)
        result = await self.tracking_client.update_tracking_info(order_id, {"shipmentStatus": status_value})
        if not result.success:
            return UpdateOutcome(
                success=False,
                message=result.message or "Failed to update shipment status",
                error=result.error,
                error_kind=result.error_kind,
                status_code=result.status_code,
            )

        if result.order is not None:
            self.board.merge_order(order_id, result.order)
        else:
            logger.warning("Update response missing order data", extra={"order_id": order_id})

        logger.info(
            "Shipment status updated",
            extra={"order_id": order_id, "previous_status": verdict.current, "shipment_status": status_value}
        )
        return UpdateOutcome(
            success=True,
            message=result.message,
            order=self.board.get(order_id),
            unconstrained=verdict.unconstrained,
        )
