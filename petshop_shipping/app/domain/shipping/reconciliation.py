"""
Shipment reconciliation ("sync").

Pulls the carrier's view of an order through the backend's sync endpoint and
merges it into the order board. Manually triggered; there is no retry or
polling here, a failed sync is simply invoked again.
"""

import logging

from petshop_shipping.app.core.exceptions import AppException
from petshop_shipping.app.domain.shipping.stages import ShipmentAction, require_action
from petshop_shipping.app.schemas.shipment import SyncOutcome
from petshop_shipping.app.schemas.tracking import ErrorKind
from petshop_shipping.app.services.order_board import SYNC_ORDER_FIELDS, OrderBoard
from petshop_shipping.app.services.tracking_client import TrackingClient

logger = logging.getLogger("petshop_shipping.sync")


class ShipmentSyncService:

    def __init__(self, tracking_client: TrackingClient, board: OrderBoard):
        self.tracking_client = tracking_client
        self.board = board

    async def sync_status(self, order_id: str) -> SyncOutcome:
        """
        Reconcile one order with the carrier.

        On success the tracking snapshot and the order's shipmentStatus,
        awbNumber and courier are merged into the board. On failure the board
        is left as it was.
        """
        try:
            order = self.board.require(order_id)
            require_action(order, ShipmentAction.SYNC_STATUS)
        except AppException as exc:
            return SyncOutcome(success=False, message=exc.message, error=exc.error_code,
                               error_kind=ErrorKind.VALIDATION)

        previous_status = order.shipment_status
        result = await self.tracking_client.sync_status(order_id)
        if not result.success:
            logger.warning(
                "Shipment sync failed",
                extra={"order_id": order_id, "error": result.error, "error_kind": result.error_kind}
            )
            return SyncOutcome(
                success=False,
                message=result.message or "Failed to sync order status",
                error=result.error,
                error_kind=result.error_kind,
                status_code=result.status_code,
            )

        tracking_changed = self.board.merge_tracking(order_id, result.tracking)
        order_changed = False
        if result.order is not None:
            order_changed = self.board.merge_order(order_id, result.order, fields=SYNC_ORDER_FIELDS)

        merged = self.board.get(order_id)
        if result.status_updated is not None:
            status_updated = result.status_updated
        else:
            status_updated = merged.shipment_status != previous_status

        logger.info(
            "Shipment synced",
            extra={
                "order_id": order_id,
                "previous_status": previous_status,
                "shipment_status": merged.shipment_status,
                "status_updated": status_updated,
            }
        )
        return SyncOutcome(
            success=True,
            message=result.message,
            order=merged,
            tracking=self.board.tracking_for(order_id),
            status_updated=status_updated,
            local_changed=tracking_changed or order_changed,
        )
