"""
Order board: the in-memory order list the admin shipment screen owns.

Holds the last loaded order records plus the latest carrier tracking snapshot
per order. Merges are non-destructive (fields absent from the source are left
untouched) and writing an equal value is a no-op, so repeated merges of the
same data never change the board.
"""

import copy
import json
import logging
from typing import Any, Dict, Iterable, List, Optional, Sequence

from petshop_shipping.app.core.exceptions import ResourceNotFoundError
from petshop_shipping.app.schemas.order import OrderRecord

logger = logging.getLogger("petshop_shipping.board")

# Order fields reconciliation is allowed to overwrite (wire names)
SYNC_ORDER_FIELDS = ("shipmentStatus", "awbNumber", "courier")


class BoardFilter:
    """Board filter values."""
    ALL = "all"
    SHIPPED = "shipped"
    UNSHIPPED = "unshipped"
    PAID = "paid"

    VALUES = (ALL, SHIPPED, UNSHIPPED, PAID)


class OrderBoard:

    def __init__(self, orders: Optional[Iterable[OrderRecord]] = None):
        self._orders: Dict[str, OrderRecord] = {}
        self._tracking: Dict[str, Dict[str, Any]] = {}
        if orders:
            self.load(orders)

    def __len__(self) -> int:
        return len(self._orders)

    def __contains__(self, order_id: str) -> bool:
        return order_id in self._orders

    def load(self, orders: Iterable[OrderRecord]) -> None:
        """Replace the order list; tracking snapshots of remaining orders survive."""
        self._orders = {order.id: order for order in orders}
        self._tracking = {
            order_id: snapshot for order_id, snapshot in self._tracking.items()
            if order_id in self._orders
        }
        logger.info("Order board loaded", extra={"orders": len(self._orders)})

    def get(self, order_id: str) -> Optional[OrderRecord]:
        return self._orders.get(order_id)

    def require(self, order_id: str) -> OrderRecord:
        order = self._orders.get(order_id)
        if order is None:
            raise ResourceNotFoundError("Order", order_id)
        return order

    def orders(self) -> List[OrderRecord]:
        return list(self._orders.values())

    def merge_order(
        self,
        order_id: str,
        source: OrderRecord,
        fields: Optional[Sequence[str]] = None,
    ) -> bool:
        """
        Merge fields the backend actually sent into the board record.

        Args:
            order_id: Board key
            source: Record parsed from a backend response
            fields: Wire field names allowed to change; None allows all

        Returns:
            True if the board record changed
        """
        incoming = source.model_dump(by_alias=True, exclude_unset=True, exclude_none=True)
        incoming.pop("_id", None)
        if fields is not None:
            incoming = {key: value for key, value in incoming.items() if key in fields}

        existing = self._orders.get(order_id)
        if existing is None:
            # First sighting: take the record as sent
            self._orders[order_id] = source.model_copy(update={"id": order_id})
            return True

        current = existing.to_wire()
        changed = {}
        for key, value in incoming.items():
            # Nested records (paymentInfo) merge key by key as well
            if isinstance(value, dict) and isinstance(current.get(key), dict):
                value = {**current[key], **value}
            if current.get(key) != value:
                changed[key] = value
        if not changed:
            return False

        current.update(changed)
        self._orders[order_id] = OrderRecord.model_validate(current)
        logger.debug("Order merged", extra={"order_id": order_id, "fields": sorted(changed)})
        return True

    def merge_tracking(self, order_id: str, tracking: Optional[Dict[str, Any]]) -> bool:
        """Overwrite keys present in ``tracking``; keep the rest. Returns True on change."""
        if not tracking:
            return False
        snapshot = self._tracking.setdefault(order_id, {})
        changed = False
        for key, value in tracking.items():
            if key not in snapshot or snapshot[key] != value:
                snapshot[key] = copy.deepcopy(value)
                changed = True
        return changed

    def tracking_for(self, order_id: str) -> Dict[str, Any]:
        return dict(self._tracking.get(order_id, {}))

    def snapshot(self, order_id: str) -> str:
        """Canonical serialization of one order's local state."""
        order = self._orders.get(order_id)
        return json.dumps(
            {
                "order": order.to_wire() if order else None,
                "tracking": self._tracking.get(order_id, {}),
            },
            sort_keys=True,
            default=str,
        )

    def filter(self, search: Optional[str] = None, status_filter: str = BoardFilter.ALL) -> List[OrderRecord]:
        """
        Search by order id, display order id or AWB (case-insensitive), then
        narrow by shipped / unshipped / paid.
        """
        if status_filter not in BoardFilter.VALUES:
            raise ValueError(f"Unknown board filter: {status_filter}")

        orders = self.orders()

        if search:
            needle = search.lower()
            orders = [
                order for order in orders
                if needle in order.id.lower()
                or (order.order_id and needle in order.order_id.lower())
                or (order.awb_number and needle in order.awb_number.lower())
            ]

        if status_filter == BoardFilter.SHIPPED:
            orders = [order for order in orders if order.awb_number]
        elif status_filter == BoardFilter.UNSHIPPED:
            orders = [order for order in orders if not order.awb_number]
        elif status_filter == BoardFilter.PAID:
            orders = [order for order in orders if order.is_paid]

        return orders
