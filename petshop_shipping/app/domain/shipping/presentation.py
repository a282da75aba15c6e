"""
Status presentation: badge, progress percentage and progress steps.

Pure functions of a status value (or of the carrier's free-text status for
the customer tracking view).
"""

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Any, Dict, List, Optional

from petshop_shipping.app.core.config import settings
from petshop_shipping.app.models.shipment_enums import (
    DEFAULT_STATUS,
    PROGRESSION,
    ShipmentStatus,
    index_of,
    is_special,
    parse_status,
)
from petshop_shipping.app.schemas.order import OrderRecord


class StatusColor:
    SUCCESS = "success"
    INFO = "info"
    WARNING = "warning"
    NEUTRAL = "neutral"
    CAUTION = "caution"
    DANGER = "danger"


class StatusIcon:
    BOX = "box"
    SPINNER = "spinner"
    SHIPPING_FAST = "shipping-fast"
    TRUCK = "truck"
    CHECK_CIRCLE = "check-circle"
    UNDO = "undo"
    TIMES_CIRCLE = "times-circle"


@dataclass(frozen=True)
class StatusBadge:
    label: str
    icon: str
    progress_percent: int
    color: str


_BADGES: Dict[ShipmentStatus, StatusBadge] = {
    ShipmentStatus.PENDING: StatusBadge("Pending", StatusIcon.BOX, 10, StatusColor.NEUTRAL),
    ShipmentStatus.PROCESSING: StatusBadge("Processing", StatusIcon.SPINNER, 25, StatusColor.NEUTRAL),
    ShipmentStatus.SHIPPED: StatusBadge("Shipped", StatusIcon.SHIPPING_FAST, 50, StatusColor.WARNING),
    ShipmentStatus.OUT_FOR_DELIVERY: StatusBadge("Out for Delivery", StatusIcon.TRUCK, 75, StatusColor.INFO),
    ShipmentStatus.DELIVERED: StatusBadge("Delivered", StatusIcon.CHECK_CIRCLE, 100, StatusColor.SUCCESS),
    ShipmentStatus.DELIVERED_EARLY: StatusBadge("Delivered Early", StatusIcon.CHECK_CIRCLE, 100, StatusColor.SUCCESS),
    ShipmentStatus.RETURNING: StatusBadge("Returning", StatusIcon.UNDO, 50, StatusColor.CAUTION),
    ShipmentStatus.RETURNED: StatusBadge("Returned", StatusIcon.UNDO, 75, StatusColor.CAUTION),
    ShipmentStatus.CANCELLED: StatusBadge("Cancelled", StatusIcon.TIMES_CIRCLE, 100, StatusColor.DANGER),
}


def badge_for(status) -> StatusBadge:
    """Badge for a status; unknown values keep their text and render like Pending."""
    parsed = parse_status(status)
    if parsed is not None:
        return _BADGES[parsed]
    fallback = _BADGES[DEFAULT_STATUS]
    return StatusBadge(str(status), fallback.icon, fallback.progress_percent, fallback.color)


def progress_percent(status) -> int:
    return badge_for(status).progress_percent


@dataclass(frozen=True)
class ProgressStep:
    number: int
    status: ShipmentStatus
    active: bool


def progression_steps(current, selected=None) -> List[ProgressStep]:
    """
    Steps of the forward progression, active when reached by ``current`` or
    by a non-special ``selected`` status.
    """
    current_idx = index_of(current)
    selected_idx = -1 if selected is None or is_special(selected) else index_of(selected)

    return [
        ProgressStep(
            number=index + 1,
            status=status,
            active=current_idx >= index or selected_idx >= index,
        )
        for index, status in enumerate(PROGRESSION)
    ]


# Customer tracking view: the carrier reports free text, matched loosely

@dataclass(frozen=True)
class CarrierStep:
    key: str
    label: str
    active: bool
    is_current: bool


@dataclass(frozen=True)
class CarrierProgress:
    current_status: str
    percent: int
    steps: List[CarrierStep]


CARRIER_STEPS = (
    ("order_placed", "Order Placed"),
    ("processing", "Processing"),
    ("shipped", "Shipped"),
    ("out_for_delivery", "Out for Delivery"),
    ("delivered", "Delivered"),
)


def _carrier_stage(text: str) -> Optional[int]:
    lowered = text.lower()
    if "delivered" in lowered:
        return 4
    if "out for delivery" in lowered:
        return 3
    if "shipped" in lowered or lowered == "in transit":
        return 2
    if "processing" in lowered:
        return 1
    if "order" in lowered:
        return 0
    return None


def resolve_current_status(tracking: Optional[Dict[str, Any]], order: Optional[OrderRecord] = None) -> str:
    """Carrier status first, then the order's shipment status, then Processing."""
    if tracking and tracking.get("current_status"):
        return str(tracking["current_status"])
    if order is not None and order.shipment_status:
        return order.shipment_status
    return ShipmentStatus.PROCESSING.value


def carrier_progress(current_status: str) -> CarrierProgress:
    stage = _carrier_stage(current_status)
    percent = 0 if stage is None else stage * 25
    steps = [
        CarrierStep(
            key=key,
            label=label,
            active=stage is not None and index <= stage,
            is_current=stage == index,
        )
        for index, (key, label) in enumerate(CARRIER_STEPS)
    ]
    return CarrierProgress(current_status=current_status, percent=percent, steps=steps)


@dataclass(frozen=True)
class DeliveryEstimate:
    expected: Optional[date] = None
    earliest: Optional[date] = None
    latest: Optional[date] = None

    @property
    def available(self) -> bool:
        return self.expected is not None or self.earliest is not None


def _parse_date(value: Any) -> Optional[date]:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00")).date()
    except ValueError:
        return None


def estimated_delivery(tracking: Optional[Dict[str, Any]]) -> DeliveryEstimate:
    """
    Carrier's expected date when given, otherwise a window counted from the
    shipped date.
    """
    if not tracking:
        return DeliveryEstimate()

    expected = _parse_date(tracking.get("expected_delivery_date"))
    if expected is not None:
        return DeliveryEstimate(expected=expected)

    shipped = _parse_date(tracking.get("shipped_date"))
    if shipped is None:
        return DeliveryEstimate()
    return DeliveryEstimate(
        earliest=shipped + timedelta(days=settings.estimated_delivery_min_days),
        latest=shipped + timedelta(days=settings.estimated_delivery_max_days),
    )


@dataclass(frozen=True)
class ShipmentView:
    """What the shipment details panel shows for one order."""
    order_id: str
    current_status: str
    awb: Optional[str]
    courier: Optional[str]
    badge: StatusBadge
    estimate: DeliveryEstimate
    from_carrier: bool


def shipment_view(order: OrderRecord, tracking: Optional[Dict[str, Any]] = None) -> ShipmentView:
    """Merge carrier tracking over the locally held order; works with no tracking at all."""
    tracking = tracking or {}
    return ShipmentView(
        order_id=order.order_id or order.id,
        current_status=resolve_current_status(tracking, order),
        awb=tracking.get("awb") or order.awb_number,
        courier=tracking.get("courier_name") or order.courier,
        badge=badge_for(order.shipment_status),
        estimate=estimated_delivery(tracking),
        from_carrier=bool(tracking),
    )
