"""
Shipment Status Enumeration and progression positions.
"""

import enum
from dataclasses import dataclass
from typing import Optional, Union


class ShipmentStatus(str, enum.Enum):
    """
    Shipment status enumeration.

    Status flow:
        Pending → Processing → Shipped → Out for Delivery → Delivered
        Delivered Early ranks the same as Delivered
        Returning, Returned and Cancelled can be set from any status
    """
    PENDING = "Pending"
    PROCESSING = "Processing"
    SHIPPED = "Shipped"
    OUT_FOR_DELIVERY = "Out for Delivery"
    DELIVERED = "Delivered"
    DELIVERED_EARLY = "Delivered Early"
    RETURNING = "Returning"
    RETURNED = "Returned"
    CANCELLED = "Cancelled"


class SpecialKind(str, enum.Enum):
    """Why a special status sits outside the forward progression."""
    RETURN_IN_PROGRESS = "RETURN_IN_PROGRESS"
    RETURN_COMPLETE = "RETURN_COMPLETE"
    CANCELLED = "CANCELLED"


DEFAULT_STATUS = ShipmentStatus.PENDING

PROGRESSION = (
    ShipmentStatus.PENDING,
    ShipmentStatus.PROCESSING,
    ShipmentStatus.SHIPPED,
    ShipmentStatus.OUT_FOR_DELIVERY,
    ShipmentStatus.DELIVERED,
)

# Terminal aliases share the rank of the status they stand in for
PROGRESSION_ALIASES = {
    ShipmentStatus.DELIVERED_EARLY: ShipmentStatus.DELIVERED,
}

SPECIAL_STATUSES = frozenset({
    ShipmentStatus.RETURNING,
    ShipmentStatus.RETURNED,
    ShipmentStatus.CANCELLED,
})

_SPECIAL_KINDS = {
    ShipmentStatus.RETURNING: SpecialKind.RETURN_IN_PROGRESS,
    ShipmentStatus.RETURNED: SpecialKind.RETURN_COMPLETE,
    ShipmentStatus.CANCELLED: SpecialKind.CANCELLED,
}


@dataclass(frozen=True)
class Ordered:
    """Position on the forward progression (0 = Pending, 4 = Delivered)."""
    index: int

    def __ge__(self, other: "Ordered") -> bool:
        if not isinstance(other, Ordered):
            return NotImplemented
        return self.index >= other.index

    def __gt__(self, other: "Ordered") -> bool:
        if not isinstance(other, Ordered):
            return NotImplemented
        return self.index > other.index

    def __le__(self, other: "Ordered") -> bool:
        if not isinstance(other, Ordered):
            return NotImplemented
        return self.index <= other.index

    def __lt__(self, other: "Ordered") -> bool:
        if not isinstance(other, Ordered):
            return NotImplemented
        return self.index < other.index


@dataclass(frozen=True)
class Special:
    """A status outside the progression; never compared."""
    kind: SpecialKind


@dataclass(frozen=True)
class Unrecognized:
    """A value the backend sent that is not a known status."""
    raw: str


StatusPosition = Union[Ordered, Special, Unrecognized]


def parse_status(value) -> Optional[ShipmentStatus]:
    """Coerce a wire value to ShipmentStatus; missing means Pending, unknown means None."""
    if value is None or value == "":
        return DEFAULT_STATUS
    if isinstance(value, ShipmentStatus):
        return value
    try:
        return ShipmentStatus(value)
    except ValueError:
        return None


def position_of(value) -> StatusPosition:
    status = parse_status(value)
    if status is None:
        return Unrecognized(raw=str(value))
    if status in SPECIAL_STATUSES:
        return Special(kind=_SPECIAL_KINDS[status])
    return Ordered(index=PROGRESSION.index(PROGRESSION_ALIASES.get(status, status)))


def index_of(value) -> int:
    """
    Progression rank of a status.

    Returns:
        0..4 for ordered statuses, -1 for special or unknown values
    """
    position = position_of(value)
    if isinstance(position, Ordered):
        return position.index
    return -1


def is_special(value) -> bool:
    return isinstance(position_of(value), Special)
