"""
Tracking backend response schemas and result models.

Every backend response is an envelope ``{<resource>: ..., message?}``. Each
operation declares its envelope explicitly and ``normalize_response`` is the
one place that turns an envelope (or a failure) into a uniform result.
"""

import enum
from pydantic import BaseModel, Field
from typing import Any, ClassVar, Dict, List, Optional, Type
from petshop_shipping.app.schemas.order import OrderRecord


class ErrorKind(str, enum.Enum):
    """Failure taxonomy shared by the client and the shipment flows."""
    TRANSPORT = "transport"    # network failure, no HTTP response
    BACKEND = "backend"        # backend answered with an error or a malformed body
    VALIDATION = "validation"  # rejected client-side before any request


# Response envelopes (wire format, camelCase as sent by the backend)

class TrackedOrder(OrderRecord):
    """Order as embedded in a tracking response; the tracking page never needs ``_id``."""
    id: Optional[str] = Field(None, alias="_id")


class Envelope(BaseModel):
    message: Optional[str] = None

    class Config:
        extra = "ignore"


class ShipmentDetails(BaseModel):
    """Carrier booking created for an order."""
    shipment_id: Optional[str] = None
    order_id: Optional[str] = None
    awb_code: Optional[str] = None
    courier_name: Optional[str] = None
    invoice_url: Optional[str] = None

    class Config:
        extra = "allow"
        coerce_numbers_to_str = True


class ShipmentEnvelope(Envelope):
    # Some backends confirm a booking with only a message
    shipment: Optional[ShipmentDetails] = None


class TrackingEnvelope(Envelope):
    tracking: Optional[Dict[str, Any]] = None
    orderDetails: Optional[TrackedOrder] = None


class OrderEnvelope(Envelope):
    order: Optional[OrderRecord] = None


class SyncEnvelope(Envelope):
    order: Optional[OrderRecord] = None
    tracking: Optional[Dict[str, Any]] = None
    statusUpdated: Optional[bool] = None


class CourierEnvelope(Envelope):
    couriers: List[Dict[str, Any]] = Field(default_factory=list)


class PickupLocationsEnvelope(Envelope):
    pickupLocations: List[Dict[str, Any]] = Field(default_factory=list)


class OrderListEnvelope(Envelope):
    orders: List[OrderRecord] = Field(default_factory=list)


# Results (what callers receive; never raised)

class ApiResult(BaseModel):
    """Uniform outcome of a backend call."""
    success: bool
    message: Optional[str] = None
    error: Optional[str] = None
    error_kind: Optional[ErrorKind] = None
    status_code: Optional[int] = None

    envelope: ClassVar[Type[Envelope]] = Envelope

    @classmethod
    def from_envelope(cls, envelope: Envelope, message: str) -> "ApiResult":
        return cls(success=True, message=message)

    @classmethod
    def failure(
        cls,
        message: str,
        error: Optional[str] = None,
        error_kind: ErrorKind = ErrorKind.BACKEND,
        status_code: Optional[int] = None,
    ) -> "ApiResult":
        return cls(
            success=False,
            message=message,
            error=error,
            error_kind=error_kind,
            status_code=status_code,
        )


class ShipmentResult(ApiResult):
    shipment: Optional[ShipmentDetails] = None

    envelope: ClassVar[Type[Envelope]] = ShipmentEnvelope

    @classmethod
    def from_envelope(cls, envelope: ShipmentEnvelope, message: str) -> "ShipmentResult":
        return cls(success=True, message=message, shipment=envelope.shipment)

    @property
    def invoice_url(self) -> Optional[str]:
        if self.shipment is None:
            return None
        return self.shipment.invoice_url or None


class TrackingResult(ApiResult):
    tracking: Optional[Dict[str, Any]] = None
    order_details: Optional[TrackedOrder] = None

    envelope: ClassVar[Type[Envelope]] = TrackingEnvelope

    @classmethod
    def from_envelope(cls, envelope: TrackingEnvelope, message: str) -> "TrackingResult":
        return cls(
            success=True,
            message=message,
            tracking=envelope.tracking,
            order_details=envelope.orderDetails,
        )


class OrderResult(ApiResult):
    order: Optional[OrderRecord] = None

    envelope: ClassVar[Type[Envelope]] = OrderEnvelope

    @classmethod
    def from_envelope(cls, envelope: OrderEnvelope, message: str) -> "OrderResult":
        return cls(success=True, message=message, order=envelope.order)


class SyncResult(ApiResult):
    order: Optional[OrderRecord] = None
    tracking: Optional[Dict[str, Any]] = None
    status_updated: Optional[bool] = None

    envelope: ClassVar[Type[Envelope]] = SyncEnvelope

    @classmethod
    def from_envelope(cls, envelope: SyncEnvelope, message: str) -> "SyncResult":
        return cls(
            success=True,
            message=message,
            order=envelope.order,
            tracking=envelope.tracking,
            status_updated=envelope.statusUpdated,
        )


class CourierResult(ApiResult):
    couriers: List[Dict[str, Any]] = Field(default_factory=list)

    envelope: ClassVar[Type[Envelope]] = CourierEnvelope

    @classmethod
    def from_envelope(cls, envelope: CourierEnvelope, message: str) -> "CourierResult":
        return cls(success=True, message=message, couriers=envelope.couriers)


class PickupLocationsResult(ApiResult):
    pickup_locations: List[Dict[str, Any]] = Field(default_factory=list)

    envelope: ClassVar[Type[Envelope]] = PickupLocationsEnvelope

    @classmethod
    def from_envelope(cls, envelope: PickupLocationsEnvelope, message: str) -> "PickupLocationsResult":
        return cls(success=True, message=message, pickup_locations=envelope.pickupLocations)


class OrderListResult(ApiResult):
    orders: List[OrderRecord] = Field(default_factory=list)

    envelope: ClassVar[Type[Envelope]] = OrderListEnvelope

    @classmethod
    def from_envelope(cls, envelope: OrderListEnvelope, message: str) -> "OrderListResult":
        return cls(success=True, message=message, orders=envelope.orders)


def normalize_response(result_cls: Type[ApiResult], payload: Any, success_message: str) -> ApiResult:
    """
    Validate a successful response body against the operation's envelope.

    Args:
        result_cls: Result model whose ``envelope`` describes the body
        payload: Decoded JSON body
        success_message: Message used when the backend sends none

    Returns:
        Populated result with ``success=True``

    Raises:
        pydantic.ValidationError: body does not match the envelope
    """
    envelope = result_cls.envelope.model_validate(payload)
    return result_cls.from_envelope(envelope, envelope.message or success_message)


def backend_message(payload: Any) -> Optional[str]:
    """Pull ``message`` out of an error body, if the body has one."""
    if isinstance(payload, dict):
        message = payload.get("message")
        if isinstance(message, str) and message:
            return message
    return None
