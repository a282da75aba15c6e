"""
Order / shipment record schemas.

The order record is owned by the storefront backend; these models describe
the fields the shipment tooling reads and merges.
"""

import enum
from pydantic import BaseModel, Field, field_validator
from typing import Any, Dict, Optional
from petshop_shipping.app.models.shipment_enums import (
    DEFAULT_STATUS,
    ShipmentStatus,
    parse_status,
)


class ShipmentStage(str, enum.Enum):
    """Where an order sits relative to the carrier."""
    UNSHIPPED = "UNSHIPPED"    # no shipment booked yet
    PROCESSING = "PROCESSING"  # shipment booked, waiting for the AWB
    DISPATCHED = "DISPATCHED"  # AWB assigned


class PaymentInfo(BaseModel):
    """Payment sub-record."""
    status: str = Field("Pending", description="Paid or Pending")
    amount: Optional[float] = Field(None, ge=0)

    class Config:
        extra = "allow"


class OrderRecord(BaseModel):
    """Order record as returned by the storefront backend."""
    id: str = Field(..., alias="_id", description="Opaque order id")
    order_id: Optional[str] = Field(None, alias="orderId", description="Human-facing order number")
    shipment_id: Optional[str] = Field(None, alias="shipmentId")
    awb_number: Optional[str] = Field(None, alias="awbNumber")
    shipment_status: str = Field(DEFAULT_STATUS.value, alias="shipmentStatus")
    courier: Optional[str] = None
    invoice_url: Optional[str] = Field(None, alias="invoiceUrl")
    payment_info: Optional[PaymentInfo] = Field(None, alias="paymentInfo")

    class Config:
        populate_by_name = True
        extra = "allow"

    @field_validator("id", "shipment_id", "awb_number", mode="before")
    @classmethod
    def _stringify_ids(cls, value: Any) -> Any:
        if value is None or isinstance(value, str):
            return value
        return str(value)

    @field_validator("shipment_status", mode="before")
    @classmethod
    def _default_status(cls, value: Any) -> Any:
        # Unknown strings are kept verbatim; only missing values default
        if value is None or value == "":
            return DEFAULT_STATUS.value
        if isinstance(value, ShipmentStatus):
            return value.value
        return value

    @property
    def status(self) -> Optional[ShipmentStatus]:
        return parse_status(self.shipment_status)

    @property
    def stage(self) -> ShipmentStage:
        if self.awb_number:
            return ShipmentStage.DISPATCHED
        if self.shipment_id:
            return ShipmentStage.PROCESSING
        return ShipmentStage.UNSHIPPED

    @property
    def is_paid(self) -> bool:
        return self.payment_info is not None and self.payment_info.status == "Paid"

    def to_wire(self) -> Dict[str, Any]:
        """Dump using the backend's camelCase field names."""
        return self.model_dump(by_alias=True)


class OrderSummary(BaseModel):
    """Board row returned by the admin API."""
    id: str
    order_id: Optional[str]
    shipment_id: Optional[str]
    awb_number: Optional[str]
    shipment_status: str
    courier: Optional[str]
    invoice_url: Optional[str]
    stage: ShipmentStage
    is_paid: bool

    @classmethod
    def from_record(cls, record: OrderRecord) -> "OrderSummary":
        return cls(
            id=record.id,
            order_id=record.order_id,
            shipment_id=record.shipment_id,
            awb_number=record.awb_number,
            shipment_status=record.shipment_status,
            courier=record.courier,
            invoice_url=record.invoice_url,
            stage=record.stage,
            is_paid=record.is_paid,
        )
