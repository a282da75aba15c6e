"""
Shipment flow request/response schemas.

Outcomes of the admin shipment flows (create, update, sync). Like the client
results, these always carry ``success`` and a human-readable ``message``.
"""

from pydantic import BaseModel, Field
from typing import Any, Dict, List, Optional
from petshop_shipping.app.models.shipment_enums import ShipmentStatus
from petshop_shipping.app.schemas.order import OrderRecord, OrderSummary
from petshop_shipping.app.schemas.tracking import ErrorKind, ShipmentDetails


class FlowOutcome(BaseModel):
    success: bool
    message: Optional[str] = None
    error: Optional[str] = None
    error_kind: Optional[ErrorKind] = None
    status_code: Optional[int] = None


class CreateShipmentOutcome(FlowOutcome):
    shipment: Optional[ShipmentDetails] = None
    invoice_url: Optional[str] = None


class UpdateOutcome(FlowOutcome):
    order: Optional[OrderRecord] = None
    unconstrained: bool = False


class SyncOutcome(FlowOutcome):
    order: Optional[OrderRecord] = None
    tracking: Dict[str, Any] = Field(default_factory=dict)
    status_updated: bool = False
    local_changed: bool = False


# Admin API request bodies

class StatusUpdateRequest(BaseModel):
    """Manual shipment status change."""
    shipment_status: ShipmentStatus = Field(..., alias="shipmentStatus")

    class Config:
        populate_by_name = True


class TrackingInfoUpdate(BaseModel):
    """Manual AWB / shipment id / courier entry."""
    awb_number: Optional[str] = Field(None, alias="awbNumber", max_length=64)
    shipment_id: Optional[str] = Field(None, alias="shipmentId", max_length=64)
    courier: Optional[str] = Field(None, max_length=100)
    shipment_status: Optional[ShipmentStatus] = Field(None, alias="shipmentStatus")

    class Config:
        populate_by_name = True

    def to_fields(self) -> Dict[str, Any]:
        data = self.model_dump(by_alias=True, exclude_none=True, mode="json")
        # Blank inputs are not sent
        return {key: value for key, value in data.items() if value != ""}


class ReturnRequest(BaseModel):
    reason: Optional[str] = Field(None, max_length=500)


# Admin API responses

class BoardResponse(BaseModel):
    orders: List[OrderSummary]
    total: int


class StatusOptionResponse(BaseModel):
    status: ShipmentStatus
    selectable: bool
    label: str


class ProgressStepResponse(BaseModel):
    number: int
    status: ShipmentStatus
    active: bool


class StatusOptionsResponse(BaseModel):
    order_id: str
    current_status: str
    options: List[StatusOptionResponse]
    steps: List[ProgressStepResponse]
