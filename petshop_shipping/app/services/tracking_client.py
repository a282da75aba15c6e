"""
Tracking Provider Client.

Thin async wrapper over the storefront backend's tracking endpoints, which in
turn talk to the carrier. Every method returns a result model; failures come
back as ``success=False`` with the backend's message or a fallback.
"""

from typing import Any, Dict, Optional
from urllib.parse import quote

from petshop_shipping.app.core.config import settings
from petshop_shipping.app.services.backend_client import BackendClient
from petshop_shipping.app.schemas.tracking import (
    CourierResult,
    OrderResult,
    PickupLocationsResult,
    ShipmentResult,
    SyncResult,
    TrackingResult,
)

# Fields the update endpoint accepts
TRACKING_UPDATE_FIELDS = ("awbNumber", "shipmentId", "courier", "shipmentStatus")


def _segment(value: str) -> str:
    return quote(str(value), safe="")


class TrackingClient(BackendClient):
    """Client for ``/api/v1/tracking``."""

    api_path = settings.tracking_api_path

    async def create_shipment(self, order_id: str) -> ShipmentResult:
        """Book a carrier shipment for an order (admin)."""
        return await self._request(
            "POST",
            f"/create/{_segment(order_id)}",
            ShipmentResult,
            success_message="Shipment created successfully",
            failure_message="Failed to create shipment",
        )

    async def track_by_order_id(self, order_id: str) -> TrackingResult:
        return await self._request(
            "GET",
            "/track",
            TrackingResult,
            success_message="Order tracking information retrieved successfully",
            failure_message="Failed to track order",
            params={"orderId": order_id},
        )

    async def track_by_awb(self, awb: str) -> TrackingResult:
        return await self._request(
            "GET",
            "/track",
            TrackingResult,
            success_message="Order tracking information retrieved successfully",
            failure_message="Failed to track order",
            params={"awb": awb},
        )

    async def update_tracking_info(self, order_id: str, fields: Dict[str, Any]) -> OrderResult:
        """
        Set AWB / shipment id / courier / status on an order (admin).

        Unknown keys and None values are dropped before sending.
        """
        body = {
            key: value for key, value in fields.items()
            if key in TRACKING_UPDATE_FIELDS and value is not None
        }
        return await self._request(
            "PUT",
            f"/update/{_segment(order_id)}",
            OrderResult,
            success_message="Order tracking information updated successfully",
            failure_message="Failed to update order tracking information",
            json=body,
        )

    async def sync_status(self, order_id: str) -> SyncResult:
        """Ask the backend to reconcile the order with the carrier (admin)."""
        return await self._request(
            "GET",
            f"/sync-status/{_segment(order_id)}",
            SyncResult,
            success_message="Order status synced successfully",
            failure_message="Failed to sync order status",
        )

    async def get_available_couriers(
        self,
        pickup_pincode: str,
        delivery_pincode: str,
        weight: float,
        cod: bool = False,
    ) -> CourierResult:
        return await self._request(
            "GET",
            "/couriers",
            CourierResult,
            success_message="Available couriers fetched successfully",
            failure_message="Failed to fetch available couriers",
            params={
                "pickup_postcode": pickup_pincode,
                "delivery_postcode": delivery_pincode,
                "weight": weight,
                "cod": "true" if cod else "false",
            },
        )

    async def get_pickup_locations(self) -> PickupLocationsResult:
        return await self._request(
            "GET",
            "/pickup-locations",
            PickupLocationsResult,
            success_message="Pickup locations fetched successfully",
            failure_message="Failed to fetch pickup locations",
        )

    async def request_return(self, order_id: str, reason: Optional[str] = None) -> OrderResult:
        """Customer return request for a delivered order."""
        return await self._request(
            "POST",
            f"/return/{_segment(order_id)}",
            OrderResult,
            success_message="Return request submitted successfully",
            failure_message="Failed to submit return request",
            json={"reason": reason},
        )
