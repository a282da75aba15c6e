"""
Orders client: loads the admin order list the shipment board works on.
"""

from petshop_shipping.app.core.config import settings
from petshop_shipping.app.services.backend_client import BackendClient
from petshop_shipping.app.schemas.tracking import OrderListResult


class OrdersClient(BackendClient):
    """Client for ``/api/v1/orders``."""

    api_path = settings.orders_api_path

    async def get_all_orders(self) -> OrderListResult:
        return await self._request(
            "GET",
            "/all",
            OrderListResult,
            success_message="Orders fetched successfully",
            failure_message="Failed to fetch orders",
        )
