import asyncio
import os
from dotenv import load_dotenv

from petshop_shipping.app.core.config import settings
from petshop_shipping.app.core.session import InMemorySessionStore
from petshop_shipping.app.services.orders_client import OrdersClient
from petshop_shipping.app.services.tracking_client import TrackingClient

# Load env vars manually; ADMIN_TOKEN is only needed for this check
load_dotenv(".env")

admin_token = os.getenv("ADMIN_TOKEN", "")

print(f"Testing connection to: {settings.backend_url}")


async def check_backend():
    store = InMemorySessionStore({settings.token_storage_key: admin_token} if admin_token else None)

    async with OrdersClient(store) as orders_client:
        orders = await orders_client.get_all_orders()
    if not orders.success:
        print(f"❌ Order list failed ({orders.error_kind}): {orders.message}")
        exit(1)
    print(f"✅ Order list reachable: {len(orders.orders)} orders")

    async with TrackingClient(store) as tracking_client:
        locations = await tracking_client.get_pickup_locations()
    if not locations.success:
        print(f"❌ Tracking API failed ({locations.error_kind}): {locations.message}")
        exit(1)
    print(f"✅ Tracking API reachable: {len(locations.pickup_locations)} pickup locations")
    exit(0)


if __name__ == "__main__":
    asyncio.run(check_backend())
