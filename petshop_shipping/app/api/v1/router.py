"""
API v1 Router.

Aggregates all v1 API endpoints.
"""

from fastapi import APIRouter
from petshop_shipping.app.api.v1.endpoints import admin_shipments, tracking

router = APIRouter()

# Admin shipment management
router.include_router(admin_shipments.router)

# Customer tracking
router.include_router(tracking.router)
