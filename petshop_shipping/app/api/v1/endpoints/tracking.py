"""
Customer Tracking API Endpoints.

Order/AWB tracking with carrier progress, recent lookups and return requests.
"""

from fastapi import APIRouter, Depends, HTTPException, Path, Query, status
from typing import Optional
from petshop_shipping.app.core.dependencies import (
    get_tracking_client,
    get_tracking_history,
    raise_for_failure,
)
from petshop_shipping.app.domain.shipping.tracking_lookup import TrackingIdType, track
from petshop_shipping.app.schemas.shipment import ReturnRequest
from petshop_shipping.app.services.tracking_client import TrackingClient
from petshop_shipping.app.services.tracking_history import TrackingHistory

router = APIRouter(prefix="/tracking", tags=["Tracking"])


@router.get("")
async def track_shipment(
    order_id: Optional[str] = Query(None, description="Order ID"),
    awb: Optional[str] = Query(None, description="AWB number"),
    tracking_client: TrackingClient = Depends(get_tracking_client),
    history: TrackingHistory = Depends(get_tracking_history),
):
    """Track by order id or by AWB (exactly one)."""
    if bool(order_id) == bool(awb):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Provide either order_id or awb"
        )

    if order_id:
        lookup = await track(tracking_client, order_id, TrackingIdType.ORDER, history)
    else:
        lookup = await track(tracking_client, awb, TrackingIdType.AWB, history)

    if not lookup.success:
        raise_for_failure(lookup.message, lookup.error_kind, lookup.status_code)
    return lookup


@router.get("/history")
async def recent_lookups(history: TrackingHistory = Depends(get_tracking_history)):
    return {"history": await history.entries()}


@router.post("/{order_id}/return")
async def request_return(
    payload: ReturnRequest,
    order_id: str = Path(..., description="Order ID"),
    tracking_client: TrackingClient = Depends(get_tracking_client),
):
    """Submit a return request for an order."""
    result = await tracking_client.request_return(order_id, payload.reason)
    if not result.success:
        raise_for_failure(result.message, result.error_kind, result.status_code)
    return {"order": result.order, "message": result.message}
