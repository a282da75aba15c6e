"""
Admin Shipment Management API Endpoints.

Board listing, shipment creation, manual status/tracking edits and carrier
sync for the storefront's orders.
"""

from fastapi import APIRouter, Depends, Path, Query, status
from typing import Optional
from petshop_shipping.app.core.dependencies import (
    get_order_board,
    get_orders_client,
    get_tracking_client,
    raise_for_failure,
)
from petshop_shipping.app.domain.shipping.creation import ShipmentCreator
from petshop_shipping.app.domain.shipping.presentation import progression_steps
from petshop_shipping.app.domain.shipping.reconciliation import ShipmentSyncService
from petshop_shipping.app.domain.shipping.stages import allowed_actions
from petshop_shipping.app.domain.shipping.status_rules import status_options
from petshop_shipping.app.domain.shipping.status_update import ShipmentStatusUpdater
from petshop_shipping.app.domain.shipping.tracking_lookup import shipment_details
from petshop_shipping.app.models.shipment_enums import ShipmentStatus
from petshop_shipping.app.schemas.order import OrderSummary
from petshop_shipping.app.schemas.shipment import (
    BoardResponse,
    CreateShipmentOutcome,
    ProgressStepResponse,
    StatusOptionResponse,
    StatusOptionsResponse,
    StatusUpdateRequest,
    SyncOutcome,
    TrackingInfoUpdate,
    UpdateOutcome,
)
from petshop_shipping.app.services.order_board import BoardFilter, OrderBoard
from petshop_shipping.app.services.orders_client import OrdersClient
from petshop_shipping.app.services.tracking_client import TrackingClient

router = APIRouter(prefix="/admin", tags=["Admin - Shipments"])


@router.get("/shipments", response_model=BoardResponse)
async def list_shipments(
    search: Optional[str] = Query(None, max_length=100, description="Order id, order number or AWB"),
    status_filter: str = Query(BoardFilter.ALL, alias="filter", pattern="^(all|shipped|unshipped|paid)$"),
    board: OrderBoard = Depends(get_order_board),
):
    """List board orders, optionally searched and filtered."""
    orders = board.filter(search=search, status_filter=status_filter)
    return BoardResponse(
        orders=[OrderSummary.from_record(order) for order in orders],
        total=len(orders)
    )


@router.post("/shipments/refresh", response_model=BoardResponse)
async def refresh_shipments(
    board: OrderBoard = Depends(get_order_board),
    orders_client: OrdersClient = Depends(get_orders_client),
):
    """Reload the board from the backend's order list."""
    result = await orders_client.get_all_orders()
    if not result.success:
        raise_for_failure(result.message, result.error_kind, result.status_code)

    board.load(result.orders)
    return BoardResponse(
        orders=[OrderSummary.from_record(order) for order in board.orders()],
        total=len(board)
    )


@router.post(
    "/shipments/{order_id}/shipment",
    response_model=CreateShipmentOutcome,
    status_code=status.HTTP_201_CREATED
)
async def create_shipment(
    order_id: str = Path(..., description="Order ID"),
    board: OrderBoard = Depends(get_order_board),
    tracking_client: TrackingClient = Depends(get_tracking_client),
):
    """
    Create a carrier shipment for an unshipped order.

    The response carries ``invoice_url`` when the carrier generated one.
    """
    outcome = await ShipmentCreator(tracking_client, board).create_shipment(order_id)
    if not outcome.success:
        raise_for_failure(outcome.message, outcome.error_kind, outcome.status_code, error=outcome.error)
    return outcome


@router.put("/shipments/{order_id}/status", response_model=UpdateOutcome)
async def update_shipment_status(
    payload: StatusUpdateRequest,
    order_id: str = Path(..., description="Order ID"),
    board: OrderBoard = Depends(get_order_board),
    tracking_client: TrackingClient = Depends(get_tracking_client),
):
    """
    Change an order's shipment status.

    Backward moves along the progression are rejected with 409; the
    backend re-validates whatever is accepted here.
    """
    outcome = await ShipmentStatusUpdater(tracking_client, board).update_status(
        order_id, payload.shipment_status
    )
    if not outcome.success:
        raise_for_failure(outcome.message, outcome.error_kind, outcome.status_code, error=outcome.error)
    return outcome


@router.put("/shipments/{order_id}/tracking", response_model=UpdateOutcome)
async def update_tracking_info(
    payload: TrackingInfoUpdate,
    order_id: str = Path(..., description="Order ID"),
    board: OrderBoard = Depends(get_order_board),
    tracking_client: TrackingClient = Depends(get_tracking_client),
):
    """Manually enter AWB number, shipment id or courier."""
    outcome = await ShipmentCreator(tracking_client, board).update_tracking(order_id, payload.to_fields())
    if not outcome.success:
        raise_for_failure(outcome.message, outcome.error_kind, outcome.status_code, error=outcome.error)
    return outcome


@router.post("/shipments/{order_id}/sync", response_model=SyncOutcome)
async def sync_shipment_status(
    order_id: str = Path(..., description="Order ID"),
    board: OrderBoard = Depends(get_order_board),
    tracking_client: TrackingClient = Depends(get_tracking_client),
):
    """Reconcile the order with the carrier's tracking data."""
    outcome = await ShipmentSyncService(tracking_client, board).sync_status(order_id)
    if not outcome.success:
        raise_for_failure(outcome.message, outcome.error_kind, outcome.status_code, error=outcome.error)
    return outcome


@router.get("/shipments/{order_id}/details")
async def get_shipment_details(
    order_id: str = Path(..., description="Order ID"),
    board: OrderBoard = Depends(get_order_board),
    tracking_client: TrackingClient = Depends(get_tracking_client),
):
    """
    Shipment details for one order.

    When tracking cannot be fetched the local order fields are returned with
    ``degraded`` set and the backend's message.
    """
    lookup = await shipment_details(tracking_client, board, order_id)
    return {
        "view": lookup.view,
        "degraded": lookup.degraded,
        "message": lookup.message,
        "allowed_actions": sorted(allowed_actions(board.require(order_id))),
    }


@router.get("/shipments/{order_id}/status-options", response_model=StatusOptionsResponse)
async def get_status_options(
    order_id: str = Path(..., description="Order ID"),
    selected: Optional[ShipmentStatus] = Query(None, description="Status being considered"),
    board: OrderBoard = Depends(get_order_board),
):
    """Statuses the admin may pick for this order, plus progression steps."""
    order = board.require(order_id)
    return StatusOptionsResponse(
        order_id=order.id,
        current_status=order.shipment_status,
        options=[
            StatusOptionResponse(status=option.status, selectable=option.selectable, label=option.label)
            for option in status_options(order.shipment_status)
        ],
        steps=[
            ProgressStepResponse(number=step.number, status=step.status, active=step.active)
            for step in progression_steps(order.shipment_status, selected)
        ],
    )


@router.get("/couriers")
async def list_available_couriers(
    pickup_postcode: str = Query(..., min_length=3, max_length=10),
    delivery_postcode: str = Query(..., min_length=3, max_length=10),
    weight: float = Query(..., gt=0, description="Weight in kilograms"),
    cod: bool = Query(False, description="Cash on delivery"),
    tracking_client: TrackingClient = Depends(get_tracking_client),
):
    result = await tracking_client.get_available_couriers(pickup_postcode, delivery_postcode, weight, cod)
    if not result.success:
        raise_for_failure(result.message, result.error_kind, result.status_code)
    return {"couriers": result.couriers, "message": result.message}


@router.get("/pickup-locations")
async def list_pickup_locations(
    tracking_client: TrackingClient = Depends(get_tracking_client),
):
    result = await tracking_client.get_pickup_locations()
    if not result.success:
        raise_for_failure(result.message, result.error_kind, result.status_code)
    return {"pickup_locations": result.pickup_locations, "message": result.message}
