"""
FastAPI dependencies for the admin shipment API.

Wires the session store, backend clients and the order board into endpoints.
"""

from typing import AsyncIterator, Optional

import httpx
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from petshop_shipping.app.core.config import settings
from petshop_shipping.app.core.exceptions import TrackingProviderError
from petshop_shipping.app.core.session import InMemorySessionStore, SessionStore
from petshop_shipping.app.schemas.tracking import ErrorKind
from petshop_shipping.app.services.order_board import OrderBoard
from petshop_shipping.app.services.orders_client import OrdersClient
from petshop_shipping.app.services.tracking_client import TrackingClient
from petshop_shipping.app.services.tracking_history import TrackingHistory

# Optional: callers without a header fall back to the persisted token
security = HTTPBearer(auto_error=False)


async def get_app_session_store(request: Request) -> SessionStore:
    return request.app.state.session_store


async def get_session_store(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    app_store: SessionStore = Depends(get_app_session_store),
) -> SessionStore:
    """
    Store the backend clients read the bearer token from.

    A token presented to this API is forwarded to the backend as-is;
    otherwise the app-level persisted token is used.
    """
    if credentials is not None and credentials.credentials:
        return InMemorySessionStore({settings.token_storage_key: credentials.credentials})
    return app_store


async def get_backend_transport() -> Optional[httpx.AsyncBaseTransport]:
    """Transport for backend clients; None means real network I/O."""
    return None


async def get_tracking_client(
    session_store: SessionStore = Depends(get_session_store),
    transport: Optional[httpx.AsyncBaseTransport] = Depends(get_backend_transport),
) -> AsyncIterator[TrackingClient]:
    client = TrackingClient(session_store, transport=transport)
    try:
        yield client
    finally:
        await client.aclose()


async def get_orders_client(
    session_store: SessionStore = Depends(get_session_store),
    transport: Optional[httpx.AsyncBaseTransport] = Depends(get_backend_transport),
) -> AsyncIterator[OrdersClient]:
    client = OrdersClient(session_store, transport=transport)
    try:
        yield client
    finally:
        await client.aclose()


async def get_order_board(request: Request) -> OrderBoard:
    return request.app.state.order_board


async def get_tracking_history(
    app_store: SessionStore = Depends(get_app_session_store),
) -> TrackingHistory:
    return TrackingHistory(app_store)


def raise_for_failure(
    message: Optional[str],
    error_kind: Optional[ErrorKind],
    status_code: Optional[int] = None,
    error: Optional[str] = None,
) -> None:
    """
    Translate a failed result/outcome into an HTTP error.

    Raises:
        HTTPException: 409 for client-side validation (404 for unknown
            orders), the backend's 4xx as-is, 503 when the backend is
            unreachable
        TrackingProviderError: any other backend failure (502)
    """
    if error_kind == ErrorKind.VALIDATION:
        code = status.HTTP_404_NOT_FOUND if error == "ERR_NOT_FOUND_001" else status.HTTP_409_CONFLICT
    elif error_kind == ErrorKind.TRANSPORT:
        code = status.HTTP_503_SERVICE_UNAVAILABLE
    elif status_code is not None and 400 <= status_code < 500:
        code = status_code
    else:
        raise TrackingProviderError(message or "Tracking provider request failed", error=error)
    raise HTTPException(status_code=code, detail=message or "Request failed")
