"""
Base client for the storefront backend REST API.

Handles:
1. HTTP client management (one ``httpx.AsyncClient`` per client object)
2. Bearer token attachment from the session store, read per request
3. Normalizing every outcome into a result model; nothing is raised to callers
"""

import logging
from typing import Any, Dict, Optional, Type

import httpx
from pydantic import ValidationError

from petshop_shipping.app.core.config import settings
from petshop_shipping.app.core.observability import redact_token
from petshop_shipping.app.core.session import SessionStore, bearer_token
from petshop_shipping.app.schemas.tracking import (
    ApiResult,
    ErrorKind,
    backend_message,
    normalize_response,
)

logger = logging.getLogger("petshop_shipping.backend")

DEFAULT_HEADERS = {
    "Content-Type": "application/json",
}


class BackendClient:
    """
    Base class for storefront backend clients.

    Subclasses set ``api_path`` and call ``_request`` with the result model
    describing the expected envelope.
    """

    api_path: str = ""

    def __init__(
        self,
        session_store: SessionStore,
        base_url: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: Optional[float] = None,
    ):
        self.session_store = session_store
        self.base_url = f"{(base_url or settings.backend_url).rstrip('/')}{self.api_path}"

        client_kwargs: Dict[str, Any] = {
            "base_url": self.base_url,
            "headers": DEFAULT_HEADERS,
        }
        timeout = timeout if timeout is not None else settings.request_timeout_seconds
        if timeout is not None:
            client_kwargs["timeout"] = timeout
        if transport is not None:
            client_kwargs["transport"] = transport

        self.client = httpx.AsyncClient(**client_kwargs)

        logger.debug(f"Initialized {self.__class__.__name__}: {self.base_url}")

    @staticmethod
    def _auth_headers(token: Optional[str]) -> Dict[str, str]:
        if not token:
            return {}
        return {"Authorization": f"Bearer {token}"}

    async def _request(
        self,
        method: str,
        path: str,
        result_cls: Type[ApiResult],
        success_message: str,
        failure_message: str,
        **kwargs,
    ) -> ApiResult:
        """
        Issue one request and normalize its outcome.

        Args:
            method: HTTP method
            path: Path relative to the client's base URL
            result_cls: Result model for the expected envelope
            success_message: Message when the backend sends none on success
            failure_message: Fallback when a failure carries no backend message
            **kwargs: Passed to ``httpx.AsyncClient.request`` (params, json)

        Returns:
            ``result_cls`` instance, ``success`` False on any failure
        """
        try:
            token = await bearer_token(self.session_store)
        except Exception as exc:
            logger.error(f"{failure_message}: session store unavailable for {method} {path}: {exc}")
            return result_cls.failure(
                failure_message,
                error=f"Session store unavailable: {exc}",
                error_kind=ErrorKind.TRANSPORT,
            )

        headers = self._auth_headers(token)
        logger.debug(
            f"API Request: {method} {path}",
            extra={"payload": kwargs.get("json"), "token": redact_token(token)}
        )

        try:
            response = await self.client.request(method, path, headers=headers, **kwargs)
        except httpx.RequestError as exc:
            logger.error(f"{failure_message}: transport error on {method} {path}: {exc}")
            return result_cls.failure(failure_message, error=str(exc), error_kind=ErrorKind.TRANSPORT)

        try:
            payload = response.json()
        except ValueError:
            payload = None

        if response.is_error:
            logger.warning(
                f"API Error Response: {method} {path} ({response.status_code})",
                extra={"response": payload}
            )
            return result_cls.failure(
                backend_message(payload) or failure_message,
                error=f"Request failed with status code {response.status_code}",
                error_kind=ErrorKind.BACKEND,
                status_code=response.status_code,
            )

        if payload is None:
            logger.error(f"{failure_message}: undecodable body from {method} {path}")
            return result_cls.failure(
                failure_message,
                error="Response body is not valid JSON",
                error_kind=ErrorKind.BACKEND,
                status_code=response.status_code,
            )

        try:
            result = normalize_response(result_cls, payload, success_message)
        except ValidationError as exc:
            logger.error(f"{failure_message}: unexpected response shape from {method} {path}: {exc}")
            return result_cls.failure(
                failure_message,
                error=f"Unexpected response shape: {exc.error_count()} error(s)",
                error_kind=ErrorKind.BACKEND,
                status_code=response.status_code,
            )

        result.status_code = response.status_code
        logger.debug(f"API Success Response: {method} {path} ({response.status_code})")
        return result

    async def aclose(self) -> None:
        """Close the HTTP client."""
        await self.client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.aclose()
