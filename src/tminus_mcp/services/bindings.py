"""Clients for the collaborating services behind scheduling tools.

Each binding exposes ``call(operation, payload)``. The HTTP binding posts
JSON to ``<base_url>/<operation path>`` and maps failures onto the tool error
hierarchy so the dispatcher can report them with the right JSON-RPC code.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Protocol

import httpx

from ..api.errors import InvalidParamsError, NotFoundError, ServiceUnavailableError
from ..config.settings import BindingSettings

logger = logging.getLogger(__name__)

USERGRAPH = "usergraph"
COMMITMENTS = "commitments"


class ServiceBinding(Protocol):
    name: str

    async def call(self, operation: str, payload: Dict[str, Any]) -> Any: ...


@dataclass(slots=True)
class UnavailableServiceBinding:
    """Stand-in for a binding that has no configured endpoint."""

    name: str

    async def call(self, operation: str, payload: Dict[str, Any]) -> Any:
        logger.warning("Service binding %s is not configured (operation %s)", self.name, operation)
        raise ServiceUnavailableError(self.name)

    async def aclose(self) -> None:
        return None


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        if isinstance(error, str):
            return error
        if body.get("message"):
            return str(body["message"])
    return response.reason_phrase


class HttpServiceBinding:
    def __init__(
        self,
        name: str,
        base_url: str,
        *,
        token: Optional[str] = None,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.name = name
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            headers = {"Content-Type": "application/json"}
            if self.token:
                headers["Authorization"] = f"Bearer {self.token}"
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                headers=headers,
                timeout=self.timeout,
                transport=self._transport,
            )
        return self._client

    async def call(self, operation: str, payload: Dict[str, Any]) -> Any:
        path = "/" + operation.replace(".", "/")
        client = await self._get_client()
        try:
            response = await client.post(path, json=payload)
        except httpx.HTTPError as exc:
            logger.warning("Service binding %s failed on %s: %s", self.name, operation, exc)
            raise ServiceUnavailableError(self.name) from exc

        if response.status_code == 404:
            raise NotFoundError(_error_message(response))
        if response.status_code in (400, 422):
            raise InvalidParamsError(_error_message(response))
        if not response.is_success:
            logger.warning("Service binding %s returned HTTP %s on %s", self.name, response.status_code, operation)
            raise ServiceUnavailableError(self.name)
        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError as exc:
            logger.warning("Service binding %s returned a non-JSON body on %s", self.name, operation)
            raise ServiceUnavailableError(self.name) from exc

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None


def _build_binding(name: str, base_url: Optional[str], settings: BindingSettings) -> Any:
    if not base_url:
        return UnavailableServiceBinding(name)
    return HttpServiceBinding(name, base_url, token=settings.token, timeout=settings.timeout_seconds)


@dataclass(slots=True)
class ServiceBindings:
    usergraph: ServiceBinding
    commitments: ServiceBinding

    @classmethod
    def from_settings(cls, settings: BindingSettings) -> "ServiceBindings":
        return cls(
            usergraph=_build_binding(USERGRAPH, settings.usergraph_url, settings),
            commitments=_build_binding(COMMITMENTS, settings.commitments_url, settings),
        )

    @classmethod
    def unavailable(cls) -> "ServiceBindings":
        return cls(
            usergraph=UnavailableServiceBinding(USERGRAPH),
            commitments=UnavailableServiceBinding(COMMITMENTS),
        )

    async def aclose(self) -> None:
        for binding in (self.usergraph, self.commitments):
            close = getattr(binding, "aclose", None)
            if close is not None:
                await close()


__all__ = [
    "COMMITMENTS",
    "HttpServiceBinding",
    "ServiceBinding",
    "ServiceBindings",
    "USERGRAPH",
    "UnavailableServiceBinding",
]
