"""
JSON-RPC transport.

One POST per call, no batching or pipelining: every flow in ipckit is
strict request/response, so the request ``id`` is a constant.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import httpx

from ..errors import RpcError, SchemaError, TransportError
from ..models import NetworkEndpoint

logger = logging.getLogger("ipckit.chain.rpc")

REQUEST_ID = 42
DEFAULT_TIMEOUT = 30.0


class RpcTransport:
    """
    Sends JSON-RPC 2.0 requests to a network endpoint.

    The transport owns its ``httpx.AsyncClient`` unless one is injected,
    in which case closing the transport leaves the shared client open.
    """

    def __init__(
        self,
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self._http_client = http_client
        self._owns_client = http_client is None
        self._timeout = timeout

    def _client(self) -> httpx.AsyncClient:
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(timeout=self._timeout)
            self._owns_client = True
        return self._http_client

    async def close(self) -> None:
        if self._owns_client and self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None

    async def __aenter__(self) -> "RpcTransport":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def call(self, endpoint: NetworkEndpoint, method: str, params: list[Any]) -> Any:
        """
        Make a JSON-RPC call.

        Args:
            endpoint: Network to send the request to
            method: RPC method name (e.g., "eth_call")
            params: RPC parameters

        Returns:
            The ``result`` member, unvalidated (``None`` for a JSON null)

        Raises:
            TransportError: Connection failure, timeout or non-2xx status
            SchemaError: Body is not a JSON object
            RpcError: Node returned an error object or no result
        """
        payload = {
            "jsonrpc": "2.0",
            "method": method,
            "id": REQUEST_ID,
            "params": params,
        }
        logger.debug(f"{endpoint.name} -> {method} {params}")

        try:
            response = await self._client().post(endpoint.rpc_url, json=payload)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise TransportError(
                f"{method}: HTTP {exc.response.status_code} from {endpoint.rpc_url}"
            ) from exc
        except httpx.HTTPError as exc:
            raise TransportError(f"{method}: {exc.__class__.__name__}: {exc}") from exc

        try:
            data = response.json()
        except ValueError as exc:
            raise SchemaError(f"{method}: response is not JSON") from exc
        if not isinstance(data, dict):
            raise SchemaError(f"{method}: response is not a JSON object")

        error = data.get("error")
        if error is not None:
            if isinstance(error, dict):
                raise RpcError(
                    method,
                    str(error.get("message", error)),
                    code=error.get("code"),
                    data=error.get("data"),
                )
            raise RpcError(method, str(error))
        if "result" not in data:
            raise RpcError(method, "response carries neither result nor error")

        return data["result"]
