"""
JSON-RPC Transport
==================
Sends device status to the telemetry collector.

One request per call: a JSON-RPC 2.0 envelope POSTed over HTTP,
answered by a JSON-RPC 2.0 envelope. Collector-side errors carried in
the envelope are logged, not raised. Only network failures and
undecodable replies raise TransportError.
"""

import logging
from dataclasses import dataclass
from typing import Any, Optional

import httpx

from .config import (
    HTTP_TIMEOUT_SEC,
    JSONRPC_VERSION,
    UPDATE_STATUS_REQUEST_ID,
    GET_STATUS_REQUEST_ID,
)
from .errors import TransportError, ResponseDecodeError
from .models import DeviceStatus

logger = logging.getLogger(__name__)


@dataclass
class JsonRpcRequest:
    method: str
    params: Any = None
    id: int = 1
    jsonrpc: str = JSONRPC_VERSION

    def to_dict(self) -> dict:
        return {
            "jsonrpc": self.jsonrpc,
            "method": self.method,
            "params": self.params,
            "id": self.id,
        }


@dataclass
class JsonRpcResponse:
    jsonrpc: str
    id: int
    result: Any = None
    error: Any = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def from_dict(cls, data: Any) -> "JsonRpcResponse":
        """
        Decode a response envelope.

        Raises:
            ResponseDecodeError: envelope shape does not match
        """
        if not isinstance(data, dict):
            raise ResponseDecodeError(f"response must be an object, got {type(data).__name__}")

        jsonrpc = data.get("jsonrpc")
        if not isinstance(jsonrpc, str):
            raise ResponseDecodeError("response is missing 'jsonrpc'")

        # bool is an int subclass and is not a valid id
        msg_id = data.get("id")
        if not isinstance(msg_id, int) or isinstance(msg_id, bool) or msg_id < 0:
            raise ResponseDecodeError(f"response id must be an unsigned integer, got {msg_id!r}")

        return cls(
            jsonrpc=jsonrpc,
            id=msg_id,
            result=data.get("result"),
            error=data.get("error"),
        )


class RpcClient:
    """
    JSON-RPC client for the telemetry collector.

    Holds one reusable httpx.Client; close() releases it.
    """

    def __init__(
        self,
        url: str,
        timeout: float = HTTP_TIMEOUT_SEC,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        """
        Initialize client.

        Args:
            url: Collector endpoint
            timeout: Per-request timeout in seconds
            transport: Optional httpx transport (tests use MockTransport)
        """
        self.url = url
        self.timeout = timeout
        self._client = httpx.Client(timeout=timeout, transport=transport)

    def _call(self, request: JsonRpcRequest) -> JsonRpcResponse:
        try:
            response = self._client.post(self.url, json=request.to_dict())
        except httpx.HTTPError as e:
            raise TransportError(f"{request.method} request to {self.url} failed: {e}") from e

        try:
            body = response.json()
        except ValueError as e:
            raise ResponseDecodeError(f"{request.method} response is not JSON: {e}") from e

        return JsonRpcResponse.from_dict(body)

    def update_status(self, status: DeviceStatus) -> JsonRpcResponse:
        """
        Push a status snapshot to the collector.

        Raises:
            TransportError: network failure or undecodable reply
        """
        request = JsonRpcRequest(
            method="update_status",
            params=status.to_dict(),
            id=UPDATE_STATUS_REQUEST_ID,
        )
        response = self._call(request)

        if response.error is not None:
            logger.error(f"Error: {response.error!r}")
        elif response.result is not None:
            logger.debug(f"Response: {response.result!r}")

        return response

    def get_status(self) -> JsonRpcResponse:
        """
        Ask the collector for the status it holds (diagnostics).

        Raises:
            TransportError: network failure or undecodable reply
        """
        request = JsonRpcRequest(method="get_status", params=None, id=GET_STATUS_REQUEST_ID)
        response = self._call(request)

        if response.error is not None:
            logger.error(f"Error: {response.error!r}")
        elif response.result is not None:
            logger.info(f"Response: {response.result!r}")

        return response

    def close(self):
        self._client.close()

    def __enter__(self) -> "RpcClient":
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
