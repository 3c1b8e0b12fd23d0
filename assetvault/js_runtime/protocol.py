"""
JSON-RPC 2.0 message types for the JS runtime bridge.

Requests go to the subprocess one JSON object per line on stdin; responses
and notifications come back the same way on stdout.
"""

from __future__ import annotations

import json
import uuid
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Optional, Union


Params = Optional[Union[list[Any], dict[str, Any]]]


class JSONRPCErrorCode(IntEnum):
    """JSON-RPC 2.0 error codes, plus the server range used by the services."""

    PARSE_ERROR = -32700
    INVALID_REQUEST = -32600
    METHOD_NOT_FOUND = -32601
    INVALID_PARAMS = -32602
    INTERNAL_ERROR = -32603

    SERVER_ERROR = -32000
    TIMEOUT_ERROR = -32001
    RUNTIME_NOT_READY = -32002
    SDK_ERROR = -32003
    ENCRYPTION_ERROR = -32004


class JSONRPCError(Exception):
    """Error returned by (or raised while talking to) the JS runtime."""

    def __init__(
        self,
        code: Union[JSONRPCErrorCode, int],
        message: str,
        data: Optional[Any] = None
    ):
        super().__init__(message)
        self.code = int(code)
        self.message = message
        self.data = data

    def to_dict(self) -> dict[str, Any]:
        error: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.data is not None:
            error["data"] = self.data
        return error

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "JSONRPCError":
        return cls(
            code=data.get("code", JSONRPCErrorCode.INTERNAL_ERROR),
            message=data.get("message", "Unknown error"),
            data=data.get("data"),
        )

    @classmethod
    def parse_error(cls, data: Optional[Any] = None) -> "JSONRPCError":
        return cls(JSONRPCErrorCode.PARSE_ERROR, "Parse error", data)

    @classmethod
    def timeout_error(cls, timeout_seconds: float) -> "JSONRPCError":
        return cls(
            JSONRPCErrorCode.TIMEOUT_ERROR,
            f"Request timed out after {timeout_seconds}s"
        )


@dataclass
class JSONRPCRequest:
    """A request, or a notification when ``id`` is None."""

    method: str
    params: Params = None
    id: Optional[str] = field(default_factory=lambda: str(uuid.uuid4()))
    jsonrpc: str = "2.0"

    def to_dict(self) -> dict[str, Any]:
        request: dict[str, Any] = {"jsonrpc": self.jsonrpc, "method": self.method}
        if self.params is not None:
            request["params"] = self.params
        if self.id is not None:
            request["id"] = self.id
        return request

    def to_json(self) -> str:
        return json.dumps(self.to_dict())

    @property
    def is_notification(self) -> bool:
        return self.id is None


@dataclass
class JSONRPCResponse:
    """A response carrying either ``result`` or ``error``."""

    id: Optional[str]
    result: Optional[Any] = None
    error: Optional[JSONRPCError] = None
    jsonrpc: str = "2.0"

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "JSONRPCResponse":
        error = None
        if data.get("error") is not None:
            error = JSONRPCError.from_dict(data["error"])
        return cls(
            id=data.get("id"),
            result=data.get("result"),
            error=error,
            jsonrpc=data.get("jsonrpc", "2.0"),
        )

    @classmethod
    def from_json(cls, json_str: str) -> "JSONRPCResponse":
        try:
            return cls.from_dict(json.loads(json_str))
        except json.JSONDecodeError as e:
            raise JSONRPCError.parse_error(str(e))

    @property
    def is_success(self) -> bool:
        return self.error is None

    def raise_for_error(self) -> None:
        """Raise the carried error, if any."""
        if self.error is not None:
            raise self.error


class JSONRPCProtocol:
    """Tracks outstanding request ids so responses can be matched."""

    def __init__(self):
        self._pending_requests: dict[str, JSONRPCRequest] = {}

    def create_request(
        self,
        method: str,
        params: Params = None,
        notification: bool = False
    ) -> JSONRPCRequest:
        request = JSONRPCRequest(
            method=method,
            params=params,
            id=None if notification else str(uuid.uuid4()),
        )
        if request.id is not None:
            self._pending_requests[request.id] = request
        return request

    def match_response(self, response: JSONRPCResponse) -> Optional[JSONRPCRequest]:
        if response.id is None:
            return None
        return self._pending_requests.pop(response.id, None)

    def cancel_request(self, request_id: str) -> Optional[JSONRPCRequest]:
        return self._pending_requests.pop(request_id, None)

    def clear_pending(self) -> list[JSONRPCRequest]:
        requests = list(self._pending_requests.values())
        self._pending_requests.clear()
        return requests

    @property
    def pending_count(self) -> int:
        return len(self._pending_requests)


class JSRuntimeMethods:
    """Method names understood by assetvault/js_services/main.mjs."""

    # Lifecycle
    PING = "ping"
    SHUTDOWN = "shutdown"
    GET_STATUS = "getStatus"

    # Lit Protocol
    LIT_CONNECT = "lit.connect"
    LIT_ENCRYPT_FILE = "lit.encryptFile"
    LIT_DECRYPT_TO_FILE = "lit.decryptToFile"
