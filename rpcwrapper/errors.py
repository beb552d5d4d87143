from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Dict, Optional

PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603
SERVER_ERROR = -32000

DEFAULT_MESSAGES: Dict[int, str] = {
    PARSE_ERROR: "Parse error",
    INVALID_REQUEST: "Invalid request",
    METHOD_NOT_FOUND: "Method not found",
    INVALID_PARAMS: "Invalid params",
    INTERNAL_ERROR: "Internal error",
    SERVER_ERROR: "Server error",
}


def is_valid_code(code: Any) -> bool:
    """Reserved range, parse error, or the implementation-defined server band."""
    if isinstance(code, bool) or not isinstance(code, int):
        return False
    return -32603 <= code <= -32600 or code == PARSE_ERROR or -32099 <= code <= -32000


def normalize_code(code: Any) -> int:
    return code if is_valid_code(code) else SERVER_ERROR


def _to_dict(code: int, message: str, data: Any) -> Dict[str, Any]:
    payload: Dict[str, Any] = {"code": code, "message": message}
    if data is not None:
        payload["data"] = data
    return payload


@dataclass(frozen=True)
class ErrorObject:
    """Wire value of the ``error`` member of a response."""

    code: int
    message: str
    data: Any = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "code", normalize_code(self.code))

    def to_dict(self) -> Dict[str, Any]:
        return _to_dict(self.code, self.message, self.data)


@dataclass(eq=False)
class RpcError(Exception):
    """
    Failure raised by services and operations to produce a specific error.

    Codes outside the legal bands are coerced to SERVER_ERROR; the message
    falls back to the canonical text of the resulting code.
    """

    code: int
    message: Optional[str] = None
    data: Any = None

    def __post_init__(self) -> None:
        self.code = normalize_code(self.code)
        if self.message is None:
            self.message = DEFAULT_MESSAGES.get(self.code, DEFAULT_MESSAGES[SERVER_ERROR])
        Exception.__init__(self, self.message)

    def to_error_object(self) -> ErrorObject:
        return ErrorObject(code=self.code, message=self.message, data=self.data)

    def to_dict(self) -> Dict[str, Any]:
        return _to_dict(self.code, self.message, self.data)

    def __str__(self) -> str:
        return json.dumps(self.to_dict(), separators=(",", ":"), default=str)


class ServiceContractError(NotImplementedError):
    """A service did not implement a required part of the capability contract."""

    def __init__(self, message: str = "ERR_METHOD_NOT_IMPLEMENTED"):
        super().__init__(message)


def create_error(code: int, message: Optional[str] = None, data: Any = None) -> RpcError:
    """
    Build an RpcError for ``code``.

    Canonical codes get their standard message when none is given; any
    other code gets "Server error".
    """
    if message is None:
        message = DEFAULT_MESSAGES.get(code, DEFAULT_MESSAGES[SERVER_ERROR])
    return RpcError(code=code, message=message, data=data)
