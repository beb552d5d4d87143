"""
rpcwrapper - transport-agnostic JSON-RPC 2.0 dispatcher.
"""

from rpcwrapper.errors import (
    INTERNAL_ERROR,
    INVALID_PARAMS,
    INVALID_REQUEST,
    METHOD_NOT_FOUND,
    PARSE_ERROR,
    SERVER_ERROR,
    ErrorObject,
    RpcError,
    ServiceContractError,
    create_error,
)
from rpcwrapper.service import ModelValidatedService, RpcServiceBase
from rpcwrapper.wrapper import RpcWrapper

__version__ = "1.0.0"

__all__ = [
    "INTERNAL_ERROR",
    "INVALID_PARAMS",
    "INVALID_REQUEST",
    "METHOD_NOT_FOUND",
    "PARSE_ERROR",
    "SERVER_ERROR",
    "ErrorObject",
    "ModelValidatedService",
    "RpcError",
    "RpcServiceBase",
    "RpcWrapper",
    "ServiceContractError",
    "create_error",
]
