"""
JSON-RPC 2.0 dispatcher.

Turns raw request text into response objects for a single target. The target
is either an RpcServiceBase (methods and params are validated by the service)
or any plain object whose callable members are exposed by name:

- mappings expose their keys
- lists and tuples expose their indices ("0", "1", ...)
- other objects expose their public attributes

Usage:
    from rpcwrapper import RpcWrapper

    wrapper = RpcWrapper({"echo": lambda value: value})
    response = await wrapper.process('{"jsonrpc":"2.0","id":1,"method":"echo","params":["hi"]}')
    # {"jsonrpc": "2.0", "result": "hi", "id": 1}

Transports serialize whatever ``process`` returns and send nothing when it
returns None. Every response it returns encodes as strict JSON; a result that
does not (NaN, a set) is answered with a server error.
"""

from __future__ import annotations

import asyncio
import inspect
import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Optional, Union

from rpcwrapper.errors import (
    INVALID_REQUEST,
    METHOD_NOT_FOUND,
    PARSE_ERROR,
    SERVER_ERROR,
    ErrorObject,
    RpcError,
    ServiceContractError,
    create_error,
)
from rpcwrapper.service import RpcServiceBase
from rpcwrapper.utils import is_nil, is_string_or_number

logger = logging.getLogger("rpc-wrapper")

JSONRPC_VERSION = "2.0"

DIRECT = "direct"
CALLBACK = "callback"

Response = Dict[str, Any]


class CallbackError(Exception):
    """A callback-style operation reported an error value that is not an exception."""


@dataclass(frozen=True)
class Operation:
    """
    A resolved, invocable member of the target.

    ``arity`` is the number of positional arguments the callable accepts
    (excluding the completion callback), or None when it takes ``*args``.
    Surplus positional params are dropped.
    """

    name: str
    func: Callable[..., Any]
    style: str = DIRECT
    arity: Optional[int] = None

    @classmethod
    def from_callable(cls, name: str, func: Callable[..., Any], callback: bool = False) -> "Operation":
        arity = _positional_arity(func)
        if callback and arity is not None:
            arity = max(arity - 1, 0)
        return cls(name=name, func=func, style=CALLBACK if callback else DIRECT, arity=arity)

    async def __call__(self, params: Any) -> Any:
        args = self._arguments(params)
        if self.style == CALLBACK:
            return await self._call_with_callback(args)

        value = self.func(*args)
        if inspect.isawaitable(value):
            return await value
        return value

    def _arguments(self, params: Any) -> List[Any]:
        if isinstance(params, list):
            args = list(params)
        elif is_nil(params):
            args = []
        else:
            args = [params]
        if self.arity is not None:
            args = args[: self.arity]
        return args

    async def _call_with_callback(self, args: List[Any]) -> Any:
        loop = asyncio.get_running_loop()
        future: asyncio.Future = loop.create_future()

        def settle(error: Any, result: Any) -> None:
            if future.done():
                return
            if error:
                future.set_exception(error if isinstance(error, BaseException) else CallbackError(str(error)))
            else:
                future.set_result(result)

        def callback(error: Any = None, result: Any = None) -> None:
            try:
                running = asyncio.get_running_loop()
            except RuntimeError:
                running = None
            if running is loop:
                settle(error, result)
            else:
                # Completion from a worker thread.
                loop.call_soon_threadsafe(settle, error, result)

        value = self.func(*args, callback)
        if inspect.isawaitable(value):
            await value
        return await future


class RpcWrapper:
    def __init__(
        self,
        service: Any,
        cb_methods: Iterable[str] = (),
        *,
        strict_version: bool = False,
    ):
        """
        Args:
            service: RpcServiceBase instance, or a plain mapping/sequence/object
            cb_methods: Names of operations that report completion through a
                trailing ``callback(error, result)`` argument
            strict_version: Reject requests whose "jsonrpc" member is not "2.0"

        Raises:
            ValueError: service is None
            TypeError: service is a scalar, a function or a class
        """
        if service is None:
            raise ValueError("ERR_SERVICE_REQUIRED")
        if _is_scalar(service) or inspect.isroutine(service) or inspect.isclass(service):
            raise TypeError("ERR_SERVICE_NOT_OBJECT")

        if isinstance(cb_methods, str):
            cb_methods = [cb_methods]
        self.cb_methods = frozenset(cb_methods)
        self.strict_version = strict_version

        self.service: Optional[RpcServiceBase] = None
        self.proxy: Any = None
        if isinstance(service, RpcServiceBase):
            self.service = service
            self._operations: Dict[str, Operation] = {}
        else:
            self.proxy = service
            self._operations = {
                name: Operation.from_callable(name, func, callback=name in self.cb_methods)
                for name, func in _plain_members(service).items()
            }

    @property
    def is_managed(self) -> bool:
        return self.service is not None

    async def process(self, payload: Union[str, bytes]) -> Union[Response, List[Response], None]:
        """
        Handle one raw payload (single request or batch).

        Returns a response, a list of responses, or None when nothing should
        be sent back.
        """
        try:
            req = json.loads(payload, parse_constant=_reject_constant)
        except (ValueError, RecursionError):
            return self.build_response(None, create_error(PARSE_ERROR))

        if isinstance(req, list):
            responses = [res for res in await self._process_batch(req) if not is_nil(res)]
            if responses:
                return responses
            return None

        return await self.process_one(req)

    async def process_one(self, req: Any) -> Optional[Response]:
        if not isinstance(req, dict):
            return self.build_response(None, create_error(INVALID_REQUEST))

        req_id = req.get("id")
        if not is_nil(req_id) and not is_string_or_number(req_id):
            return self.build_response(None, create_error(INVALID_REQUEST))

        method = req.get("method")
        if not isinstance(method, str) or not method:
            return self.build_response(req_id, create_error(INVALID_REQUEST))

        params = req.get("params")
        if not is_nil(params) and not isinstance(params, (dict, list)):
            return self.build_response(req_id, create_error(INVALID_REQUEST))

        if self.strict_version and req.get("jsonrpc") != JSONRPC_VERSION:
            return self.build_response(req_id, create_error(INVALID_REQUEST))

        send_response = not is_nil(req_id)
        logger.debug(f"Dispatching {method} (id={req_id!r})")

        try:
            operation = await self._resolve(method, params)
            result = await operation(params)
        except ServiceContractError:
            raise
        except RpcError as exc:
            error: Union[RpcError, ErrorObject] = exc
        except Exception as exc:
            logger.warning(f"Operation {method} failed (id={req_id!r}): {type(exc).__name__}: {exc}")
            error = create_error(SERVER_ERROR, data=_describe_exception(exc))
        else:
            if send_response:
                return self._encodable(self.build_response(req_id, result=result))
            return None

        if send_response:
            return self._encodable(self.build_response(req_id, error))
        return None

    async def _process_batch(self, requests: List[Any]) -> List[Optional[Response]]:
        try:
            async with asyncio.TaskGroup() as group:
                tasks = [group.create_task(self.process_one(item)) for item in requests]
        except ExceptionGroup as exc_group:
            # Siblings are cancelled by now; surface the contract error itself.
            raise exc_group.exceptions[0] from None
        return [task.result() for task in tasks]

    def _encodable(self, response: Response) -> Response:
        try:
            json.dumps(response, allow_nan=False)
        except (TypeError, ValueError, RecursionError) as exc:
            logger.warning(f"Response for id={response['id']!r} is not valid JSON: {type(exc).__name__}: {exc}")
            return self.build_response(response["id"], create_error(SERVER_ERROR, data=_describe_exception(exc)))
        return response

    async def _resolve(self, method: str, params: Any) -> Operation:
        if self.service is not None:
            await self.service.validate_method(method)
            await self.service.validate_params(method, params)
            operation = self._operations.get(method)
            if operation is None:
                operation = Operation.from_callable(
                    method, getattr(self.service, method), callback=method in self.cb_methods
                )
                self._operations[method] = operation
            return operation

        operation = self._operations.get(method)
        if operation is None:
            raise create_error(METHOD_NOT_FOUND)
        return operation

    @staticmethod
    def build_response(
        request_id: Any,
        error: Union[RpcError, ErrorObject, None] = None,
        result: Any = None,
    ) -> Response:
        """Error wins over result; a missing result is sent as an explicit null."""
        response: Response = {"jsonrpc": JSONRPC_VERSION}
        if error is not None:
            response["error"] = error.to_dict()
        else:
            response["result"] = result
        response["id"] = request_id if is_string_or_number(request_id) else None
        return response


def _is_scalar(value: Any) -> bool:
    return isinstance(value, (str, bytes, bytearray, int, float, complex))


def _plain_members(target: Any) -> Dict[str, Callable[..., Any]]:
    if isinstance(target, Mapping):
        return {str(key): value for key, value in target.items() if callable(value)}
    if isinstance(target, (list, tuple)):
        return {str(index): value for index, value in enumerate(target) if callable(value)}

    members: Dict[str, Callable[..., Any]] = {}
    for name in dir(target):
        if name.startswith("_"):
            continue
        # Properties and other data descriptors are never read.
        if inspect.isdatadescriptor(inspect.getattr_static(target, name, None)):
            continue
        try:
            value = getattr(target, name)
        except AttributeError:
            continue
        if callable(value):
            members[name] = value
    return members


def _positional_arity(func: Callable[..., Any]) -> Optional[int]:
    try:
        signature = inspect.signature(func)
    except (TypeError, ValueError):
        return None

    count = 0
    for parameter in signature.parameters.values():
        if parameter.kind is inspect.Parameter.VAR_POSITIONAL:
            return None
        if parameter.kind in (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD):
            count += 1
    return count


def _describe_exception(exc: BaseException) -> str:
    message = str(exc)
    if not message:
        return type(exc).__name__
    return f"{type(exc).__name__}: {message}"


def _reject_constant(name: str) -> Any:
    raise ValueError(f"Invalid JSON constant: {name}")
