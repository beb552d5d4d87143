from __future__ import annotations

import inspect
import logging
from typing import Any, Dict, List, Optional, Type

from pydantic import BaseModel, ValidationError

from rpcwrapper.errors import INVALID_PARAMS, METHOD_NOT_FOUND, ServiceContractError, create_error

logger = logging.getLogger(__name__)


class RpcServiceBase:
    """
    Base class for services that control what the dispatcher may call.

    Subclasses list their callable operations in ``methods`` and implement
    ``are_params_valid``. A name is only callable when it is registered and
    a callable attribute with that exact name exists on the instance.

    Usage:
        class ProductService(RpcServiceBase):
            def __init__(self):
                super().__init__()
                self.methods.extend(["find"])

            async def find(self, product_id):
                ...

            def are_params_valid(self, method, params):
                return isinstance(params, list) and len(params) == 1
    """

    def __init__(self) -> None:
        self.methods: List[str] = []

    async def validate_method(self, method: str) -> None:
        if method not in self.methods or not callable(getattr(self, method, None)):
            raise create_error(METHOD_NOT_FOUND)

    async def validate_params(self, method: str, params: Any) -> None:
        valid = self.are_params_valid(method, params)
        if inspect.isawaitable(valid):
            valid = await valid
        if not valid:
            raise create_error(INVALID_PARAMS)

    def are_params_valid(self, method: str, params: Any) -> bool:
        """
        Decide whether ``params`` are acceptable for ``method``.

        May be a coroutine function. Must be overridden.
        """
        raise ServiceContractError()


class ModelValidatedService(RpcServiceBase):
    """
    Service whose parameters are validated with pydantic models.

    ``param_models`` maps a method name to the model its params must satisfy.
    Keyed params are validated as the model input; positional params are
    matched to the model fields in declaration order. Methods without a model
    accept any params.
    """

    param_models: Dict[str, Type[BaseModel]] = {}

    def __init__(self, param_models: Optional[Dict[str, Type[BaseModel]]] = None) -> None:
        super().__init__()
        if param_models is not None:
            self.param_models = dict(param_models)
        self.methods.extend(self.param_models)

    def are_params_valid(self, method: str, params: Any) -> bool:
        model = self.param_models.get(method)
        if model is None:
            return True

        if isinstance(params, list):
            fields = list(model.model_fields)
            if len(params) > len(fields):
                return False
            data = dict(zip(fields, params))
        elif params is None:
            data = {}
        else:
            data = params

        try:
            model.model_validate(data)
        except ValidationError as exc:
            logger.debug(f"Params rejected for {method}: {exc.error_count()} error(s)")
            return False
        return True
