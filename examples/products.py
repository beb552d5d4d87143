"""Capability-contract service: only registered methods with valid params run."""

from __future__ import annotations

import asyncio
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from rpcwrapper import ModelValidatedService

Product = Dict[str, Any]


class CreateInput(BaseModel):
    """Keyed params of ``create``: exactly an id and a name."""

    model_config = ConfigDict(extra="forbid", strict=True)

    id: int = Field(..., gt=0, description="Product id")
    name: str = Field(..., min_length=1, description="Product name")


class ProductIdInput(BaseModel):
    """Positional params of ``find`` and ``remove``: ``[id]``."""

    model_config = ConfigDict(strict=True)

    id: int = Field(..., gt=0, description="Product id")


class ProductService(ModelValidatedService):
    param_models = {
        "create": CreateInput,
        "remove": ProductIdInput,
        "find": ProductIdInput,
    }

    def __init__(self, products: Optional[List[Product]] = None):
        super().__init__()
        self.products: List[Product] = list(products or [])

    async def create(self, item: Product) -> None:
        await asyncio.sleep(0)
        self.products.append(item)

    def remove(self, product_id: int) -> None:
        self.products = [p for p in self.products if p["id"] != product_id]

    async def find(self, product_id: int) -> Optional[Product]:
        await asyncio.sleep(0)
        return next((p for p in self.products if p["id"] == product_id), None)


def default_catalog() -> List[Product]:
    return [
        {"id": 1, "name": "Product 1"},
        {"id": 2, "name": "Product 2"},
        {"id": 3, "name": "Product 3"},
    ]
