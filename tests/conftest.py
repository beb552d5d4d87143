"""
Shared pytest fixtures for rpcwrapper tests.
"""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

# Ensure the project root is in the Python path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from rpcwrapper import RpcWrapper
from rpcwrapper.config import get_settings
from examples.products import ProductService, default_catalog


# ==================== Wrapper Fixtures ====================


@pytest.fixture
def echo_wrapper() -> RpcWrapper:
    """Plain target with a single-argument echo."""
    return RpcWrapper({"echo": lambda value: value})


@pytest.fixture
def product_service() -> ProductService:
    return ProductService(default_catalog())


@pytest.fixture
def product_wrapper(product_service: ProductService) -> RpcWrapper:
    return RpcWrapper(product_service)


# ==================== Settings Fixtures ====================


@pytest.fixture
def clean_settings(monkeypatch: pytest.MonkeyPatch):
    """Clear RPCWRAPPER_* variables and the cached settings around a test."""
    for name in ("HOST", "PORT", "TRANSPORT", "RPC_PATH", "LOG_LEVEL", "SERVICE", "MAX_PAYLOAD_BYTES"):
        monkeypatch.delenv(f"RPCWRAPPER_{name}", raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
