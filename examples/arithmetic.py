"""Plain-mapping service: every callable value is exposed by its key."""

from __future__ import annotations

import time
from typing import Any, Callable, Dict


def add(*numbers: float) -> float:
    return sum(numbers)


def subtract(params: Dict[str, Any]) -> float:
    minuend = params.get("minuend")
    subtrahend = params.get("subtrahend")
    if not isinstance(minuend, (int, float)) or not isinstance(subtrahend, (int, float)):
        raise ValueError("ERR_NAN")
    return minuend - subtrahend


def ping() -> int:
    return int(time.time() * 1000)


def echo(params: Any) -> Any:
    return params


def build_arithmetic_service() -> Dict[str, Callable[..., Any]]:
    return {
        "add": add,
        "subtract": subtract,
        "ping": ping,
        "echo": echo,
    }
