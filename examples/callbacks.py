"""Services whose operations report completion through a callback(error, result)."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any, Callable, Dict, List

Callback = Callable[..., None]


class CallbackService:
    """Register with ``RpcWrapper(CallbackService(), ["get_fields"])``."""

    def __init__(self, fields: List[Any] | None = None):
        self.fields = list(fields) if fields is not None else [1, 2, 3]

    def get_fields(self, cb: Callback) -> None:
        cb(None, self.fields)


def build_file_service(path: Path) -> Dict[str, Callable[..., Any]]:
    """``store_content`` appends a line to ``path`` on a worker thread."""

    def _append(content: str) -> None:
        with path.open("a", encoding="utf-8") as handle:
            handle.write(f"{content}\n")

    def store_content(content: str, cb: Callback) -> None:
        loop = asyncio.get_running_loop()
        future = loop.run_in_executor(None, _append, content)
        future.add_done_callback(lambda done: cb(done.exception()))

    return {"store_content": store_content}

