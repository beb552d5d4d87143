from __future__ import annotations

import json
from typing import Any, Dict


def rpc_request(method: Any, params: Any = None, request_id: Any = None, **extra: Any) -> Dict[str, Any]:
    """Build a JSON-RPC request dict, leaving out params/id when None."""
    req: Dict[str, Any] = {"jsonrpc": "2.0", "method": method}
    if params is not None:
        req["params"] = params
    if request_id is not None:
        req["id"] = request_id
    req.update(extra)
    return req


def dumps(body: Any) -> str:
    return json.dumps(body)
