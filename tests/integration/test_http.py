"""
Integration tests for the HTTP transport.
"""

from __future__ import annotations

import pytest

from rpcwrapper import RpcWrapper
from rpcwrapper.transports.http_server import create_http_app
from tests.utils.payloads import dumps, rpc_request
from tests.utils.sync_client import SyncASGIClient
from examples.arithmetic import build_arithmetic_service


# ==================== Fixtures ====================


@pytest.fixture
def client() -> SyncASGIClient:
    app = create_http_app(RpcWrapper(build_arithmetic_service()), path="rpc")
    return SyncASGIClient(app)


# ==================== Tests ====================


class TestHttpTransport:
    def test_health(self, client: SyncASGIClient):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok"}

    def test_single_call(self, client: SyncASGIClient):
        response = client.post_rpc("/rpc", dumps(rpc_request("add", [1, 2, 3, 4], "1")))

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("application/json")
        assert response.json() == {"jsonrpc": "2.0", "result": 10, "id": "1"}

    def test_notification_is_no_content(self, client: SyncASGIClient):
        response = client.post_rpc("/rpc", dumps(rpc_request("add", [1])))

        assert response.status_code == 204
        assert response.content == b""

    def test_parse_error(self, client: SyncASGIClient):
        response = client.post_rpc("/rpc", "not json")

        assert response.status_code == 200
        assert response.json() == {"jsonrpc": "2.0", "error": {"code": -32700, "message": "Parse error"}, "id": None}

    def test_empty_body_is_parse_error(self, client: SyncASGIClient):
        response = client.post_rpc("/rpc", b"")
        assert response.json()["error"]["code"] == -32700

    def test_mixed_batch(self, client: SyncASGIClient):
        batch = [
            rpc_request("add", [1, 2, 3, 4], "1"),
            rpc_request("subtract", {"minuend": 42, "subtrahend": 23}, 2),
            rpc_request("add", [1]),
            rpc_request("inexistent", [1, 2, 4], "3"),
            rpc_request("subtract", {"minuend": 42}, "4"),
            rpc_request("subtract", [42, 23]),
            {"jsonrpc": "2.0", "id": "4"},
        ]

        response = client.post_rpc("/rpc", dumps(batch))
        body = response.json()

        assert response.status_code == 200
        assert [entry["id"] for entry in body] == ["1", 2, "3", "4", "4"]
        assert body[0]["result"] == 10
        assert body[1]["result"] == 19
        assert body[2]["error"]["code"] == -32601
        assert body[3]["error"] == {"code": -32000, "message": "Server error", "data": "ValueError: ERR_NAN"}
        assert body[4]["error"]["code"] == -32600

    def test_batch_of_notifications_is_no_content(self, client: SyncASGIClient):
        response = client.post_rpc("/rpc", dumps([rpc_request("add", [1]), rpc_request("echo", [2])]))
        assert response.status_code == 204

    def test_get_not_allowed(self, client: SyncASGIClient):
        response = client.get("/rpc")
        assert response.status_code == 405

    def test_unknown_path(self, client: SyncASGIClient):
        response = client.post_rpc("/other", dumps(rpc_request("add", [1], 1)))
        assert response.status_code == 404

    def test_wrapper_is_exposed_on_state(self):
        wrapper = RpcWrapper({"echo": lambda value: value})
        app = create_http_app(wrapper)
        assert app.state.wrapper is wrapper

    @pytest.mark.parametrize(
        "value, data_prefix",
        [(float("nan"), "ValueError"), ({1, 2}, "TypeError: Object of type set")],
    )
    def test_unencodable_result_gets_error_reply(self, value, data_prefix):
        client = SyncASGIClient(create_http_app(RpcWrapper({"f": lambda: value})))
        response = client.post_rpc("/rpc", dumps(rpc_request("f", request_id=1)))

        assert response.status_code == 200
        body = response.json()
        assert body["id"] == 1
        assert body["error"]["code"] == -32000
        assert body["error"]["data"].startswith(data_prefix)
