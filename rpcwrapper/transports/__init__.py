from rpcwrapper.transports.http_server import create_http_app
from rpcwrapper.transports.tcp_server import RpcTcpServer

__all__ = ["RpcTcpServer", "create_http_app"]
