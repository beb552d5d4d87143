from __future__ import annotations

import argparse
import asyncio
import logging
import tempfile
from pathlib import Path

from rpcwrapper import RpcWrapper
from rpcwrapper.config import WrapperSettings, get_settings
from rpcwrapper.transports.http_server import create_http_app
from rpcwrapper.transports.tcp_server import RpcTcpServer

logger = logging.getLogger("main")


def parse_args(settings: WrapperSettings):
    parser = argparse.ArgumentParser(description="JSON-RPC 2.0 example server")
    parser.add_argument("--transport", choices=["http", "tcp"], default=settings.transport)
    parser.add_argument("--service", choices=["arithmetic", "products", "callbacks"], default=settings.service)
    parser.add_argument("--host", default=settings.host)
    parser.add_argument("--port", type=int, default=settings.port)
    parser.add_argument("--path", default=settings.normalized_rpc_path, help="HTTP endpoint path")
    parser.add_argument("--log-level", default=settings.log_level)
    parser.add_argument("--max-payload-bytes", type=int, default=settings.max_payload_bytes, help="TCP request size limit")
    return parser.parse_args()


def build_wrapper(service: str) -> RpcWrapper:
    if service == "products":
        from examples.products import ProductService, default_catalog

        return RpcWrapper(ProductService(default_catalog()))
    if service == "callbacks":
        from examples.callbacks import build_file_service

        log_file = Path(tempfile.gettempdir()) / "rpcwrapper-content.log"
        logger.info(f"store_content appends to {log_file}")
        return RpcWrapper(build_file_service(log_file), ["store_content"])

    from examples.arithmetic import build_arithmetic_service

    return RpcWrapper(build_arithmetic_service())


async def main_async(args) -> None:
    wrapper = build_wrapper(args.service)
    logger.info(f"Starting {args.service} service over {args.transport.upper()}")

    if args.transport == "tcp":
        server = RpcTcpServer(wrapper, host=args.host, port=args.port, max_payload_bytes=args.max_payload_bytes)
        await server.serve_forever()
        return

    import uvicorn

    app = create_http_app(wrapper, path=args.path)
    config = uvicorn.Config(app, host=args.host, port=args.port, log_level=args.log_level.lower())
    server = uvicorn.Server(config)
    await server.serve()


def main():
    args = parse_args(get_settings())
    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    try:
        asyncio.run(main_async(args))
    except KeyboardInterrupt:
        logger.info("Server stopped by user")


if __name__ == "__main__":
    main()
