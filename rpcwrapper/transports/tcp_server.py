"""
TCP transport for an RpcWrapper.

One payload per connection: the client writes the request (single or batch)
and half-closes its side; the server answers with compact JSON, or with
nothing when no response is warranted, then closes the connection.

Payloads larger than ``max_payload_bytes`` are not buffered: the rest of the
input is discarded and the client gets an INVALID_REQUEST error.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Optional

from rpcwrapper.errors import INVALID_REQUEST, create_error
from rpcwrapper.wrapper import RpcWrapper

logger = logging.getLogger("rpc-tcp")

DEFAULT_MAX_PAYLOAD_BYTES = 1024 * 1024
READ_CHUNK_BYTES = 64 * 1024


class PayloadTooLarge(Exception):
    """The client sent more than the configured payload limit."""


class RpcTcpServer:
    def __init__(
        self,
        wrapper: RpcWrapper,
        host: str = "127.0.0.1",
        port: int = 7070,
        read_timeout_seconds: Optional[float] = 30.0,
        max_payload_bytes: int = DEFAULT_MAX_PAYLOAD_BYTES,
    ):
        if max_payload_bytes <= 0:
            raise ValueError("max_payload_bytes must be positive")
        self._wrapper = wrapper
        self._host = host
        self._port = port
        self._read_timeout = read_timeout_seconds
        self._max_payload = max_payload_bytes
        self._server: Optional[asyncio.AbstractServer] = None

    @property
    def port(self) -> int:
        """Bound port (resolves port 0 to the port picked by the OS)."""
        if self._server is None or not self._server.sockets:
            return self._port
        return self._server.sockets[0].getsockname()[1]

    async def start(self) -> None:
        if self._server is not None:
            return
        self._server = await asyncio.start_server(self._on_client, host=self._host, port=self._port)
        logger.info(f"TCP server is listening on {self._host}:{self.port}")

    async def stop(self) -> None:
        if self._server is None:
            return
        self._server.close()
        await self._server.wait_closed()
        self._server = None
        logger.info("TCP server stopped")

    async def serve_forever(self) -> None:
        await self.start()
        assert self._server is not None
        try:
            await self._server.serve_forever()
        finally:
            await self.stop()

    async def _on_client(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        peer = writer.get_extra_info("peername")
        try:
            try:
                raw = await asyncio.wait_for(self._read_payload(reader), timeout=self._read_timeout)
            except PayloadTooLarge:
                logger.warning(f"Payload from {peer} exceeds {self._max_payload} bytes")
                response = RpcWrapper.build_response(None, create_error(INVALID_REQUEST, data="Payload too large"))
            else:
                if not raw:
                    return
                response = await self._wrapper.process(raw)
            if response is not None:
                writer.write(json.dumps(response, separators=(",", ":"), allow_nan=False).encode("utf-8"))
                await writer.drain()
        except TimeoutError:
            logger.warning(f"Timed out reading request from {peer}")
        except ConnectionError as exc:
            logger.warning(f"Connection from {peer} dropped: {exc}")
        except Exception:
            logger.exception(f"Failed to handle request from {peer}")
        finally:
            writer.close()
            try:
                await writer.wait_closed()
            except ConnectionError:
                pass

    async def _read_payload(self, reader: asyncio.StreamReader) -> bytes:
        chunks = []
        size = 0
        while True:
            chunk = await reader.read(READ_CHUNK_BYTES)
            if not chunk:
                return b"".join(chunks)
            size += len(chunk)
            if size > self._max_payload:
                # Discard the rest of the input up to EOF.
                while await reader.read(READ_CHUNK_BYTES):
                    pass
                raise PayloadTooLarge(size)
            chunks.append(chunk)
