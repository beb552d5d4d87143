from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class WrapperSettings(BaseSettings):
    host: str = "127.0.0.1"
    port: int = 7080
    transport: Literal["http", "tcp"] = "http"
    rpc_path: str = "/rpc"
    log_level: str = "info"
    service: Literal["arithmetic", "products", "callbacks"] = "arithmetic"
    max_payload_bytes: int = Field(default=1024 * 1024, gt=0)

    model_config = SettingsConfigDict(
        env_prefix="RPCWRAPPER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @property
    def normalized_rpc_path(self) -> str:
        return "/" + self.rpc_path.strip("/")


@lru_cache(maxsize=1)
def get_settings() -> WrapperSettings:
    return WrapperSettings()
