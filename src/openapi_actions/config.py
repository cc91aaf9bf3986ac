"""Configuration for openapi-actions."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="", case_sensitive=False)

    service_name: str = Field(default="openapi-actions")

    api_host: str = Field(default="localhost:5000")
    api_scheme: str = Field(default="http")
    api_base_path: str = Field(default="rest")
    api_swagger_path: str = Field(default="/Tools")
    api_document_name: str = Field(default="swagger.json")
    api_url_namespace: str = Field(default="rest")
    api_timeout_seconds: float = Field(default=20)
    api_verify_ssl: bool = Field(default=True)

    document_cache_seconds: int = Field(default=3600)

    server_transport: str = Field(default="stdio")
    server_host: str = Field(default="0.0.0.0")
    server_port: int = Field(default=8000)

    log_level: str = Field(default="INFO")

    def swagger_path(self) -> str:
        return normalize_swagger_path(self.api_swagger_path)

    def base_url(self) -> str:
        return build_base_url(self.api_host, self.api_scheme, self.api_base_path)


def normalize_swagger_path(swagger_path: str) -> str:
    if swagger_path.startswith("/"):
        return swagger_path
    return f"/{swagger_path}"


def build_base_url(api_host: str, api_scheme: str = "http", base_path: str = "rest") -> str:
    """``http://localhost:5000/rest`` style URL the transport resolves paths against."""
    base = f"{api_scheme}://{api_host.strip('/')}"
    base_path = base_path.strip("/")
    if not base_path:
        return base
    return f"{base}/{base_path}"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
