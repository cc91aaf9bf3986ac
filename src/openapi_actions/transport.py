"""Transport contract and the default httpx implementation."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Protocol, Tuple

import httpx

from .logging import redact_payload


logger = logging.getLogger(__name__)

BLOB_RESPONSE = "blob"


@dataclass(frozen=True)
class RequestOptions:
    params: Dict[str, Any] = field(default_factory=dict)
    form_data: Dict[str, Any] = field(default_factory=dict)
    body: Any = None
    response_type: Optional[str] = None

    def as_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {}
        if self.params:
            payload["params"] = dict(self.params)
        if self.form_data:
            payload["form_data"] = dict(self.form_data)
        if self.body is not None:
            payload["body"] = self.body
        if self.response_type:
            payload["response_type"] = self.response_type
        return payload


@dataclass(frozen=True)
class ResponseEnvelope:
    data: Any
    status_code: int = 200
    headers: Mapping[str, str] = field(default_factory=dict)


class Transport(Protocol):
    async def get(self, path: str, options: RequestOptions) -> Any: ...

    async def head(self, path: str, options: RequestOptions) -> Any: ...

    async def post(self, path: str, options: RequestOptions) -> Any: ...

    async def put(self, path: str, options: RequestOptions) -> Any: ...

    async def delete(self, path: str, options: RequestOptions) -> Any: ...

    async def connect(self, path: str, options: RequestOptions) -> Any: ...

    async def options(self, path: str, options: RequestOptions) -> Any: ...

    async def trace(self, path: str, options: RequestOptions) -> Any: ...

    async def patch(self, path: str, options: RequestOptions) -> Any: ...


def unwrap_response(response: Any) -> Any:
    """Payload of a transport envelope (``.data`` or a ``"data"`` key)."""
    if isinstance(response, Mapping):
        return response.get("data")
    return getattr(response, "data", response)


def _split_form_data(form_data: Mapping[str, Any]) -> Tuple[Dict[str, Any], Dict[str, Any]]:
    """Plain fields and file parts; any file part makes the request multipart."""
    fields: Dict[str, Any] = {}
    files: Dict[str, Any] = {}
    for key, value in form_data.items():
        if isinstance(value, (bytes, bytearray)) or hasattr(value, "read"):
            files[key] = bytes(value) if isinstance(value, bytearray) else value
        else:
            fields[key] = value
    return fields, files


class HttpxTransport:
    def __init__(
        self,
        base_url: str,
        timeout_seconds: float = 20,
        verify_ssl: bool = True,
        headers: Optional[Dict[str, str]] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self.verify_ssl = verify_ssl
        self.headers = dict(headers or {})
        self._transport = transport

    async def get(self, path: str, options: Optional[RequestOptions] = None) -> ResponseEnvelope:
        return await self.request("GET", path, options)

    async def head(self, path: str, options: Optional[RequestOptions] = None) -> ResponseEnvelope:
        return await self.request("HEAD", path, options)

    async def post(self, path: str, options: Optional[RequestOptions] = None) -> ResponseEnvelope:
        return await self.request("POST", path, options)

    async def put(self, path: str, options: Optional[RequestOptions] = None) -> ResponseEnvelope:
        return await self.request("PUT", path, options)

    async def delete(self, path: str, options: Optional[RequestOptions] = None) -> ResponseEnvelope:
        return await self.request("DELETE", path, options)

    async def connect(self, path: str, options: Optional[RequestOptions] = None) -> ResponseEnvelope:
        return await self.request("CONNECT", path, options)

    async def options(self, path: str, options: Optional[RequestOptions] = None) -> ResponseEnvelope:
        return await self.request("OPTIONS", path, options)

    async def trace(self, path: str, options: Optional[RequestOptions] = None) -> ResponseEnvelope:
        return await self.request("TRACE", path, options)

    async def patch(self, path: str, options: Optional[RequestOptions] = None) -> ResponseEnvelope:
        return await self.request("PATCH", path, options)

    async def request(
        self, method: str, path: str, options: Optional[RequestOptions] = None
    ) -> ResponseEnvelope:
        options = options or RequestOptions()
        url = self._build_url(path)
        kwargs: Dict[str, Any] = {"headers": self.headers, "params": options.params or None}

        if options.form_data:
            fields, files = _split_form_data(options.form_data)
            kwargs["data"] = fields
            if files:
                kwargs["files"] = files
        elif options.body is not None:
            kwargs["json"] = options.body

        logger.debug("%s %s options=%s", method, url, redact_payload(options.as_dict()))

        async with httpx.AsyncClient(
            timeout=self.timeout_seconds,
            verify=self.verify_ssl,
            transport=self._transport,
        ) as client:
            response = await client.request(method, url, **kwargs)
        response.raise_for_status()

        return ResponseEnvelope(
            data=self._decode(response, options.response_type),
            status_code=response.status_code,
            headers=dict(response.headers),
        )

    def _build_url(self, path: str) -> str:
        if path.startswith(("http://", "https://")):
            return path
        if not path.startswith("/"):
            path = f"/{path}"
        return self.base_url + path

    def _decode(self, response: httpx.Response, response_type: Optional[str]) -> Any:
        if response_type == BLOB_RESPONSE:
            return response.content
        if not response.content:
            return None
        content_type = response.headers.get("content-type", "")
        if "json" in content_type:
            return response.json()
        return response.text
