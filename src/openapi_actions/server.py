"""MCP server exposing synthesized actions as tools."""

import logging
from typing import Any, Awaitable, Callable, Optional

from fastmcp import FastMCP
from fastmcp.exceptions import ToolError

from .config import Settings
from .endpoint import EndpointAction
from .errors import InitializationError, OpenApiActionsError
from .openapi import build_input_model
from .service import Service

logger = logging.getLogger(__name__)


async def build_server(
    settings: Settings, service: Optional[Service] = None
) -> tuple[FastMCP, object | None]:
    if service is None:
        service = Service(settings)
        result = await service.initialize()
        if isinstance(result, InitializationError):
            raise RuntimeError(str(result)) from result.cause

    mcp = FastMCP(settings.service_name, instructions=_instructions(service))
    app = _get_http_app(mcp, settings)
    _attach_healthcheck(app)

    for name, action in service.actions.items():
        handler = _tool_handler(action)
        mcp.tool(name=name, description=action.descriptor.description or None)(handler)
        logger.info("Registered tool: %s", name)

    return mcp, app


def _tool_handler(action: EndpointAction) -> Callable[[Any], Awaitable[Any]]:
    input_model = build_input_model(action.descriptor)

    async def handler(payload: input_model) -> Any:  # type: ignore[valid-type]
        arguments = payload.model_dump(by_alias=True, exclude_none=True)
        try:
            return await action(arguments)
        except OpenApiActionsError as exc:
            raise ToolError(str(exc)) from exc

    handler.__name__ = action.name
    return handler


def _attach_healthcheck(app) -> None:  # type: ignore[no-untyped-def]
    if not app:
        return

    async def healthcheck(_request):  # type: ignore[no-untyped-def]
        from starlette.responses import JSONResponse

        return JSONResponse({"status": "ok"})

    app.add_route("/health", healthcheck, methods=["GET"])


def _instructions(service: Service) -> str:
    title = service.title or "the upstream API"
    return (
        f"Actions synthesized from the OpenAPI document of {title}. "
        "Each tool calls one path and HTTP verb of the upstream API."
    )


def _get_http_app(mcp: FastMCP, settings: Settings):  # type: ignore[no-untyped-def]
    transport = settings.server_transport.lower()
    if transport in {"http"}:
        return mcp.http_app(transport="http", stateless_http=True, json_response=True)
    if transport in {"streamable-http", "streamablehttp"}:
        return mcp.http_app(
            transport="streamable-http", stateless_http=True, json_response=True
        )
    if transport in {"sse"}:
        return mcp.sse_app()
    return None
