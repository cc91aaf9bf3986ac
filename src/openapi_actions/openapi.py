"""OpenAPI document loader and path-item parser."""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, Any, Dict, List, Mapping, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, create_model

from .errors import (
    DocumentFetchError,
    InvalidDocumentError,
    InvalidVerbDataError,
    NoTransportProvidedError,
)
from .models import BODY_KEY, HTTP_VERBS, OperationSpec, ParameterSpec
from .transport import RequestOptions, unwrap_response

if TYPE_CHECKING:
    from .endpoint import ActionDescriptor
    from .transport import Transport


logger = logging.getLogger(__name__)


class DocumentLoader:
    def __init__(self, cache_seconds: int = 3600, document_name: str = "swagger.json") -> None:
        self.cache_seconds = cache_seconds
        self.document_name = document_name
        self._cache: Dict[str, Tuple[float, Dict[str, Any]]] = {}

    def document_path(self, swagger_path: str) -> str:
        return f"{swagger_path.rstrip('/')}/{self.document_name}"

    async def load(self, transport: Optional["Transport"], swagger_path: str) -> Dict[str, Any]:
        if transport is None:
            raise NoTransportProvidedError()

        location = self.document_path(swagger_path)
        cached = self._cache.get(location)
        if cached and time.time() - cached[0] < self.cache_seconds:
            return cached[1]

        try:
            response = await transport.get(location, RequestOptions())
        except Exception as exc:
            logger.warning("Failed to fetch API document: %s (%s)", location, exc)
            raise DocumentFetchError(location, str(exc)) from exc

        data = unwrap_response(response)
        if not isinstance(data, dict):
            raise DocumentFetchError(location, "response is not a JSON object")

        self._cache[location] = (time.time(), data)
        return data

    def clear(self) -> None:
        self._cache.clear()


def parse_path_item(path: str, path_item: Mapping[str, Any]) -> Dict[str, OperationSpec]:
    """Operations of one path item keyed by verb, in declaration order."""
    if not isinstance(path_item, Mapping):
        raise InvalidVerbDataError(path, [], HTTP_VERBS)

    verbs = [key for key in path_item if key in HTTP_VERBS]
    if not verbs:
        raise InvalidVerbDataError(path, list(path_item), HTTP_VERBS)

    shared_parameters = _parameter_list(path, path_item.get("parameters"))
    operations: Dict[str, OperationSpec] = {}
    for verb in verbs:
        operation = path_item[verb]
        if isinstance(operation, OperationSpec):
            operations[verb] = operation
            continue
        if operation is None:
            operation = {}
        if not isinstance(operation, Mapping):
            raise InvalidDocumentError(f"{verb.upper()} {path}: operation must be an object")
        operations[verb] = parse_operation(verb, operation, shared_parameters, path)
    return operations


def parse_operation(
    verb: str,
    operation: Mapping[str, Any],
    shared_parameters: List[Mapping[str, Any]],
    path: str = "",
) -> OperationSpec:
    declared: Dict[Tuple[str, str], ParameterSpec] = {}
    for raw in [*shared_parameters, *_parameter_list(path, operation.get("parameters"))]:
        if not raw.get("name"):
            continue
        parameter = ParameterSpec.from_dict(raw)
        declared[(parameter.name, parameter.location)] = parameter

    body = _request_body_parameter(path, operation.get("requestBody"))
    if body is not None:
        declared[(body.name, body.location)] = body

    responses = operation.get("responses") or {}
    if not isinstance(responses, Mapping):
        raise InvalidDocumentError(f"{verb.upper()} {path}: responses must be an object")

    return OperationSpec(
        verb=verb,
        parameters=tuple(declared.values()),
        responses=dict(responses),
        operation_id=operation.get("operationId"),
        summary=operation.get("summary") or "",
        description=operation.get("description") or "",
    )


def _parameter_list(path: str, parameters: Any) -> List[Mapping[str, Any]]:
    if not parameters:
        return []
    if not isinstance(parameters, list):
        raise InvalidDocumentError(f"{path}: parameters must be a list")
    for raw in parameters:
        if not isinstance(raw, Mapping):
            raise InvalidDocumentError(f"{path}: parameter {raw!r} must be an object")
        if not isinstance(raw.get("enum") or [], list):
            raise InvalidDocumentError(f"{path}: enum of parameter {raw.get('name')} must be a list")
    return parameters


def _request_body_parameter(path: str, request_body: Any) -> Optional[ParameterSpec]:
    if not request_body:
        return None
    if not isinstance(request_body, Mapping):
        raise InvalidDocumentError(f"{path}: requestBody must be an object")
    content = request_body.get("content") or {}
    json_body = content.get("application/json") if isinstance(content, Mapping) else None
    if not isinstance(json_body, Mapping):
        json_body = {}
    return ParameterSpec(
        name=BODY_KEY,
        location="body",
        required=bool(request_body.get("required", False)),
        type="object",
        schema=json_body.get("schema"),
        description=request_body.get("description"),
    )


def build_input_model(descriptor: "ActionDescriptor") -> type[BaseModel]:
    """Tool input model accepting exactly the arguments the action requires.

    An action without a body needs every declared parameter; an action with a
    body needs only ``body``.
    """
    fields: Dict[str, Tuple[Any, Any]] = {}

    for key, parameter in descriptor.parameters.items():
        field_type = _parameter_type(parameter)
        required = key == BODY_KEY or not descriptor.requires_body
        default = Field(
            ... if required else None,
            alias=key,
            description=parameter.description,
        )
        fields[_field_name(key)] = (field_type if required else Optional[field_type], default)

    model_config = ConfigDict(extra="allow", populate_by_name=True)
    model_name = f"{_sanitize_name(descriptor.name)}Input"
    return create_model(model_name, __config__=model_config, **fields)


def _parameter_type(parameter: ParameterSpec) -> Any:
    if parameter.is_body:
        return Any
    schema_type = parameter.type
    if schema_type == "integer":
        return int
    if schema_type == "number":
        return float
    if schema_type == "boolean":
        return bool
    if schema_type == "array":
        return List[Any]
    if schema_type == "object":
        return Dict[str, Any]
    if schema_type == "file":
        return bytes
    return str


def _field_name(key: str) -> str:
    name = _sanitize_name(key)
    if not name or not (name[0].isalpha()):
        name = f"p_{name}"
    if hasattr(BaseModel, name):
        name = f"{name}_"
    return name


def _sanitize_name(name: str) -> str:
    return "".join(ch if ch.isalnum() else "_" for ch in name)
