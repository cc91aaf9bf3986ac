"""Endpoints and the async actions synthesized for each of their verbs."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Tuple

from .errors import (
    InvalidParameterNamesError,
    MissingBodyParameterError,
    MissingParametersError,
    NoTransportProvidedError,
    UpstreamRequestError,
)
from .logging import redact_payload
from .models import BODY_KEY, Escalation, EscalationLike, OperationSpec, ParameterSpec
from .naming import synthesize_name
from .openapi import parse_path_item
from .parameters import OK_RESPONSE, build_parameter_map, build_response_map, classify_parameters
from .transport import BLOB_RESPONSE, RequestOptions, Transport, unwrap_response


logger = logging.getLogger(__name__)

STREAM_MARKER = "filestream"


@dataclass(frozen=True)
class ActionDescriptor:
    name: str
    verb: str
    path: str
    parameters: Mapping[str, ParameterSpec]
    responses: Mapping[str, Any]
    description: str = ""

    @property
    def requires_body(self) -> bool:
        return BODY_KEY in self.parameters

    @property
    def expects_stream(self) -> bool:
        ok_response = self.responses.get(OK_RESPONSE)
        if not isinstance(ok_response, Mapping):
            return False
        description = ok_response.get("description") or ""
        return STREAM_MARKER in description.lower()


def render_path(path: str, arguments: Optional[Mapping[str, Any]] = None, base_path: str = "rest") -> str:
    """Request path for ``path`` relative to the base URL, placeholders filled in.

    ``/rest/regional/{region}/article`` with ``{"region": "EMEA"}`` becomes
    ``/regional/EMEA/article``. Placeholders without a value are kept.
    """
    if not path.startswith("/"):
        path = f"/{path}"

    prefix = f"/{base_path.strip('/')}" if base_path.strip("/") else ""
    if prefix and (path == prefix or path.startswith(f"{prefix}/")):
        path = path[len(prefix):] or "/"

    for name, value in (arguments or {}).items():
        if value is None:
            continue
        path = path.replace(f"{{{name}}}", str(value))
    return path


async def invoke_action(
    descriptor: ActionDescriptor,
    transport: Optional[Transport],
    arguments: Optional[Mapping[str, Any]] = None,
    base_path: str = "rest",
) -> Any:
    if transport is None:
        raise NoTransportProvidedError()

    arguments = dict(arguments or {})
    declared = descriptor.parameters
    provided = list(arguments)

    if declared and not arguments:
        raise MissingParametersError(descriptor.name, declared)

    if descriptor.requires_body:
        if BODY_KEY not in arguments:
            raise MissingBodyParameterError(descriptor.name, provided)
        # documents seen so far never combine a body with query parameters
        options = RequestOptions(body=arguments[BODY_KEY])
    elif declared:
        missing = [name for name in declared if name not in arguments]
        if missing:
            offending = [name for name in provided if name not in declared] or provided
            raise InvalidParameterNamesError(descriptor.name, offending, missing)
        classified = classify_parameters(declared, arguments)
        options = RequestOptions(
            params=classified.query,
            form_data=classified.form,
            body=classified.body,
        )
    else:
        options = RequestOptions()

    if descriptor.expects_stream:
        options = replace(options, response_type=BLOB_RESPONSE)

    request_path = render_path(descriptor.path, arguments, base_path)
    payload = options.as_dict()
    logger.debug(
        "Invoking action=%s %s %s payload=%s",
        descriptor.name,
        descriptor.verb.upper(),
        request_path,
        redact_payload(payload),
    )

    try:
        response = await getattr(transport, descriptor.verb)(request_path, options)
    except Exception as exc:
        logger.warning(
            "Action %s failed: %s path=%s payload=%s",
            descriptor.name,
            exc,
            request_path,
            redact_payload(payload),
        )
        raise UpstreamRequestError(exc, request_path, payload) from exc

    return unwrap_response(response)


class EndpointAction:
    """Async callable bound to one endpoint verb."""

    def __init__(self, descriptor: ActionDescriptor, endpoint: "Endpoint") -> None:
        self.descriptor = descriptor
        self.endpoint = endpoint

    @property
    def name(self) -> str:
        return self.descriptor.name

    @property
    def responses(self) -> Mapping[str, Any]:
        return self.descriptor.responses

    async def __call__(self, arguments: Optional[Mapping[str, Any]] = None) -> Any:
        return await invoke_action(
            self.descriptor,
            self.endpoint.transport,
            arguments,
            base_path=self.endpoint.base_path,
        )

    def __repr__(self) -> str:
        return f"EndpointAction({self.descriptor.name!r}, {self.descriptor.verb.upper()} {self.descriptor.path})"


class Endpoint:
    def __init__(
        self,
        path: str,
        operations: Mapping[str, Any],
        *,
        namespace: str = "rest",
        base_path: str = "rest",
        transport: Optional[Transport] = None,
        escalation: EscalationLike = None,
    ) -> None:
        self.path = path
        self.namespace = namespace
        self.base_path = base_path
        self.transport = transport
        self.escalation = Escalation.coerce(escalation)
        self.operations: Dict[str, OperationSpec] = parse_path_item(path, operations)
        self._actions: Dict[str, EndpointAction] = {}
        self._actions_by_verb: Dict[str, EndpointAction] = {}
        self._build_actions()

    @property
    def verbs(self) -> Tuple[str, ...]:
        return tuple(self.operations)

    @property
    def actions(self) -> Mapping[str, EndpointAction]:
        return MappingProxyType(self._actions)

    @property
    def parameters(self) -> Dict[str, Dict[str, ParameterSpec]]:
        """Parameter maps of the verbs that declare any."""
        return {
            verb: build_parameter_map(operation.parameters)
            for verb, operation in self.operations.items()
            if operation.parameters
        }

    def action_for(self, verb: str) -> EndpointAction:
        return self._actions_by_verb[verb.lower()]

    def escalate(self, escalation: EscalationLike) -> bool:
        """Raise the naming escalation; returns whether action names were rebuilt."""
        raised = self.escalation.raised_to(Escalation.coerce(escalation))
        if raised == self.escalation:
            return False
        self.escalation = raised
        self._build_actions()
        return True

    def update(self, operations: Mapping[str, Any], escalation: EscalationLike = None) -> None:
        self.operations = parse_path_item(self.path, operations)
        self.escalation = self.escalation.raised_to(Escalation.coerce(escalation))
        self._build_actions()

    def _build_actions(self) -> None:
        actions: Dict[str, EndpointAction] = {}
        by_verb: Dict[str, EndpointAction] = {}
        for verb, operation in self.operations.items():
            descriptor = ActionDescriptor(
                name=synthesize_name(verb, self.path, self.namespace, self.escalation),
                verb=verb,
                path=self.path,
                parameters=MappingProxyType(build_parameter_map(operation.parameters)),
                responses=MappingProxyType(build_response_map(operation.responses)),
                description=operation.description or operation.summary,
            )
            action = EndpointAction(descriptor, self)
            actions[descriptor.name] = action
            by_verb[verb] = action
        self._actions = actions
        self._actions_by_verb = by_verb

    def __repr__(self) -> str:
        return f"Endpoint({self.path!r}, verbs={list(self.verbs)}, escalation={self.escalation.count})"
