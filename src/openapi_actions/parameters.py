"""Parameter maps, response maps and call-time argument classification."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Mapping, Optional

from .errors import EnumValidationError
from .models import BODY_KEY, ParameterSpec


logger = logging.getLogger(__name__)

OK_RESPONSE = "ok"


@dataclass
class ClassifiedParameters:
    query: Dict[str, Any] = field(default_factory=dict)
    form: Dict[str, Any] = field(default_factory=dict)
    body: Any = None


def build_parameter_map(parameters: Iterable[ParameterSpec]) -> Dict[str, ParameterSpec]:
    """Parameters keyed by the name callers use; a body parameter is always ``body``."""
    parameter_map: Dict[str, ParameterSpec] = {}
    for parameter in parameters:
        key = BODY_KEY if parameter.is_body else parameter.name
        parameter_map[key] = parameter
    return parameter_map


def build_response_map(responses: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    response_map: Dict[str, Any] = {}
    for code, response in (responses or {}).items():
        response_map[str(code)] = response
        try:
            status = int(code)
        except (TypeError, ValueError):
            continue
        if 200 <= status < 300:
            response_map[OK_RESPONSE] = response
    return response_map


def validate_enum(parameter: ParameterSpec, key: str, value: Any) -> None:
    if parameter.enum is None:
        return
    allowed = [str(item).lower() for item in parameter.enum]
    if str(value).lower() not in allowed:
        raise EnumValidationError(key, value, parameter.enum)


def classify_parameters(
    declared: Mapping[str, ParameterSpec], provided: Mapping[str, Any]
) -> ClassifiedParameters:
    classified = ClassifiedParameters()
    for key, value in provided.items():
        parameter = declared.get(key)
        if parameter is None:
            logger.debug("Ignoring undeclared parameter %s", key)
            continue

        validate_enum(parameter, key, value)

        if parameter.location == "query":
            classified.query[key] = value
        elif parameter.location == "formData":
            classified.form[key] = value
        elif parameter.location == "body":
            classified.body = value
    return classified
