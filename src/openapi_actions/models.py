"""Internal models for operations, parameters and naming hints."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Tuple, Union


HTTP_VERBS: Tuple[str, ...] = (
    "get",
    "head",
    "post",
    "put",
    "delete",
    "connect",
    "options",
    "trace",
    "patch",
)

BODY_KEY = "body"


@dataclass(frozen=True, order=True)
class Escalation:
    """How many extra trailing path segments go into generated method names.

    ``Escalation(0)`` is the default naming scheme. ``True`` escalates by one.
    """

    count: int = 0

    def __post_init__(self) -> None:
        if self.count < 0:
            raise ValueError(f"escalation count must not be negative, got {self.count}")

    def __bool__(self) -> bool:
        return self.count > 0

    @classmethod
    def coerce(cls, value: "EscalationLike") -> "Escalation":
        if isinstance(value, Escalation):
            return value
        if value is None or value is False:
            return NO_ESCALATION
        if value is True:
            return cls(1)
        return cls(int(value))

    def raised_to(self, other: "Escalation") -> "Escalation":
        return other if other.count > self.count else self


NO_ESCALATION = Escalation(0)

EscalationLike = Union[Escalation, bool, int, None]


@dataclass(frozen=True)
class ParameterSpec:
    name: str
    location: str
    required: bool = False
    type: Optional[str] = None
    enum: Optional[Tuple[Any, ...]] = None
    schema: Optional[Dict[str, Any]] = None
    description: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ParameterSpec":
        enum = data.get("enum")
        schema = data.get("schema")
        if enum is None and isinstance(schema, Mapping):
            enum = schema.get("enum")
        param_type = data.get("type")
        if param_type is None and isinstance(schema, Mapping):
            param_type = schema.get("type")
        return cls(
            name=str(data.get("name", "")),
            location=str(data.get("in", "query")),
            required=bool(data.get("required", False)),
            type=param_type,
            enum=tuple(enum) if enum is not None else None,
            schema=dict(schema) if isinstance(schema, Mapping) else None,
            description=data.get("description"),
        )

    @property
    def is_body(self) -> bool:
        return self.location == "body"


@dataclass(frozen=True)
class OperationSpec:
    verb: str
    parameters: Tuple[ParameterSpec, ...] = ()
    responses: Mapping[str, Any] = field(default_factory=dict)
    operation_id: Optional[str] = None
    summary: str = ""
    description: str = ""
