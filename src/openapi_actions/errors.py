"""Exceptions raised while building and invoking synthesized actions."""

from __future__ import annotations

from typing import Any, Iterable, List, Optional


def _join(names: Iterable[Any]) -> str:
    return ", ".join(str(name) for name in names)


class OpenApiActionsError(Exception):
    pass


class NoTransportProvidedError(OpenApiActionsError):
    def __init__(self, message: str = "A transport was not provided") -> None:
        super().__init__(message)


class InvalidVerbDataError(OpenApiActionsError):
    def __init__(self, path: str, keys: Iterable[str], allowed: Iterable[str]) -> None:
        self.path = path
        self.keys: List[str] = list(keys)
        super().__init__(
            f"Endpoint data for {path} does not have allowed verbs like {_join(allowed)}"
        )


class InvalidDocumentError(OpenApiActionsError):
    pass


class DocumentFetchError(OpenApiActionsError):
    def __init__(self, location: str, reason: str) -> None:
        self.location = location
        super().__init__(f"Failed to fetch API document {location}: {reason}")


class InitializationError(OpenApiActionsError):
    """Returned, not raised, by ``Service.initialize*`` when the document cannot be used."""

    def __init__(self, cause: BaseException) -> None:
        self.cause = cause
        super().__init__(f"Service initialization failed: {cause}")


class ParameterError(OpenApiActionsError):
    pass


class MissingParametersError(ParameterError):
    def __init__(self, action: str, expected: Iterable[str]) -> None:
        self.action = action
        self.expected: List[str] = list(expected)
        super().__init__(f"This action requires the parameters {_join(self.expected)}")


class InvalidParameterNamesError(ParameterError):
    def __init__(self, action: str, offending: Iterable[str], missing: Iterable[str]) -> None:
        self.action = action
        self.offending: List[str] = list(offending)
        self.missing: List[str] = list(missing)
        super().__init__(
            f"The parameter names {_join(self.offending)} are not valid for this action."
        )


class MissingBodyParameterError(ParameterError):
    def __init__(self, action: str, provided: Iterable[str]) -> None:
        self.action = action
        self.provided: List[str] = list(provided)
        super().__init__(
            f"This action requires a body parameter, only {_join(self.provided)} were given."
        )


class EnumValidationError(ParameterError):
    def __init__(self, parameter: str, value: Any, allowed: Iterable[Any]) -> None:
        self.parameter = parameter
        self.value = value
        self.allowed: List[Any] = list(allowed)
        super().__init__(
            f"{_join(self.allowed)} are the only permitted values for {parameter}."
        )


class UpstreamRequestError(OpenApiActionsError):
    """A transport call failed; keeps what was attempted for diagnosis."""

    def __init__(self, cause: BaseException, path: str, payload: Optional[dict]) -> None:
        self.cause = cause
        self.path = path
        self.payload = payload
        super().__init__(f"Request to {path} failed: {cause}")
