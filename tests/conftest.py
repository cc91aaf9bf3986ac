"""Shared fixtures: a recording transport and Swagger path items.

The path items mirror the shapes of a real Swagger 2.0 content API:
path/query/body parameters, enums, and responses keyed by status code.
"""

from __future__ import annotations

from typing import Any, List, Optional, Tuple

import pytest

from openapi_actions.config import Settings
from openapi_actions.models import HTTP_VERBS
from openapi_actions.service import Service
from openapi_actions.transport import RequestOptions, ResponseEnvelope


# ---------------------------------------------------------------------------
# Transport double
# ---------------------------------------------------------------------------

class RecordingTransport:
    """Records every verb call and answers with canned data (or raises)."""

    def __init__(self, data: Any = None, error: Optional[BaseException] = None) -> None:
        self.data = {"ok": True} if data is None else data
        self.error = error
        self.calls: List[Tuple[str, str, RequestOptions]] = []

    def __getattr__(self, verb: str):
        if verb not in HTTP_VERBS:
            raise AttributeError(verb)

        async def call(path: str, options: RequestOptions) -> ResponseEnvelope:
            self.calls.append((verb, path, options))
            if self.error is not None:
                raise self.error
            return ResponseEnvelope(data=self.data)

        return call


@pytest.fixture
def transport() -> RecordingTransport:
    return RecordingTransport()


@pytest.fixture
def settings() -> Settings:
    return Settings(
        api_host="api.example.test",
        api_scheme="https",
        api_base_path="rest",
        api_swagger_path="Tools",
        api_url_namespace="rest",
    )


@pytest.fixture
def service(settings, transport) -> Service:
    return Service(settings, transport=transport)


# ---------------------------------------------------------------------------
# Path items
# ---------------------------------------------------------------------------

def _ok(description: str = "OK") -> dict:
    return {
        "400": {"description": "Bad Request"},
        "500": {"description": "Server Error"},
        "200": {"description": description},
    }


GET_NO_PARAMETERS = {
    "get": {
        "summary": "Get all address lists",
        "operationId": "RestRegionalAddressListGet",
        "responses": _ok("An array of TridionItem objects"),
    },
}

GET_ONE_PARAMETER = {
    "get": {
        "summary": "Get articles",
        "parameters": [
            {
                "name": "region",
                "in": "path",
                "description": "The name of the region(EMEA/APAC)",
                "required": True,
                "type": "string",
                "enum": ["EMEA", "APAC"],
            },
        ],
        "responses": _ok(),
    },
}

PATH_AND_QUERY_PARAMETERS = {
    "get": {
        "parameters": [
            {"name": "region", "in": "path", "required": True, "type": "string", "enum": ["EMEA", "APAC"]},
            {"name": "userName", "in": "query", "required": True, "type": "string"},
        ],
        "responses": _ok(),
    },
}

POST_TOGGLE_PROVIDER = {
    "post": {
        "parameters": [
            {"name": "nuid", "in": "path", "required": True, "type": "string"},
            {"name": "parameters", "in": "body", "required": True, "schema": {"type": "object"}},
        ],
        "responses": _ok(),
    },
}

POST_FORM_UPLOAD = {
    "post": {
        "consumes": ["multipart/form-data"],
        "parameters": [
            {"name": "title", "in": "formData", "required": True, "type": "string"},
            {"name": "kind", "in": "formData", "required": True, "type": "string", "enum": ["pdf", "doc"]},
        ],
        "responses": _ok(),
    },
}

GET_FILE_DOWNLOAD = {
    "get": {
        "parameters": [{"name": "id", "in": "path", "required": True, "type": "string"}],
        "responses": _ok("A FileStream of the requested document"),
    },
}

DISPLAY_DATA = {
    "get": {
        "parameters": [
            {"name": "region", "in": "path", "required": True, "type": "string"},
            {"name": "facility", "in": "path", "required": True, "type": "string"},
        ],
        "responses": _ok(),
    },
}

SUBDEPARTMENT_DISPLAY_DATA = {
    "get": {
        "parameters": [
            {"name": "region", "in": "path", "required": True, "type": "string"},
            {"name": "facility", "in": "path", "required": True, "type": "string"},
            {"name": "subDepartment", "in": "path", "required": True, "type": "string"},
        ],
        "responses": _ok(),
    },
}

CREATE = {
    "post": {
        "parameters": [{"name": "data", "in": "body", "required": True, "schema": {"type": "object"}}],
        "responses": _ok(),
    },
}

ARTICLE_LIST = {
    "get": {
        "parameters": [
            {"name": "region", "in": "path", "required": True, "type": "string"},
            {"name": "locationType", "in": "path", "required": True, "type": "string"},
        ],
        "responses": _ok(),
    },
}


@pytest.fixture
def document() -> dict:
    return {
        "swagger": "2.0",
        "info": {"version": "v1", "title": "Content Services"},
        "paths": {
            "/rest/regional/addressList": GET_NO_PARAMETERS,
            "/rest/regional/{region}/article": GET_ONE_PARAMETER,
            "/rest/external/facility/create": CREATE,
            "/rest/external/provider/create": CREATE,
            "/rest/external/localMarketArea/create": CREATE,
            "/rest/external/provider/terminate": CREATE,
            "/rest/documents/{id}/download": GET_FILE_DOWNLOAD,
        },
    }
