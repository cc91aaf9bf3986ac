"""Tests for path-item parsing and tool input models."""

import pytest
from pydantic import ValidationError

from conftest import GET_ONE_PARAMETER, POST_TOGGLE_PROVIDER
from openapi_actions.endpoint import Endpoint
from openapi_actions.errors import InvalidDocumentError, InvalidVerbDataError
from openapi_actions.models import OperationSpec
from openapi_actions.openapi import build_input_model, parse_path_item


class TestParsePathItem:
    def test_operations_in_declaration_order(self):
        operations = parse_path_item("/rest/items", {"post": {}, "get": {}, "summary": "items"})
        assert list(operations) == ["post", "get"]
        assert all(isinstance(operation, OperationSpec) for operation in operations.values())

    def test_operation_fields(self):
        operation = parse_path_item("/rest/regional/{region}/article", GET_ONE_PARAMETER)["get"]

        assert operation.summary == "Get articles"
        assert [parameter.name for parameter in operation.parameters] == ["region"]
        assert operation.parameters[0].enum == ("EMEA", "APAC")

    def test_operation_parameter_overrides_shared(self):
        path_item = {
            "parameters": [{"name": "id", "in": "path", "type": "string"}],
            "get": {"parameters": [{"name": "id", "in": "path", "type": "integer", "required": True}]},
        }
        operation = parse_path_item("/rest/items/{id}", path_item)["get"]

        assert len(operation.parameters) == 1
        assert operation.parameters[0].type == "integer"

    def test_nameless_parameters_are_skipped(self):
        operation = parse_path_item("/rest/items", {"get": {"parameters": [{"in": "query"}]}})["get"]
        assert operation.parameters == ()

    def test_parsed_operations_pass_through(self):
        spec = OperationSpec(verb="get")
        assert parse_path_item("/rest/items", {"get": spec})["get"] is spec

    def test_non_mapping(self):
        with pytest.raises(InvalidVerbDataError):
            parse_path_item("/rest/items", ["get"])

    @pytest.mark.parametrize(
        "path_item",
        [
            {"get": "fetch everything"},
            {"get": {"parameters": ["oops"]}},
            {"get": {"parameters": {"name": "id"}}},
            {"parameters": [7], "get": {}},
            {"get": {"parameters": [{"name": "kind", "in": "query", "enum": "pdf"}]}},
            {"get": {"responses": ["200"]}},
            {"post": {"requestBody": "json"}},
        ],
    )
    def test_malformed_shapes(self, path_item):
        with pytest.raises(InvalidDocumentError):
            parse_path_item("/rest/items", path_item)

    def test_unknown_keys_only(self):
        with pytest.raises(InvalidVerbDataError) as excinfo:
            parse_path_item("/rest/items", {"fetch": {}})

        assert excinfo.value.keys == ["fetch"]
        assert "/rest/items" in str(excinfo.value)


class TestBuildInputModel:
    def test_every_parameter_is_required_without_body(self):
        path_item = {
            "get": {
                "parameters": [
                    {"name": "region", "in": "path", "required": True, "type": "string"},
                    {"name": "page", "in": "query", "type": "integer"},
                ]
            }
        }
        descriptor = Endpoint("/rest/regional/{region}/article", path_item).action_for("get").descriptor
        model = build_input_model(descriptor)

        payload = model.model_validate({"region": "EMEA", "page": 2})
        assert payload.model_dump(by_alias=True, exclude_none=True) == {"region": "EMEA", "page": 2}

        with pytest.raises(ValidationError):
            model.model_validate({"region": "EMEA"})
        with pytest.raises(ValidationError):
            model.model_validate({"page": 2})

    def test_body_actions_only_require_the_body(self):
        descriptor = Endpoint(
            "/rest/commonApis/provider/nuid/{nuid}/toggleProviderStatus", POST_TOGGLE_PROVIDER
        ).action_for("post").descriptor
        model = build_input_model(descriptor)

        payload = model.model_validate({"body": {"isActive": True}})

        assert payload.model_dump(by_alias=True, exclude_none=True) == {"body": {"isActive": True}}
        with pytest.raises(ValidationError):
            model.model_validate({"nuid": "F493937"})

    def test_body_field(self):
        descriptor = Endpoint(
            "/rest/commonApis/provider/nuid/{nuid}/toggleProviderStatus", POST_TOGGLE_PROVIDER
        ).action_for("post").descriptor
        model = build_input_model(descriptor)

        payload = model.model_validate({"nuid": "F493937", "body": {"isActive": True}})

        assert payload.model_dump(by_alias=True, exclude_none=True) == {
            "nuid": "F493937",
            "body": {"isActive": True},
        }

    def test_awkward_names_keep_their_alias(self):
        path_item = {
            "get": {
                "parameters": [
                    {"name": "page-size", "in": "query", "type": "integer"},
                    {"name": "schema", "in": "query", "type": "string"},
                    {"name": "1st", "in": "query", "type": "string"},
                ]
            }
        }
        descriptor = Endpoint("/rest/items", path_item).action_for("get").descriptor
        model = build_input_model(descriptor)

        payload = model.model_validate({"page-size": 10, "schema": "v2", "1st": "a"})

        assert payload.model_dump(by_alias=True, exclude_none=True) == {
            "page-size": 10,
            "schema": "v2",
            "1st": "a",
        }
        assert model.__name__ == "getItemsInput"
