"""Tests for the tool command table."""

from motionkit.services.layer_resolver import AuthoringSession
from motionkit.services.tool_registry import (
    TOOL_REGISTRY,
    available_tools,
    execute_tool,
    tool_definitions,
)

EXPECTED_TOOLS = {
    "create_layer",
    "edit_layer",
    "animate_layer",
    "update_keyframe",
    "remove_keyframe",
    "remove_layer",
    "group_layers",
    "ungroup_layers",
    "configure_project",
}


class TestToolDefinitions:
    def test_all_tools_registered(self):
        assert set(available_tools()) == EXPECTED_TOOLS

    def test_function_calling_schema(self):
        definitions = {d["function"]["name"]: d for d in tool_definitions()}
        assert set(definitions) == EXPECTED_TOOLS
        for definition in definitions.values():
            assert definition["type"] == "function"
            assert definition["function"]["description"]
            assert definition["function"]["parameters"]["type"] == "object"

    def test_required_parameters(self):
        parameters = TOOL_REGISTRY["animate_layer"].definition()["function"]["parameters"]
        assert "layer" in parameters["required"]
        assert "keyframes" in parameters["properties"]
        create = TOOL_REGISTRY["create_layer"].definition()["function"]["parameters"]
        assert create["required"] == ["type"]


class TestExecuteTool:
    def test_dispatches_to_mutation(self, empty_project):
        session = AuthoringSession()
        outcome = execute_tool("create_layer", {"type": "text", "name": "Hi"}, empty_project, session)
        assert outcome.success
        assert outcome.project.layers[0].name == "Hi"
        assert session.created_layer_ids == [outcome.result["layer_id"]]

    def test_unknown_tool(self, project):
        outcome = execute_tool("explode_layer", {}, project, AuthoringSession())
        assert outcome.result["success"] is False
        assert outcome.result["error_code"] == "UNKNOWN_TOOL"
        assert "create_layer" in outcome.result["error"]
        assert outcome.project is project

    def test_unexpected_argument_rejected(self, project):
        outcome = execute_tool("remove_layer", {"layer": "L1", "force": True}, project, AuthoringSession())
        assert outcome.result["error_code"] == "VALIDATION_ERROR"
        assert outcome.project is project

    def test_layer_id_alias_accepted(self, project):
        layer_id = project.layers[0].id
        outcome = execute_tool("remove_layer", {"layer_id": layer_id}, project, AuthoringSession())
        assert outcome.success
        assert [layer.name for layer in outcome.project.layers] == ["L2"]
