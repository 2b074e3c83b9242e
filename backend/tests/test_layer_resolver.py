"""Tests for layer reference resolution and per-turn aliases."""

import pytest

from motionkit.exceptions import InvariantViolation, LayerNotFoundError, PositionalAliasNotAllowedError
from motionkit.services import mutations
from motionkit.services import layer_resolver
from motionkit.services.layer_resolver import AuthoringSession, resolve_layer, resolve_layer_id


class TestResolveById:
    def test_exact_id(self, project, session):
        layer = project.layers[1]
        assert resolve_layer_id(layer.id, project, session) == layer.id

    def test_id_wins_over_name(self, project, session):
        """A layer named like another layer's id still resolves to the id owner."""
        target = project.layers[0]
        outcome = mutations.edit_layer(project, {"layer": "L2", "updates": {"name": target.id}})
        assert resolve_layer_id(target.id, outcome.project, session) == target.id


class TestResolveByName:
    def test_exact_name(self, project, session):
        assert resolve_layer_id("L2", project, session) == project.layers[1].id

    def test_name_is_case_sensitive(self, project, session):
        with pytest.raises(LayerNotFoundError):
            resolve_layer_id("l2", project, session)

    def test_duplicate_names_first_in_document_order(self, project, add_layer, session):
        project, _ = add_layer(project, "shape", "L1")
        assert resolve_layer_id("L1", project, session) == project.layers[0].id


class TestPositionalAliases:
    """Tests for layer_N aliases within a turn."""

    def test_aliases_follow_creation_order(self, empty_project, session):
        project = empty_project
        created = []
        for name in ("A", "B", "C"):
            outcome = mutations.create_layer(project, {"type": "shape", "name": name}, session)
            project = outcome.project
            created.append(outcome.result["layer_id"])
            assert outcome.result["layer_index"] == len(created) - 1

        for index, layer_id in enumerate(created):
            assert resolve_layer_id(f"layer_{index}", project, session) == layer_id

    def test_only_layers_created_this_turn(self, project, session):
        """Layers that existed before the turn do not get aliases."""
        with pytest.raises(LayerNotFoundError, match="only 0 layer"):
            resolve_layer_id("layer_0", project, session)

    def test_fresh_turn_restarts_count(self, project):
        first_turn = AuthoringSession()
        outcome = mutations.create_layer(project, {"type": "text", "name": "T1"}, first_turn)
        project = outcome.project
        assert resolve_layer_id("layer_0", project, first_turn) == outcome.result["layer_id"]

        second_turn = AuthoringSession()
        outcome = mutations.create_layer(project, {"type": "text", "name": "T2"}, second_turn)
        assert outcome.result["layer_index"] == 0
        assert resolve_layer_id("layer_0", outcome.project, second_turn) == outcome.result["layer_id"]

    def test_failed_creation_does_not_consume_alias(self, empty_project, session):
        failed = mutations.create_layer(empty_project, {"type": "hologram"}, session)
        assert not failed.success
        outcome = mutations.create_layer(empty_project, {"type": "text"}, session)
        assert outcome.result["layer_index"] == 0

    def test_alias_of_removed_layer(self, empty_project, session):
        outcome = mutations.create_layer(empty_project, {"type": "text", "name": "Gone"}, session)
        outcome = mutations.remove_layer(outcome.project, {"layer": "layer_0"}, session)
        assert outcome.success
        with pytest.raises(LayerNotFoundError, match="removed"):
            resolve_layer_id("layer_0", outcome.project, session)

    def test_stateless_session_rejects_aliases(self, project):
        with pytest.raises(PositionalAliasNotAllowedError):
            resolve_layer_id("layer_0", project, AuthoringSession.stateless())

    def test_name_matching_alias_pattern_still_resolves_by_name(self, project, add_layer):
        project, layer_id = add_layer(project, "text", "layer_0")
        assert resolve_layer_id("layer_0", project, AuthoringSession.stateless()) == layer_id


class TestNotFound:
    def test_error_lists_available_layers(self, project, session):
        with pytest.raises(LayerNotFoundError) as exc_info:
            resolve_layer_id("Missing", project, session)
        message = exc_info.value.message
        assert 'Layer "Missing" not found' in message
        assert f'"L1" (id: {project.layers[0].id})' in message

    def test_empty_project(self, empty_project, session):
        with pytest.raises(LayerNotFoundError, match="no layers yet"):
            resolve_layer_id("Anything", empty_project, session)


class TestResolveLayer:
    def test_returns_layer(self, project, session):
        assert resolve_layer("L2", project, session) is project.layers[1]

    def test_dangling_id_is_an_invariant_violation(self, project, session, monkeypatch):
        """A resolved id missing from the document raises even under ``python -O``."""
        monkeypatch.setattr(layer_resolver, "resolve_layer_id", lambda ref, project, session: "gone")
        with pytest.raises(InvariantViolation) as exc_info:
            layer_resolver.resolve_layer("L1", project, session)
        assert exc_info.value.layer_id == "gone"
