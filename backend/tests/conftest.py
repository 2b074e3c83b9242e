"""
Pytest fixtures for motionkit tests.

Projects are built through the mutation operations themselves so fixtures
always satisfy the document invariants.
"""

import pytest

from motionkit.schemas.animation import Project
from motionkit.services import mutations
from motionkit.services.layer_resolver import AuthoringSession


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "slow: property-style tests over many random operations")


def _add_layer(project: Project, layer_type: str, name: str, **kwargs) -> tuple[Project, str]:
    outcome = mutations.create_layer(project, {"type": layer_type, "name": name, **kwargs})
    assert outcome.success, outcome.result
    return outcome.project, outcome.result["layer_id"]


@pytest.fixture
def add_layer():
    """Create a layer and return (project, layer_id); fails the test on error."""
    return _add_layer


@pytest.fixture
def empty_project() -> Project:
    """A 1920x1080, 10 second, 30 fps project without layers."""
    return Project(name="Test Project", duration=10.0, fps=30)


@pytest.fixture
def project(empty_project: Project) -> Project:
    """Project with a text layer "L1" and a shape layer "L2"."""
    project, _ = _add_layer(empty_project, "text", "L1", props={"content": "Hello"})
    project, _ = _add_layer(project, "shape", "L2")
    return project


@pytest.fixture
def session() -> AuthoringSession:
    """Interactive authoring session for one chat turn."""
    return AuthoringSession()
