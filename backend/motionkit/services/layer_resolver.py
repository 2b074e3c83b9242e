"""Layer reference resolution.

Agents refer to layers by id, by name, or, inside one chat turn, by the
positional alias ``layer_N`` for the Nth layer they created in that turn
(0-indexed). Alias state lives on an :class:`AuthoringSession` that the
orchestrator creates fresh for every user turn.
"""

import logging
import re

from motionkit.exceptions import (
    InvariantViolation,
    LayerNotFoundError,
    PositionalAliasNotAllowedError,
)
from motionkit.schemas.animation import Layer, Project

logger = logging.getLogger(__name__)

POSITIONAL_ALIAS = re.compile(r"^layer_(\d+)$")


class AuthoringSession:
    """Per-turn authoring context shared by the tool calls of one turn."""

    def __init__(self, *, allow_positional_aliases: bool = True):
        self.allow_positional_aliases = allow_positional_aliases
        self.created_layer_ids: list[str] = []

    @classmethod
    def stateless(cls) -> "AuthoringSession":
        """Session for one-shot remote calls, where aliases have no meaning."""
        return cls(allow_positional_aliases=False)

    def register_created(self, layer_id: str) -> int:
        """Record a layer created by ``create_layer``; returns its alias index."""
        self.created_layer_ids.append(layer_id)
        return len(self.created_layer_ids) - 1

    def alias_target(self, index: int) -> str | None:
        if 0 <= index < len(self.created_layer_ids):
            return self.created_layer_ids[index]
        return None


def _available(project: Project) -> list[tuple[str, str]]:
    return [(layer.name, layer.id) for layer in project.layers]


def resolve_layer_id(ref: str, project: Project, session: AuthoringSession) -> str:
    """Resolve a layer reference to a layer id.

    Lookup order: exact id, then exact (case-sensitive) name, first match in
    document order, then positional alias.

    Raises:
        LayerNotFoundError: If nothing matches; lists the available layers
        PositionalAliasNotAllowedError: If an alias is used where the
            session does not support them
    """
    for layer in project.layers:
        if layer.id == ref:
            return layer.id

    for layer in project.layers:
        if layer.name == ref:
            return layer.id

    match = POSITIONAL_ALIAS.match(ref)
    if match is not None:
        if not session.allow_positional_aliases:
            raise PositionalAliasNotAllowedError(ref)
        index = int(match.group(1))
        target = session.alias_target(index)
        if target is None:
            raise LayerNotFoundError(
                ref,
                available=_available(project),
                reason=f"only {len(session.created_layer_ids)} layer(s) were created in this turn",
            )
        if project.find_layer(target) is None:
            raise LayerNotFoundError(
                ref, available=_available(project), reason="that layer was removed"
            )
        logger.debug(f"Resolved alias {ref} -> {target}")
        return target

    raise LayerNotFoundError(ref, available=_available(project))


def resolve_layer(ref: str, project: Project, session: AuthoringSession) -> Layer:
    layer_id = resolve_layer_id(ref, project, session)
    layer = project.find_layer(layer_id)
    if layer is None:
        raise InvariantViolation(f"resolved layer {layer_id} is not in the project", layer_id=layer_id)
    return layer
