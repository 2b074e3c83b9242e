"""Project document persistence used by the stateless (MCP) path.

The core never stores documents itself. Each stateless call reads the
current document, applies one mutation and writes it back. There is no
locking: when two calls race on one project the last write wins.
"""

import copy
import logging
from typing import Any, Protocol

import httpx
from pydantic import ValidationError as PydanticValidationError

from motionkit.config import Settings, get_settings
from motionkit.exceptions import DocumentCorruptedError, ProjectNotFoundError, StorageError
from motionkit.schemas.animation import Project

logger = logging.getLogger(__name__)


class ProjectRepository(Protocol):
    async def get_project(self, project_id: str) -> Project: ...

    async def save_project(self, project: Project) -> None: ...

    async def create_project(self, project: Project) -> Project: ...


def new_project(name: str | None = None, settings: Settings | None = None) -> Project:
    """Build an empty project from the configured defaults."""
    settings = settings or get_settings()
    return Project(
        name=name or settings.default_project_name,
        width=settings.default_width,
        height=settings.default_height,
        duration=settings.default_duration_s,
        fps=settings.default_fps,
        background=settings.default_background,
        font_family=settings.default_font_family,
    )


def parse_document(project_id: str, data: Any) -> Project:
    """Parse a stored document.

    Raises:
        DocumentCorruptedError: If the document is not a valid project
    """
    try:
        return Project.model_validate(data)
    except PydanticValidationError as exc:
        logger.error(f"Stored document for project {project_id} is invalid: {exc}")
        raise DocumentCorruptedError(f"Project document {project_id} is corrupted") from exc


class InMemoryProjectRepository:
    """Stores serialized documents in a dict, e.g. for tests and local runs."""

    def __init__(self, projects: list[Project] | None = None):
        self._documents: dict[str, dict[str, Any]] = {}
        for project in projects or []:
            self._documents[project.id] = project.model_dump(mode="json")

    async def get_project(self, project_id: str) -> Project:
        document = self._documents.get(project_id)
        if document is None:
            raise ProjectNotFoundError(project_id)
        return parse_document(project_id, copy.deepcopy(document))

    async def save_project(self, project: Project) -> None:
        self._documents[project.id] = project.model_dump(mode="json")

    async def create_project(self, project: Project) -> Project:
        if project.id in self._documents:
            raise StorageError(f"Project {project.id} already exists")
        self._documents[project.id] = project.model_dump(mode="json")
        return project

    def __contains__(self, project_id: str) -> bool:
        return project_id in self._documents


class HttpProjectRepository:
    """Reads and writes documents through the host application's project API."""

    def __init__(
        self,
        settings: Settings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.settings = settings or get_settings()
        self._transport = transport

    def _auth_headers(self) -> dict[str, str]:
        if self.settings.project_api_key:
            return {"X-API-Key": self.settings.project_api_key}
        # Dev mode fallback
        return {"Authorization": f"Bearer {self.settings.project_api_token}"}

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.settings.project_api_url,
            headers=self._auth_headers(),
            timeout=self.settings.project_api_timeout_s,
            transport=self._transport,
        )

    async def get_project(self, project_id: str) -> Project:
        try:
            async with self._client() as client:
                response = await client.get(f"/api/projects/{project_id}/document")
        except httpx.HTTPError as exc:
            logger.error(f"Project API unreachable while loading {project_id}: {exc}")
            raise StorageError(f"Could not load project {project_id}: {exc}") from exc

        if response.status_code == 404:
            raise ProjectNotFoundError(project_id)
        if response.status_code != 200:
            logger.error(f"Project API error: {response.status_code} - {response.text}")
            raise StorageError(f"Could not load project {project_id} (HTTP {response.status_code})")

        try:
            data = response.json()
        except ValueError as exc:
            raise DocumentCorruptedError(f"Project document {project_id} is not JSON") from exc
        return parse_document(project_id, data)

    async def save_project(self, project: Project) -> None:
        try:
            async with self._client() as client:
                response = await client.put(
                    f"/api/projects/{project.id}/document",
                    json=project.model_dump(mode="json"),
                )
        except httpx.HTTPError as exc:
            logger.error(f"Project API unreachable while saving {project.id}: {exc}")
            raise StorageError(f"Could not save project {project.id}: {exc}") from exc

        if response.status_code == 404:
            raise ProjectNotFoundError(project.id)
        if response.status_code >= 300:
            logger.error(f"Project API error: {response.status_code} - {response.text}")
            raise StorageError(f"Could not save project {project.id} (HTTP {response.status_code})")

    async def create_project(self, project: Project) -> Project:
        try:
            async with self._client() as client:
                response = await client.post("/api/projects", json=project.model_dump(mode="json"))
        except httpx.HTTPError as exc:
            logger.error(f"Project API unreachable while creating {project.id}: {exc}")
            raise StorageError(f"Could not create project {project.id}: {exc}") from exc

        if response.status_code >= 300:
            logger.error(f"Project API error: {response.status_code} - {response.text}")
            raise StorageError(f"Could not create project {project.id} (HTTP {response.status_code})")

        logger.info(f"Created project {project.id} ({project.name})")
        return project
