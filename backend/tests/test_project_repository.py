"""Tests for project document storage."""

import json

import httpx
import pytest

from motionkit.config import Settings
from motionkit.exceptions import DocumentCorruptedError, ProjectNotFoundError, StorageError
from motionkit.services.project_repository import HttpProjectRepository, InMemoryProjectRepository, new_project


class TestInMemoryProjectRepository:
    @pytest.mark.asyncio
    async def test_get_returns_independent_copy(self, project):
        repository = InMemoryProjectRepository([project])
        loaded = await repository.get_project(project.id)
        loaded.layers.clear()

        again = await repository.get_project(project.id)
        assert len(again.layers) == 2
        assert again.model_dump() == project.model_dump()

    @pytest.mark.asyncio
    async def test_save_overwrites(self, project):
        repository = InMemoryProjectRepository()
        assert project.id not in repository
        await repository.save_project(project)
        renamed = project.model_copy(update={"name": "Renamed"})
        await repository.save_project(renamed)
        assert (await repository.get_project(project.id)).name == "Renamed"

    @pytest.mark.asyncio
    async def test_unknown_project(self):
        with pytest.raises(ProjectNotFoundError):
            await InMemoryProjectRepository().get_project("missing")

    @pytest.mark.asyncio
    async def test_create_project(self):
        repository = InMemoryProjectRepository()
        project = await repository.create_project(new_project("Launch"))

        loaded = await repository.get_project(project.id)
        assert loaded.name == "Launch"
        with pytest.raises(StorageError, match="already exists"):
            await repository.create_project(project)


class TestNewProject:
    def test_uses_settings_defaults(self):
        settings = Settings(
            default_project_name="Draft",
            default_width=720,
            default_height=1280,
            default_duration_s=6.0,
            default_fps=60,
            default_background="#ff0000",
            default_font_family="Roboto",
        )
        project = new_project(settings=settings)

        assert project.name == "Draft"
        assert (project.width, project.height) == (720, 1280)
        assert (project.duration, project.fps) == (6.0, 60)
        assert project.background == "#ff0000"
        assert project.font_family == "Roboto"
        assert project.layers == []

    def test_explicit_name_wins(self):
        assert new_project("Promo", Settings()).name == "Promo"


class TestHttpProjectRepository:
    @pytest.mark.asyncio
    async def test_round_trip(self, project):
        documents = {}
        seen_headers = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen_headers.append(request.headers.get("X-API-Key"))
            project_id = request.url.path.split("/")[3]
            if request.method == "PUT":
                documents[project_id] = json.loads(request.content)
                return httpx.Response(204)
            if project_id not in documents:
                return httpx.Response(404, json={"detail": "not found"})
            return httpx.Response(200, json=documents[project_id])

        repository = HttpProjectRepository(
            Settings(project_api_url="http://api.test", project_api_key="key-123"),
            transport=httpx.MockTransport(handler),
        )
        await repository.save_project(project)
        loaded = await repository.get_project(project.id)

        assert loaded.model_dump() == project.model_dump()
        assert seen_headers == ["key-123", "key-123"]

    @pytest.mark.asyncio
    async def test_bearer_token_without_api_key(self, project):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["auth"] = request.headers.get("Authorization")
            return httpx.Response(200, json=project.model_dump(mode="json"))

        repository = HttpProjectRepository(
            Settings(project_api_key="", project_api_token="dev-token"),
            transport=httpx.MockTransport(handler),
        )
        await repository.get_project(project.id)
        assert seen["auth"] == "Bearer dev-token"

    @pytest.mark.asyncio
    async def test_not_found(self):
        repository = HttpProjectRepository(
            Settings(), transport=httpx.MockTransport(lambda request: httpx.Response(404))
        )
        with pytest.raises(ProjectNotFoundError):
            await repository.get_project("missing")

    @pytest.mark.asyncio
    async def test_server_error(self, project):
        repository = HttpProjectRepository(
            Settings(), transport=httpx.MockTransport(lambda request: httpx.Response(500, text="boom"))
        )
        with pytest.raises(StorageError):
            await repository.get_project(project.id)
        with pytest.raises(StorageError):
            await repository.save_project(project)

    @pytest.mark.asyncio
    async def test_corrupted_document(self):
        repository = HttpProjectRepository(
            Settings(),
            transport=httpx.MockTransport(
                lambda request: httpx.Response(200, json={"layers": [{"name": "x", "type": "hologram"}]})
            ),
        )
        with pytest.raises(DocumentCorruptedError):
            await repository.get_project("broken")

    @pytest.mark.asyncio
    async def test_create_posts_document(self):
        requests = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(201, json={"id": "created"})

        repository = HttpProjectRepository(
            Settings(project_api_url="http://api.test", project_api_key="key-123"),
            transport=httpx.MockTransport(handler),
        )
        project = new_project("Launch", Settings())
        await repository.create_project(project)

        assert requests[0].method == "POST"
        assert requests[0].url.path == "/api/projects"
        assert json.loads(requests[0].content)["id"] == project.id

    @pytest.mark.asyncio
    async def test_create_rejected(self):
        repository = HttpProjectRepository(
            Settings(), transport=httpx.MockTransport(lambda request: httpx.Response(409, text="exists"))
        )
        with pytest.raises(StorageError):
            await repository.create_project(new_project(settings=Settings()))
