from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional
from unittest.mock import MagicMock, patch
from uuid import uuid4

import httpx
import pytest
from fastapi.testclient import TestClient

from itscooked.app.deps import (
    CurrentUser,
    get_current_user,
    get_http_client,
    get_recipe_repository,
    get_supabase,
)
from itscooked.app.domain.errors import RecipeConflictError, RecipeNotFoundError, RecipeRepositoryError
from itscooked.app.domain.models import Recipe, RecipeChanges
from itscooked.app.infra.db.base import RecipeRepository
from itscooked.app.main import app
from itscooked.services.types import ImportResult, SourcePlatform

USER = CurrentUser(id="user-1", email="cook@example.com")
IMPORT_TARGET = "itscooked.app.routers.recipes.import_recipe_from_url"


class RecipeRepositoryStub(RecipeRepository):
    def __init__(self) -> None:
        self.recipes: dict[str, Recipe] = {}
        self.raise_conflict_on_create = False

    def create(
        self,
        user_id: str,
        source_url: str,
        source_platform: SourcePlatform,
        result: ImportResult,
    ) -> Recipe:
        if self.raise_conflict_on_create:
            raise RecipeConflictError(source_url)
        now = datetime.now(timezone.utc)
        recipe = Recipe(
            id=str(uuid4()),
            user_id=user_id,
            source_url=source_url,
            source_platform=source_platform,
            title=result.title,
            ingredients_list=result.ingredients_list or None,
            instructions_list=result.instructions_list or None,
            original_creator=result.original_creator,
            thumbnail_url=result.thumbnail_url,
            created_at=now,
            updated_at=now,
        )
        self.recipes[recipe.id] = recipe
        return recipe

    def get(self, user_id: str, recipe_id: str) -> Optional[Recipe]:
        recipe = self.recipes.get(recipe_id)
        return recipe if recipe and recipe.user_id == user_id else None

    def find_by_source_url(self, user_id: str, source_url: str) -> Optional[Recipe]:
        for recipe in self.recipes.values():
            if recipe.user_id == user_id and recipe.source_url == source_url:
                return recipe
        return None

    def list_for_user(self, user_id: str, limit: int = 20, offset: int = 0) -> tuple[list[Recipe], int]:
        owned = [r for r in self.recipes.values() if r.user_id == user_id]
        return owned[offset:offset + limit], len(owned)

    def update(self, user_id: str, recipe_id: str, changes: RecipeChanges) -> Recipe:
        recipe = self.get(user_id, recipe_id)
        if recipe is None:
            raise RecipeNotFoundError(recipe_id)
        for name, value in changes.as_row().items():
            setattr(recipe, name, value)
        return recipe

    def delete(self, user_id: str, recipe_id: str) -> bool:
        if self.get(user_id, recipe_id) is None:
            return False
        del self.recipes[recipe_id]
        return True


@pytest.fixture
def repo() -> RecipeRepositoryStub:
    return RecipeRepositoryStub()


@pytest.fixture
def client(repo: RecipeRepositoryStub):
    def _http_client():
        with httpx.Client() as http:
            yield http

    app.dependency_overrides[get_current_user] = lambda: USER
    app.dependency_overrides[get_recipe_repository] = lambda: repo
    app.dependency_overrides[get_http_client] = _http_client
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def _saved(repo: RecipeRepositoryStub, **overrides) -> Recipe:
    values = {
        "user_id": USER.id,
        "source_url": "https://www.instagram.com/p/ABC123",
        "source_platform": SourcePlatform.INSTAGRAM,
        "result": ImportResult(title="Pancakes", ingredients_list=["2 eggs"], instructions_list=["Mix"]),
    }
    values.update(overrides)
    return repo.create(**values)


class TestImportRecipe:
    def test_success(self, client: TestClient, repo: RecipeRepositoryStub) -> None:
        result = ImportResult(
            title="Pancakes",
            ingredients_list=["2 eggs"],
            instructions_list=["Mix"],
            original_creator="chefx",
        )
        with patch(IMPORT_TARGET, return_value=result) as run_import:
            response = client.post(
                "/recipes/import",
                json={"url": "https://www.instagram.com/p/ABC123/?igshid=xyz", "title": " Pancakes "},
            )

        assert response.status_code == 201
        body = response.json()
        assert body["recipe"]["sourceUrl"] == "https://www.instagram.com/p/ABC123"
        assert body["recipe"]["sourcePlatform"] == "INSTAGRAM"
        assert body["recipe"]["originalCreator"] == "chefx"
        assert body["extraction"] == {"status": "success", "warnings": []}

        request = run_import.call_args.args[0]
        assert request.url == "https://www.instagram.com/p/ABC123"
        assert request.fallback_title == "Pancakes"
        assert len(repo.recipes) == 1

    def test_failed_extraction_still_saves(self, client: TestClient, repo: RecipeRepositoryStub) -> None:
        result = ImportResult(warnings=["TikTok oEmbed failed (404).", "No caption text was available to parse."])
        with patch(IMPORT_TARGET, return_value=result):
            response = client.post("/recipes/import", json={"url": "https://www.tiktok.com/@chefx/video/1"})

        assert response.status_code == 201
        extraction = response.json()["extraction"]
        assert extraction["status"] == "failed"
        assert extraction["warnings"][0] == "TikTok oEmbed failed (404)."
        assert len(repo.recipes) == 1

    @pytest.mark.parametrize(
        ("payload", "message"),
        [
            ({}, "Recipe URL is required."),
            ({"url": "ftp://instagram.com/p/1"}, "Recipe URL must start with http or https."),
            ({"url": "https://www.youtube.com/watch?v=1"}, "Only Instagram or TikTok links are supported right now."),
            ({"url": "https://www.instagram.com/p/1", "title": "x" * 141}, "Title must be 140 characters or fewer."),
        ],
    )
    def test_validation_errors(self, client: TestClient, payload: dict, message: str) -> None:
        with patch(IMPORT_TARGET) as run_import:
            response = client.post("/recipes/import", json=payload)

        assert response.status_code == 400
        assert response.json()["detail"] == message
        run_import.assert_not_called()

    def test_duplicate_returns_existing(self, client: TestClient, repo: RecipeRepositoryStub) -> None:
        existing = _saved(repo)

        with patch(IMPORT_TARGET) as run_import:
            response = client.post("/recipes/import", json={"url": "https://www.instagram.com/p/ABC123/"})

        assert response.status_code == 409
        assert response.json()["existingRecipe"] == {"id": existing.id, "title": "Pancakes"}
        run_import.assert_not_called()

    def test_conflict_on_insert(self, client: TestClient, repo: RecipeRepositoryStub) -> None:
        repo.raise_conflict_on_create = True

        with patch(IMPORT_TARGET, return_value=ImportResult()):
            response = client.post("/recipes/import", json={"url": "https://www.instagram.com/p/NEW"})

        assert response.status_code == 409
        assert response.json()["existingRecipe"] is None

    def test_unexpected_error_is_500(self, client: TestClient) -> None:
        with patch(IMPORT_TARGET, side_effect=RuntimeError("boom")):
            response = client.post("/recipes/import", json={"url": "https://www.instagram.com/p/ABC123"})

        assert response.status_code == 500


class TestRecipeCrud:
    def test_list(self, client: TestClient, repo: RecipeRepositoryStub) -> None:
        _saved(repo)
        _saved(repo, user_id="someone-else")

        response = client.get("/recipes/")

        assert response.status_code == 200
        body = response.json()
        assert body["total"] == 1
        assert body["items"][0]["title"] == "Pancakes"

    def test_get_and_not_found(self, client: TestClient, repo: RecipeRepositoryStub) -> None:
        recipe = _saved(repo)

        assert client.get(f"/recipes/{recipe.id}").json()["ingredientsList"] == ["2 eggs"]
        assert client.get("/recipes/missing").status_code == 404

    def test_update_partial(self, client: TestClient, repo: RecipeRepositoryStub) -> None:
        recipe = _saved(repo)

        response = client.put(
            f"/recipes/{recipe.id}",
            json={"title": "  Fluffy pancakes ", "ingredientsList": [" 3 eggs ", ""]},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["title"] == "Fluffy pancakes"
        assert body["ingredientsList"] == ["3 eggs"]
        assert body["instructionsList"] == ["Mix"]

    def test_update_empty_list_clears(self, client: TestClient, repo: RecipeRepositoryStub) -> None:
        recipe = _saved(repo)

        response = client.put(f"/recipes/{recipe.id}", json={"instructionsList": []})

        assert response.status_code == 200
        assert repo.recipes[recipe.id].instructions_list is None
        assert repo.recipes[recipe.id].title == "Pancakes"

    def test_update_title_too_long(self, client: TestClient, repo: RecipeRepositoryStub) -> None:
        recipe = _saved(repo)

        response = client.put(f"/recipes/{recipe.id}", json={"title": "x" * 141})

        assert response.status_code == 422

    def test_delete(self, client: TestClient, repo: RecipeRepositoryStub) -> None:
        recipe = _saved(repo)

        assert client.delete(f"/recipes/{recipe.id}").json() == {"deleted": True}
        assert client.delete(f"/recipes/{recipe.id}").status_code == 404

    @pytest.mark.parametrize(
        ("method", "path"),
        [("get", "/recipes/r-1"), ("get", "/recipes/r-1/grocery"), ("post", "/recipes/r-1/reimport")],
    )
    def test_read_failure_is_500(
        self, client: TestClient, repo: RecipeRepositoryStub, method: str, path: str
    ) -> None:
        repo.get = MagicMock(side_effect=RecipeRepositoryError("get", "connection reset"))

        with patch(IMPORT_TARGET) as run_import:
            response = client.request(method.upper(), path)

        assert response.status_code == 500
        assert response.json()["detail"] == "Failed to load recipe"
        run_import.assert_not_called()

    def test_delete_failure_is_500(self, client: TestClient, repo: RecipeRepositoryStub) -> None:
        repo.delete = MagicMock(side_effect=RecipeRepositoryError("delete", "connection reset"))

        response = client.delete("/recipes/r-1")

        assert response.status_code == 500
        assert response.json()["detail"] == "Failed to delete recipe"


class TestReimport:
    def test_replaces_extracted_content(self, client: TestClient, repo: RecipeRepositoryStub) -> None:
        recipe = _saved(repo)
        result = ImportResult(
            title="Other title",
            ingredients_list=["2 eggs", "1 cup milk"],
            instructions_list=["Whisk", "Fry"],
            original_creator="chefx",
        )

        with patch(IMPORT_TARGET, return_value=result) as run_import:
            response = client.post(f"/recipes/{recipe.id}/reimport")

        assert response.status_code == 200
        body = response.json()
        assert body["recipe"]["title"] == "Pancakes"
        assert body["recipe"]["instructionsList"] == ["Whisk", "Fry"]
        assert body["recipe"]["originalCreator"] == "chefx"
        assert body["extraction"]["status"] == "success"
        assert run_import.call_args.args[0].platform == SourcePlatform.INSTAGRAM

    def test_failed_rerun_keeps_previous_lists(self, client: TestClient, repo: RecipeRepositoryStub) -> None:
        recipe = _saved(repo)

        with patch(IMPORT_TARGET, return_value=ImportResult(warnings=["Failed to fetch page (500)."])):
            response = client.post(f"/recipes/{recipe.id}/reimport")

        assert response.status_code == 200
        assert response.json()["extraction"]["status"] == "failed"
        assert repo.recipes[recipe.id].ingredients_list == ["2 eggs"]

    def test_not_found(self, client: TestClient) -> None:
        with patch(IMPORT_TARGET) as run_import:
            assert client.post("/recipes/missing/reimport").status_code == 404
        run_import.assert_not_called()


class TestGroceryList:
    def test_builds_from_ingredients(self, client: TestClient, repo: RecipeRepositoryStub) -> None:
        recipe = _saved(repo)

        response = client.get(f"/recipes/{recipe.id}/grocery")

        assert response.status_code == 200
        assert response.json() == {
            "recipeId": recipe.id,
            "title": "Pancakes",
            "items": ["2 eggs"],
            "text": "Pancakes\n- 2 eggs",
        }


class TestAuth:
    def test_me(self, client: TestClient, repo: RecipeRepositoryStub) -> None:
        _saved(repo)

        body = client.get("/auth/me").json()

        assert body["id"] == USER.id
        assert body["email"] == "cook@example.com"
        assert body["recipeCount"] == 1

    def test_missing_token(self) -> None:
        app.dependency_overrides.clear()
        app.dependency_overrides[get_supabase] = lambda: MagicMock()
        try:
            response = TestClient(app).get("/recipes/")
        finally:
            app.dependency_overrides.clear()
        assert response.status_code == 401
        assert response.json()["detail"] == "Missing token"


def test_health() -> None:
    response = TestClient(app).get("/health")
    assert response.status_code == 200
    assert response.json()["ok"] is True
