from __future__ import annotations

import logging
import os
from datetime import datetime, timezone
from typing import Any, Optional
from uuid import uuid4

from postgrest.exceptions import APIError
from supabase import Client, create_client

from itscooked.app.domain.errors import RecipeConflictError, RecipeNotFoundError, RecipeRepositoryError
from itscooked.app.domain.models import Recipe, RecipeChanges
from itscooked.app.infra.db.base import RecipeRepository
from itscooked.services.text import normalize_string_list
from itscooked.services.types import ImportResult, SourcePlatform

logger = logging.getLogger(__name__)

UNIQUE_VIOLATION = "23505"
RECIPE_COLUMNS = (
    "id,user_id,title,source_url,source_platform,ingredients_list,instructions_list,"
    "original_creator,thumbnail_url,created_at,updated_at"
)


def _now_utc() -> datetime:
    return datetime.now(timezone.utc)


def _parse_datetime(value: str | datetime | None) -> datetime | None:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value
    if not isinstance(value, str):
        return None

    try:
        normalized = value.replace("Z", "+00:00") if value.endswith("Z") else value
        return datetime.fromisoformat(normalized)
    except ValueError:
        return None


def _safe_str(value: object) -> str | None:
    return str(value) if value else None


def _optional_list(value: object) -> list[str] | None:
    items = normalize_string_list(value)
    return items or None


def _parse_platform(value: object) -> SourcePlatform:
    try:
        return SourcePlatform(str(value))
    except ValueError:
        return SourcePlatform.UNKNOWN


def _row_to_recipe(row: dict[str, Any]) -> Recipe:
    return Recipe(
        id=str(row["id"]),
        user_id=str(row["user_id"]),
        source_url=str(row["source_url"]),
        source_platform=_parse_platform(row.get("source_platform")),
        title=_safe_str(row.get("title")),
        ingredients_list=_optional_list(row.get("ingredients_list")),
        instructions_list=_optional_list(row.get("instructions_list")),
        original_creator=_safe_str(row.get("original_creator")),
        thumbnail_url=_safe_str(row.get("thumbnail_url")),
        created_at=_parse_datetime(row.get("created_at")),
        updated_at=_parse_datetime(row.get("updated_at")),
    )


def _create_supabase_client() -> Client:
    url = os.getenv("SUPABASE_URL")
    key = os.getenv("SUPABASE_SERVICE_ROLE_KEY")
    if not url or not key:
        raise ValueError("SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY required")
    return create_client(url, key)


class SupabaseRecipeRepository(RecipeRepository):
    TABLE_NAME = "recipes"

    def __init__(self, client: Client | None = None):
        self._client = client or _create_supabase_client()

    def create(
        self,
        user_id: str,
        source_url: str,
        source_platform: SourcePlatform,
        result: ImportResult,
    ) -> Recipe:
        now = _now_utc().isoformat()
        row = {
            "id": str(uuid4()),
            "user_id": user_id,
            "title": result.title,
            "source_url": source_url,
            "source_platform": source_platform.value,
            "ingredients_list": result.ingredients_list or None,
            "instructions_list": result.instructions_list or None,
            "original_creator": result.original_creator,
            "thumbnail_url": result.thumbnail_url,
            "created_at": now,
            "updated_at": now,
        }

        try:
            response = self._client.table(self.TABLE_NAME).insert(row).execute()
        except APIError as error:
            if error.code == UNIQUE_VIOLATION:
                logger.info("Duplicate recipe: user=%s url=%s", user_id, source_url)
                raise RecipeConflictError(source_url, self.find_by_source_url(user_id, source_url)) from error
            raise RecipeRepositoryError("create", error.message or str(error)) from error
        except (ConnectionError, TimeoutError) as error:
            logger.error("Network error creating recipe: %s", error)
            raise RecipeRepositoryError("create", str(error)) from error

        if not response.data:
            raise RecipeRepositoryError("create", "insert returned no rows")

        recipe = _row_to_recipe(response.data[0])
        logger.info("Created recipe: id=%s, user=%s, platform=%s", recipe.id, user_id, source_platform.value)
        return recipe

    def get(self, user_id: str, recipe_id: str) -> Optional[Recipe]:
        rows = self._select_one("get", id=recipe_id, user_id=user_id)
        return _row_to_recipe(rows[0]) if rows else None

    def find_by_source_url(self, user_id: str, source_url: str) -> Optional[Recipe]:
        rows = self._select_one("find_by_source_url", source_url=source_url, user_id=user_id)
        return _row_to_recipe(rows[0]) if rows else None

    def list_for_user(self, user_id: str, limit: int = 20, offset: int = 0) -> tuple[list[Recipe], int]:
        try:
            response = (
                self._client.table(self.TABLE_NAME)
                .select(RECIPE_COLUMNS, count="exact")
                .eq("user_id", user_id)
                .order("created_at", desc=True)
                .range(offset, offset + limit - 1)
                .execute()
            )
        except (APIError, ConnectionError, TimeoutError) as error:
            raise RecipeRepositoryError("list_for_user", str(error)) from error

        recipes = [_row_to_recipe(row) for row in response.data or []]
        total = getattr(response, "count", None)
        return recipes, total if total is not None else len(recipes)

    def update(self, user_id: str, recipe_id: str, changes: RecipeChanges) -> Recipe:
        data = changes.as_row()
        data["updated_at"] = _now_utc().isoformat()

        try:
            response = (
                self._client.table(self.TABLE_NAME)
                .update(data)
                .eq("id", recipe_id)
                .eq("user_id", user_id)
                .execute()
            )
        except (APIError, ConnectionError, TimeoutError) as error:
            raise RecipeRepositoryError("update", str(error)) from error

        if not response.data:
            raise RecipeNotFoundError(recipe_id)
        return _row_to_recipe(response.data[0])

    def delete(self, user_id: str, recipe_id: str) -> bool:
        try:
            response = (
                self._client.table(self.TABLE_NAME)
                .delete()
                .eq("id", recipe_id)
                .eq("user_id", user_id)
                .execute()
            )
        except (APIError, ConnectionError, TimeoutError) as error:
            raise RecipeRepositoryError("delete", str(error)) from error

        deleted = bool(response.data)
        if deleted:
            logger.info("Deleted recipe: id=%s, user=%s", recipe_id, user_id)
        return deleted

    def _select_one(self, operation: str, **filters: str) -> list[dict[str, Any]]:
        query = self._client.table(self.TABLE_NAME).select(RECIPE_COLUMNS)
        for column, value in filters.items():
            query = query.eq(column, value)

        try:
            response = query.limit(1).execute()
        except (APIError, ConnectionError, TimeoutError) as error:
            raise RecipeRepositoryError(operation, str(error)) from error
        return response.data or []
