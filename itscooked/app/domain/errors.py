from __future__ import annotations

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from itscooked.app.domain.models import Recipe


class RecipeError(Exception):
    pass


class RecipeNotFoundError(RecipeError):
    def __init__(self, recipe_id: str):
        super().__init__(f"Recipe not found: {recipe_id}")
        self.recipe_id = recipe_id


class RecipeConflictError(RecipeError):
    def __init__(self, source_url: str, existing: Optional["Recipe"] = None):
        super().__init__(f"Recipe already saved for {source_url}")
        self.source_url = source_url
        self.existing = existing


class RecipeRepositoryError(RecipeError):
    def __init__(self, operation: str, reason: str):
        super().__init__(f"Recipe repository error during {operation}: {reason}")
        self.operation = operation
        self.reason = reason
