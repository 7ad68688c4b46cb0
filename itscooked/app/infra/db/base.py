# itscooked/app/infra/db/base.py
"""
Abstract base class for the recipe repository.
This interface allows easy swapping between different storage backends.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from itscooked.app.domain.models import Recipe, RecipeChanges
from itscooked.services.types import ImportResult, SourcePlatform


class RecipeRepository(ABC):
    """
    Abstract interface for recipe persistence.

    Implementations:
    - SupabaseRecipeRepository: Postgres table behind Supabase
    """

    @abstractmethod
    def create(
        self,
        user_id: str,
        source_url: str,
        source_platform: SourcePlatform,
        result: ImportResult,
    ) -> Recipe:
        """
        Save a freshly imported recipe.

        Args:
            user_id: Owner of the recipe
            source_url: Canonical post URL (unique per user)
            source_platform: Platform the post belongs to
            result: Output of the import pipeline

        Returns:
            The created Recipe

        Raises:
            RecipeConflictError: The user already saved this URL
        """
        pass

    @abstractmethod
    def get(self, user_id: str, recipe_id: str) -> Optional[Recipe]:
        """Return the user's recipe, or None if it does not exist."""
        pass

    @abstractmethod
    def find_by_source_url(self, user_id: str, source_url: str) -> Optional[Recipe]:
        """Return the user's recipe saved from ``source_url``, if any."""
        pass

    @abstractmethod
    def list_for_user(self, user_id: str, limit: int = 20, offset: int = 0) -> tuple[list[Recipe], int]:
        """
        List a user's recipes, newest first.

        Returns:
            (page of recipes, total count)
        """
        pass

    @abstractmethod
    def update(self, user_id: str, recipe_id: str, changes: RecipeChanges) -> Recipe:
        """
        Apply a partial update.

        Raises:
            RecipeNotFoundError: No such recipe for this user
        """
        pass

    @abstractmethod
    def delete(self, user_id: str, recipe_id: str) -> bool:
        """Delete the recipe. Returns False when nothing was deleted."""
        pass
