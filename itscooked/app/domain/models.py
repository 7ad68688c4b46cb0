# itscooked/app/domain/models.py
"""
Domain models for saved recipes.
These are pure data structures with no infrastructure dependencies.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from itscooked.services.types import SourcePlatform


@dataclass
class Recipe:
    """A recipe saved by a user from a social-media post."""
    id: str
    user_id: str
    source_url: str
    source_platform: SourcePlatform
    title: Optional[str] = None

    # Extracted content (None when nothing was detected)
    ingredients_list: Optional[list[str]] = None
    instructions_list: Optional[list[str]] = None

    # Post metadata
    original_creator: Optional[str] = None
    thumbnail_url: Optional[str] = None

    # Timestamps
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass
class RecipeChanges:
    """Partial update for a recipe; fields left as None are not touched."""
    title: Optional[str] = None
    ingredients_list: Optional[list[str]] = None
    instructions_list: Optional[list[str]] = None
    original_creator: Optional[str] = None
    thumbnail_url: Optional[str] = None
    # Names of fields that must be written even when their value is None
    clear: set[str] = field(default_factory=set)

    def as_row(self) -> dict[str, object]:
        row: dict[str, object] = {}
        for name in (
            "title",
            "ingredients_list",
            "instructions_list",
            "original_creator",
            "thumbnail_url",
        ):
            value = getattr(self, name)
            if value is not None or name in self.clear:
                row[name] = value
        return row
