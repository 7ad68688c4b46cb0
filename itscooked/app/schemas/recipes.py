from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator

from itscooked.services.ids import MAX_TITLE_LENGTH
from itscooked.services.text import normalize_string_list

Platform = Literal["INSTAGRAM", "TIKTOK", "UNKNOWN"]


class RecipeImportRequest(BaseModel):
    url: Optional[str] = None
    title: Optional[str] = None


class RecipeUpdateRequest(BaseModel):
    title: Optional[str] = None
    ingredientsList: Optional[list[str]] = None
    instructionsList: Optional[list[str]] = None

    @field_validator("title")
    @classmethod
    def _trim_title(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        trimmed = value.strip()
        if len(trimmed) > MAX_TITLE_LENGTH:
            raise ValueError(f"Title must be {MAX_TITLE_LENGTH} characters or fewer.")
        return trimmed or None

    @field_validator("ingredientsList", "instructionsList")
    @classmethod
    def _clean_list(cls, value: Optional[list[str]]) -> Optional[list[str]]:
        if value is None:
            return None
        return normalize_string_list(value)


class RecipeResponse(BaseModel):
    id: str
    title: Optional[str] = None
    sourceUrl: str
    sourcePlatform: Platform
    ingredientsList: list[str] = Field(default_factory=list)
    instructionsList: list[str] = Field(default_factory=list)
    originalCreator: Optional[str] = None
    thumbnailUrl: Optional[str] = None
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None


class ExtractionSummary(BaseModel):
    status: Literal["success", "partial", "failed"]
    warnings: list[str] = Field(default_factory=list)


class RecipeImportResponse(BaseModel):
    recipe: RecipeResponse
    extraction: ExtractionSummary


class ExistingRecipe(BaseModel):
    id: str
    title: Optional[str] = None


class RecipeConflictResponse(BaseModel):
    error: str
    existingRecipe: Optional[ExistingRecipe] = None


class RecipeListResponse(BaseModel):
    items: list[RecipeResponse]
    total: int
    limit: int
    offset: int


class GroceryListResponse(BaseModel):
    recipeId: str
    title: Optional[str] = None
    items: list[str] = Field(default_factory=list)
    text: str = ""


class DeleteResponse(BaseModel):
    deleted: bool


class ProfileResponse(BaseModel):
    id: str
    email: Optional[str] = None
    name: Optional[str] = None
    recipeCount: int = 0
