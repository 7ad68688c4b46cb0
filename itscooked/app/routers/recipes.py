# itscooked/app/routers/recipes.py
from __future__ import annotations

import logging
import time
from typing import Optional

import httpx
from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from itscooked.app.deps import CurrentUser, get_current_user, get_http_client, get_recipe_repository
from itscooked.app.domain.errors import RecipeConflictError, RecipeNotFoundError, RecipeRepositoryError
from itscooked.app.domain.models import Recipe, RecipeChanges
from itscooked.app.infra.db.base import RecipeRepository
from itscooked.app.schemas.recipes import (
    DeleteResponse,
    ExistingRecipe,
    ExtractionSummary,
    GroceryListResponse,
    RecipeConflictResponse,
    RecipeImportRequest,
    RecipeImportResponse,
    RecipeListResponse,
    RecipeResponse,
    RecipeUpdateRequest,
)
from itscooked.services.errors import InvalidRequestError
from itscooked.services.grocery import build_grocery_list
from itscooked.services.ids import parse_recipe_create
from itscooked.services.ingest import derive_extraction_status, import_recipe_from_url
from itscooked.services.types import ExtractionStatus, ImportRequest, ImportResult

log = logging.getLogger("import")
router = APIRouter(prefix="/recipes", tags=["recipes"])

DUPLICATE_MESSAGE = "This recipe link is already saved."
NOT_FOUND_MESSAGE = "Recipe not found"


def _recipe_to_response(recipe: Recipe) -> RecipeResponse:
    return RecipeResponse(
        id=recipe.id,
        title=recipe.title,
        sourceUrl=recipe.source_url,
        sourcePlatform=recipe.source_platform.value,
        ingredientsList=recipe.ingredients_list or [],
        instructionsList=recipe.instructions_list or [],
        originalCreator=recipe.original_creator,
        thumbnailUrl=recipe.thumbnail_url,
        createdAt=recipe.created_at,
        updatedAt=recipe.updated_at,
    )


def _extraction_summary(result: ImportResult) -> ExtractionSummary:
    return ExtractionSummary(
        status=derive_extraction_status(result).value,
        warnings=list(result.warnings),
    )


def _conflict_response(existing: Optional[Recipe]) -> JSONResponse:
    body = RecipeConflictResponse(
        error=DUPLICATE_MESSAGE,
        existingRecipe=ExistingRecipe(id=existing.id, title=existing.title) if existing else None,
    )
    return JSONResponse(status_code=status.HTTP_409_CONFLICT, content=body.model_dump())


async def _get_recipe_or_404(repo: RecipeRepository, user: CurrentUser, recipe_id: str) -> Recipe:
    try:
        recipe = await run_in_threadpool(repo.get, user.id, recipe_id)
    except RecipeRepositoryError as exc:
        log.error("recipes.get_fail recipe=%s error=%s", recipe_id, exc)
        raise HTTPException(status_code=500, detail="Failed to load recipe") from exc
    if recipe is None:
        raise HTTPException(status_code=404, detail=NOT_FOUND_MESSAGE)
    return recipe


@router.post(
    "/import",
    response_model=RecipeImportResponse,
    status_code=status.HTTP_201_CREATED,
    responses={409: {"model": RecipeConflictResponse}},
)
async def import_recipe(
    body: RecipeImportRequest,
    user: CurrentUser = Depends(get_current_user),
    repo: RecipeRepository = Depends(get_recipe_repository),
    http: httpx.Client = Depends(get_http_client),
):
    try:
        payload = parse_recipe_create(body.url, body.title)
    except InvalidRequestError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    t0 = time.time()
    log.info("import.start url=%s platform=%s owner=%s", payload.url, payload.source_platform.value, user.id)
    try:
        existing = await run_in_threadpool(repo.find_by_source_url, user.id, payload.url)
        if existing is not None:
            log.info("import.conflict url=%s recipe=%s", payload.url, existing.id)
            return _conflict_response(existing)

        request = ImportRequest(
            url=payload.url,
            platform=payload.source_platform,
            fallback_title=payload.title,
        )
        result = await run_in_threadpool(import_recipe_from_url, request, http)
        recipe = await run_in_threadpool(
            repo.create,
            user.id,
            payload.url,
            payload.source_platform,
            result,
        )
    except RecipeConflictError as exc:
        log.info("import.conflict url=%s", payload.url)
        return _conflict_response(exc.existing)
    except Exception:
        dt = time.time() - t0
        log.exception("import.fail url=%s dt=%.2fs", payload.url, dt)
        raise HTTPException(status_code=500, detail="Failed to import recipe")

    extraction = _extraction_summary(result)
    dt = time.time() - t0
    log.info(
        "import.ok url=%s recipe=%s status=%s dt=%.2fs",
        payload.url,
        recipe.id,
        extraction.status,
        dt,
    )
    return RecipeImportResponse(recipe=_recipe_to_response(recipe), extraction=extraction)


@router.get("/", response_model=RecipeListResponse)
async def list_recipes(
    user: CurrentUser = Depends(get_current_user),
    repo: RecipeRepository = Depends(get_recipe_repository),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
) -> RecipeListResponse:
    try:
        recipes, total = await run_in_threadpool(repo.list_for_user, user.id, limit, offset)
    except RecipeRepositoryError as exc:
        log.error("recipes.list_fail owner=%s error=%s", user.id, exc)
        raise HTTPException(status_code=500, detail="Failed to list recipes") from exc

    return RecipeListResponse(
        items=[_recipe_to_response(recipe) for recipe in recipes],
        total=total,
        limit=limit,
        offset=offset,
    )


@router.get("/{recipe_id}", response_model=RecipeResponse)
async def get_recipe(
    recipe_id: str,
    user: CurrentUser = Depends(get_current_user),
    repo: RecipeRepository = Depends(get_recipe_repository),
) -> RecipeResponse:
    recipe = await _get_recipe_or_404(repo, user, recipe_id)
    return _recipe_to_response(recipe)


@router.put("/{recipe_id}", response_model=RecipeResponse)
async def update_recipe(
    recipe_id: str,
    body: RecipeUpdateRequest,
    user: CurrentUser = Depends(get_current_user),
    repo: RecipeRepository = Depends(get_recipe_repository),
) -> RecipeResponse:
    changes = RecipeChanges()
    sent = body.model_fields_set
    if "title" in sent:
        changes.title = body.title
        changes.clear.add("title")
    if "ingredientsList" in sent:
        changes.ingredients_list = body.ingredientsList or None
        changes.clear.add("ingredients_list")
    if "instructionsList" in sent:
        changes.instructions_list = body.instructionsList or None
        changes.clear.add("instructions_list")

    try:
        updated = await run_in_threadpool(repo.update, user.id, recipe_id, changes)
    except RecipeNotFoundError as exc:
        raise HTTPException(status_code=404, detail=NOT_FOUND_MESSAGE) from exc
    except RecipeRepositoryError as exc:
        log.error("recipes.update_fail recipe=%s error=%s", recipe_id, exc)
        raise HTTPException(status_code=500, detail="Failed to update recipe") from exc
    return _recipe_to_response(updated)


@router.delete("/{recipe_id}", response_model=DeleteResponse)
async def delete_recipe(
    recipe_id: str,
    user: CurrentUser = Depends(get_current_user),
    repo: RecipeRepository = Depends(get_recipe_repository),
) -> DeleteResponse:
    try:
        deleted = await run_in_threadpool(repo.delete, user.id, recipe_id)
    except RecipeRepositoryError as exc:
        log.error("recipes.delete_fail recipe=%s error=%s", recipe_id, exc)
        raise HTTPException(status_code=500, detail="Failed to delete recipe") from exc
    if not deleted:
        raise HTTPException(status_code=404, detail=NOT_FOUND_MESSAGE)
    return DeleteResponse(deleted=True)


@router.post("/{recipe_id}/reimport", response_model=RecipeImportResponse)
async def reimport_recipe(
    recipe_id: str,
    user: CurrentUser = Depends(get_current_user),
    repo: RecipeRepository = Depends(get_recipe_repository),
    http: httpx.Client = Depends(get_http_client),
) -> RecipeImportResponse:
    recipe = await _get_recipe_or_404(repo, user, recipe_id)
    request = ImportRequest(url=recipe.source_url, platform=recipe.source_platform)

    t0 = time.time()
    log.info("reimport.start recipe=%s url=%s", recipe.id, recipe.source_url)
    result = await run_in_threadpool(import_recipe_from_url, request, http)
    extraction = _extraction_summary(result)

    changes = RecipeChanges(
        original_creator=result.original_creator,
        thumbnail_url=result.thumbnail_url,
    )
    if not recipe.title:
        changes.title = result.title
    # A failed re-run keeps whatever was extracted before.
    if extraction.status != ExtractionStatus.FAILED.value:
        changes.ingredients_list = result.ingredients_list or None
        changes.instructions_list = result.instructions_list or None
        changes.clear.update({"ingredients_list", "instructions_list"})

    try:
        updated = await run_in_threadpool(repo.update, user.id, recipe.id, changes)
    except RecipeNotFoundError as exc:
        raise HTTPException(status_code=404, detail=NOT_FOUND_MESSAGE) from exc
    except RecipeRepositoryError as exc:
        log.error("reimport.fail recipe=%s error=%s", recipe.id, exc)
        raise HTTPException(status_code=500, detail="Failed to update recipe") from exc

    log.info("reimport.ok recipe=%s status=%s dt=%.2fs", recipe.id, extraction.status, time.time() - t0)
    return RecipeImportResponse(recipe=_recipe_to_response(updated), extraction=extraction)


@router.get("/{recipe_id}/grocery", response_model=GroceryListResponse)
async def recipe_grocery_list(
    recipe_id: str,
    user: CurrentUser = Depends(get_current_user),
    repo: RecipeRepository = Depends(get_recipe_repository),
) -> GroceryListResponse:
    recipe = await _get_recipe_or_404(repo, user, recipe_id)
    grocery = build_grocery_list(recipe.title, recipe.ingredients_list)
    return GroceryListResponse(
        recipeId=recipe.id,
        title=recipe.title,
        items=grocery.items,
        text=grocery.text,
    )
