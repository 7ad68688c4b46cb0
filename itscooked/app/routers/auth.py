# itscooked/app/routers/auth.py
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException
from starlette.concurrency import run_in_threadpool

from itscooked.app.deps import CurrentUser, get_current_user, get_recipe_repository
from itscooked.app.domain.errors import RecipeRepositoryError
from itscooked.app.infra.db.base import RecipeRepository
from itscooked.app.schemas.recipes import ProfileResponse

log = logging.getLogger(__name__)
router = APIRouter(prefix="/auth", tags=["auth"])


@router.get("/me", response_model=ProfileResponse)
async def me(
    user: CurrentUser = Depends(get_current_user),
    repo: RecipeRepository = Depends(get_recipe_repository),
) -> ProfileResponse:
    """Authenticated user plus how many recipes they have saved."""
    try:
        _, total = await run_in_threadpool(repo.list_for_user, user.id, 1, 0)
    except RecipeRepositoryError as exc:
        log.error("auth.me_fail owner=%s error=%s", user.id, exc)
        raise HTTPException(status_code=500, detail="Failed to load profile") from exc
    return ProfileResponse(id=user.id, email=user.email, name=user.name, recipeCount=total)
