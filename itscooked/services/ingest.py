from __future__ import annotations

import logging

import httpx

from .errors import FetchFailedError, NetworkTimeoutError
from .fetcher import fetch_metadata
from .parser import parse_recipe_text
from .types import ExtractionStatus, ImportMetadata, ImportRequest, ImportResult, ParsedRecipe

logger = logging.getLogger(__name__)

FETCH_FAILED_WARNING = "Unable to fetch post metadata."
NO_CAPTION_WARNING = "No caption text was available to parse."
NO_INGREDIENTS_WARNING = "Ingredients were not detected."
NO_INSTRUCTIONS_WARNING = "Instructions were not detected."


def _try_fetch_metadata(
    request: ImportRequest,
    client: httpx.Client | None,
    warnings: list[str],
) -> ImportMetadata | None:
    try:
        return fetch_metadata(request.url, request.platform, client=client)
    except (FetchFailedError, NetworkTimeoutError) as error:
        warnings.append(str(error) or FETCH_FAILED_WARNING)
        return None


def _text_for_parsing(metadata: ImportMetadata | None) -> str:
    if metadata is None:
        return ""
    return metadata.description or metadata.title or ""


def _resolve_title(
    request: ImportRequest,
    parsed: ParsedRecipe | None,
    metadata: ImportMetadata | None,
) -> str | None:
    if request.fallback_title:
        return request.fallback_title
    if parsed and parsed.title:
        return parsed.title
    return metadata.title if metadata else None


def import_recipe_from_url(request: ImportRequest, client: httpx.Client | None = None) -> ImportResult:
    """Fetch a post's public metadata and guess a recipe from its caption.

    Fetch failures and poor extraction never raise; they are reported as
    ordered warnings on the result.
    """
    warnings: list[str] = []
    metadata = _try_fetch_metadata(request, client, warnings)

    text = _text_for_parsing(metadata)
    parsed: ParsedRecipe | None = None
    if text:
        parsed = parse_recipe_text(text)
    else:
        warnings.append(NO_CAPTION_WARNING)

    ingredients = list(parsed.ingredients_list) if parsed else []
    instructions = list(parsed.instructions_list) if parsed else []

    if not ingredients:
        warnings.append(NO_INGREDIENTS_WARNING)
    if not instructions:
        warnings.append(NO_INSTRUCTIONS_WARNING)

    result = ImportResult(
        title=_resolve_title(request, parsed, metadata),
        ingredients_list=ingredients,
        instructions_list=instructions,
        original_creator=metadata.author_name if metadata else None,
        thumbnail_url=metadata.thumbnail_url if metadata else None,
        warnings=warnings,
    )
    logger.info(
        "import.parsed platform=%s url=%s ingredients=%d instructions=%d warnings=%d",
        request.platform.value,
        request.url,
        len(ingredients),
        len(instructions),
        len(warnings),
    )
    return result


def derive_extraction_status(result: ImportResult) -> ExtractionStatus:
    has_extraction = bool(result.ingredients_list or result.instructions_list)
    if not has_extraction:
        return ExtractionStatus.FAILED
    if result.warnings:
        return ExtractionStatus.PARTIAL
    return ExtractionStatus.SUCCESS
