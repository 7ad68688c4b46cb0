from __future__ import annotations

import logging
import re
from typing import Literal, Optional

from .text import normalize_lines, strip_list_prefix
from .types import ParsedRecipe

logger = logging.getLogger(__name__)

MAX_LINE_LENGTH = 240
MAX_TITLE_CANDIDATE_LENGTH = 80

# A heading is the heading word alone, or followed by ":" or "-" and inline content.
INGREDIENT_HEADING = re.compile(
    r"^(?:ingredients?|what you need|for the sauce)(?P<rest>\s*[:-].*|\s*)$", re.IGNORECASE
)
INSTRUCTION_HEADING = re.compile(
    r"^(?:instructions?|directions?|method|steps?)(?P<rest>\s*[:-].*|\s*)$", re.IGNORECASE
)

MEASURE_WORDS = (
    "cup",
    "cups",
    "tsp",
    "teaspoon",
    "tbsp",
    "tablespoon",
    "oz",
    "ounce",
    "g",
    "gram",
    "kg",
    "ml",
    "l",
    "lb",
    "pound",
    "pinch",
    "clove",
    "cloves",
    "slice",
    "slices",
)
MEASURE_PATTERN = re.compile(rf"\b(?:{'|'.join(MEASURE_WORDS)})\b", re.IGNORECASE)
DIGIT_PATTERN = re.compile(r"\d")

SENTENCE_BOUNDARY = re.compile(r"(?<=[.!?])\s+")
CLAUSE_SEPARATOR = re.compile(r"[:;,]\s+")
TRAILING_PUNCTUATION = re.compile(r"[.!?]+$")

Section = Literal["ingredients", "instructions"]

HEADING_PATTERNS: tuple[tuple[Section, re.Pattern[str]], ...] = (
    ("ingredients", INGREDIENT_HEADING),
    ("instructions", INSTRUCTION_HEADING),
)


def is_ingredient_heading(line: str) -> bool:
    return bool(INGREDIENT_HEADING.match(line))


def is_instruction_heading(line: str) -> bool:
    return bool(INSTRUCTION_HEADING.match(line))


def _is_heading(line: str) -> bool:
    return is_ingredient_heading(line) or is_instruction_heading(line)


def _split_heading(line: str) -> tuple[Optional[Section], str]:
    """Return the section a heading line opens and any content written after it."""
    for section, pattern in HEADING_PATTERNS:
        match = pattern.match(line)
        if match:
            return section, match.group("rest").lstrip(" :-").strip()
    return None, line


def looks_like_ingredient(line: str) -> bool:
    return bool(DIGIT_PATTERN.search(line) or MEASURE_PATTERN.search(line))


def _truncate(items: list[str]) -> tuple[str, ...]:
    return tuple(item[:MAX_LINE_LENGTH] for item in items)


def _segment_run_on(line: str) -> list[str]:
    """Break a single-line caption into sentence and ingredient segments.

    Ingredient-looking sentences are split on ``:``, ``;`` and ``,`` and lose
    trailing punctuation; other sentences are kept whole.
    """
    segments: list[str] = []
    for sentence in SENTENCE_BOUNDARY.split(line):
        sentence = sentence.strip()
        if not sentence:
            continue
        if not looks_like_ingredient(sentence):
            segments.append(sentence)
            continue
        for piece in CLAUSE_SEPARATOR.split(sentence):
            piece = TRAILING_PUNCTUATION.sub("", piece).strip()
            if piece:
                segments.append(piece)
    return segments


def _candidate_lines(text: str) -> list[str]:
    lines = normalize_lines(text)
    # A bare heading has nothing to segment.
    if len(lines) == 1 and _split_heading(lines[0])[1]:
        return _segment_run_on(lines[0])
    return lines


def _classify_by_headings(lines: list[str]) -> tuple[list[str], list[str], bool]:
    ingredients: list[str] = []
    instructions: list[str] = []
    section: Optional[Section] = None
    found_heading = False

    for raw_line in lines:
        heading, rest = _split_heading(raw_line)
        if heading is not None:
            section = heading
            found_heading = True
            if not rest:
                continue
            raw_line = rest

        cleaned = strip_list_prefix(raw_line)
        if not cleaned:
            continue

        if section == "ingredients":
            ingredients.append(cleaned)
        elif section == "instructions":
            instructions.append(cleaned)

    return ingredients, instructions, found_heading


def _classify_by_measurements(lines: list[str]) -> tuple[list[str], list[str]]:
    ingredients: list[str] = []
    instructions: list[str] = []

    for raw_line in lines:
        cleaned = strip_list_prefix(raw_line)
        if not cleaned:
            continue
        if looks_like_ingredient(cleaned):
            ingredients.append(cleaned)
        else:
            instructions.append(cleaned)

    return ingredients, instructions


def _find_title_candidate(lines: list[str]) -> Optional[str]:
    for line in lines:
        if _is_heading(line) or looks_like_ingredient(line):
            continue
        if len(line) <= MAX_TITLE_CANDIDATE_LENGTH:
            return line
    return None


def parse_recipe_text(text: str) -> ParsedRecipe:
    """Partition caption text into a title guess, ingredients and instructions.

    Explicit section headings win. Without any heading every line is guessed
    independently: digits or a measurement word make it an ingredient, anything
    else is an instruction.
    """
    lines = _candidate_lines(text)
    ingredients, instructions, found_heading = _classify_by_headings(lines)

    if not found_heading:
        ingredients, instructions = _classify_by_measurements(lines)

    logger.debug(
        "parse.done lines=%d headings=%s ingredients=%d instructions=%d",
        len(lines),
        found_heading,
        len(ingredients),
        len(instructions),
    )

    return ParsedRecipe(
        title=_find_title_candidate(lines),
        ingredients_list=_truncate(ingredients),
        instructions_list=_truncate(instructions),
    )
