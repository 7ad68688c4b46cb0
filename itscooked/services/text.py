from __future__ import annotations

import re

BULLET_PATTERN = re.compile("[•‣◦⁃∙●▪]")
LINE_BREAK_PATTERN = re.compile(r"\r\n?")
NEWLINES_PATTERN = re.compile(r"\n+")
WHITESPACE_PATTERN = re.compile(r"\s+")
HASHTAG_PATTERN = re.compile(r"#\w+")
LIST_PREFIX_PATTERN = re.compile(r"^(?:[-*]|\d+\.(?!\d)|\d+\)|step\s+\d+:)\s*", re.IGNORECASE)


def _clean_line(line: str) -> str:
    return WHITESPACE_PATTERN.sub(" ", line).strip()


def normalize_lines(text: str | None) -> list[str]:
    """Split caption text into cleaned, non-empty candidate lines.

    Bullet glyphs start a new "- " line, hashtags are removed and lines left
    empty are dropped. Input order is preserved.
    """
    if not text:
        return []

    normalized = LINE_BREAK_PATTERN.sub("\n", text)
    normalized = BULLET_PATTERN.sub("\n- ", normalized)
    normalized = normalized.replace("\t", " ")

    lines: list[str] = []
    for raw_line in NEWLINES_PATTERN.split(normalized):
        line = _clean_line(raw_line)
        if not line:
            continue
        line = _clean_line(HASHTAG_PATTERN.sub("", line))
        if line:
            lines.append(line)
    return lines


def strip_list_prefix(line: str) -> str:
    return LIST_PREFIX_PATTERN.sub("", line, count=1).strip()


def normalize_string_list(value: object) -> list[str]:
    if not isinstance(value, (list, tuple)):
        return []
    return [item.strip() for item in value if isinstance(item, str) and item.strip()]
