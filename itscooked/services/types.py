from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class SourcePlatform(str, Enum):
    INSTAGRAM = "INSTAGRAM"
    TIKTOK = "TIKTOK"
    UNKNOWN = "UNKNOWN"


class ExtractionStatus(str, Enum):
    SUCCESS = "success"
    PARTIAL = "partial"
    FAILED = "failed"


@dataclass(frozen=True)
class ImportRequest:
    url: str
    platform: SourcePlatform
    fallback_title: Optional[str] = None


@dataclass(frozen=True)
class RecipeCreatePayload:
    url: str
    source_platform: SourcePlatform
    title: Optional[str] = None


@dataclass
class ImportMetadata:
    title: Optional[str] = None
    description: Optional[str] = None
    author_name: Optional[str] = None
    thumbnail_url: Optional[str] = None


@dataclass(frozen=True)
class ParsedRecipe:
    title: Optional[str]
    ingredients_list: tuple[str, ...] = ()
    instructions_list: tuple[str, ...] = ()


@dataclass
class ImportResult:
    title: Optional[str] = None
    ingredients_list: list[str] = field(default_factory=list)
    instructions_list: list[str] = field(default_factory=list)
    original_creator: Optional[str] = None
    thumbnail_url: Optional[str] = None
    warnings: list[str] = field(default_factory=list)
