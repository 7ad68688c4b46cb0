# itscooked/services/ids.py
from typing import Optional
from urllib.parse import urlsplit, urlunsplit

from .errors import InvalidURLError, TitleTooLongError, UnsupportedPlatformError
from .types import RecipeCreatePayload, SourcePlatform

MAX_TITLE_LENGTH = 140
MAX_URL_LENGTH = 2000
ALLOWED_SCHEMES = ("http", "https")

PLATFORM_DOMAINS: tuple[tuple[str, SourcePlatform], ...] = (
    ("instagram.com", SourcePlatform.INSTAGRAM),
    ("instagr.am", SourcePlatform.INSTAGRAM),
    ("tiktok.com", SourcePlatform.TIKTOK),
)


def _matches_domain(hostname: str, domain: str) -> bool:
    return hostname == domain or hostname.endswith(f".{domain}")


def detect_source_platform(hostname: str) -> SourcePlatform:
    """Classify a hostname using PLATFORM_DOMAINS; the first matching domain wins."""
    host = (hostname or "").lower()
    for domain, platform in PLATFORM_DOMAINS:
        if _matches_domain(host, domain):
            return platform
    return SourcePlatform.UNKNOWN


def normalize_recipe_url(url: str) -> str:
    """Canonical form used for the per-user uniqueness check.

    Query string and fragment are dropped, scheme and host are lower-cased and
    trailing slashes are removed from non-root paths so the result is stable
    when normalized again.
    """
    parts = urlsplit(url)
    path = parts.path.rstrip("/") or "/"
    return urlunsplit((parts.scheme.lower(), parts.netloc.lower(), path, "", ""))


def parse_recipe_create(url: Optional[str], title: Optional[str] = None) -> RecipeCreatePayload:
    raw_url = url.strip() if isinstance(url, str) else ""
    raw_title = title.strip() if isinstance(title, str) else ""

    if not raw_url:
        raise InvalidURLError("Recipe URL is required.")

    if len(raw_url) > MAX_URL_LENGTH:
        raise InvalidURLError("Recipe URL is too long.")

    try:
        parsed = urlsplit(raw_url)
        hostname = parsed.hostname
        # Out-of-range or non-numeric ports only raise when read.
        parsed.port
    except ValueError as error:
        raise InvalidURLError("Recipe URL must be valid.") from error

    if parsed.scheme.lower() not in ALLOWED_SCHEMES:
        raise InvalidURLError("Recipe URL must start with http or https.")

    if not hostname:
        raise InvalidURLError("Recipe URL must be valid.")

    platform = detect_source_platform(hostname)
    if platform is SourcePlatform.UNKNOWN:
        raise UnsupportedPlatformError("Only Instagram or TikTok links are supported right now.")

    if len(raw_title) > MAX_TITLE_LENGTH:
        raise TitleTooLongError(MAX_TITLE_LENGTH)

    return RecipeCreatePayload(
        url=normalize_recipe_url(raw_url),
        source_platform=platform,
        title=raw_title or None,
    )
