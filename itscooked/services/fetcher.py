from __future__ import annotations

import logging
import re
from contextlib import contextmanager
from typing import Callable, Iterator, Optional

import httpx

from .errors import FetchFailedError, NetworkTimeoutError
from .types import ImportMetadata, SourcePlatform

logger = logging.getLogger(__name__)

TIKTOK_OEMBED_URL = "https://www.tiktok.com/oembed"
MAX_TEXT_LENGTH = 8000
BROWSER_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)
NO_CACHE_HEADERS = {"Cache-Control": "no-cache", "Pragma": "no-cache"}

HTML_ENTITIES = (
    ("&amp;", "&"),
    ("&quot;", '"'),
    ("&#39;", "'"),
    ("&lt;", "<"),
    ("&gt;", ">"),
    ("&nbsp;", " "),
)
TITLE_TAG_PATTERN = re.compile(r"<title[^>]*>([^<]+)</title>", re.IGNORECASE)
INSTAGRAM_AUTHOR_PATTERN = re.compile(r"^(.+?) on Instagram:", re.IGNORECASE)
INSTAGRAM_SUFFIX_PATTERN = re.compile(r"\s*Â?·\s*Instagram$", re.IGNORECASE)
LEADING_QUOTES_PATTERN = re.compile("^[\"“”]+")
TRAILING_QUOTES_PATTERN = re.compile("[\"“”]+$")

_CONTENT_ATTR = r"""content\s*=\s*(?:"(?P<dq>[^"]*)"|'(?P<sq>[^']*)')"""


def _clean_string(value: object) -> str | None:
    if not isinstance(value, str):
        return None
    stripped = value.strip()
    return stripped or None


def decode_html_entities(value: str) -> str:
    for entity, char in HTML_ENTITIES:
        value = value.replace(entity, char)
    return value


def _meta_patterns(key: str) -> tuple[re.Pattern[str], re.Pattern[str]]:
    name_attr = rf"""(?:property|name)\s*=\s*["']{re.escape(key)}["']"""
    return (
        re.compile(rf"<meta\b[^>]*?\b{name_attr}[^>]*?\b{_CONTENT_ATTR}[^>]*>", re.IGNORECASE),
        re.compile(rf"<meta\b[^>]*?\b{_CONTENT_ATTR}[^>]*?\b{name_attr}[^>]*>", re.IGNORECASE),
    )


def extract_meta_property(html: str, key: str) -> str | None:
    """Return the decoded ``content`` of the first ``<meta>`` tag named ``key``.

    Matches ``property=`` as well as ``name=``, in either order relative to
    ``content=``.
    """
    for pattern in _meta_patterns(key):
        match = pattern.search(html)
        if match:
            raw = match.group("dq") if match.group("dq") is not None else match.group("sq")
            return _clean_string(decode_html_entities(raw))
    return None


def read_title_tag(html: str) -> str | None:
    match = TITLE_TAG_PATTERN.search(html)
    if not match:
        return None
    return _clean_string(decode_html_entities(match.group(1)))


def normalize_instagram_description(description: str) -> tuple[Optional[str], Optional[str]]:
    """Split ``<author> on Instagram: "<caption>"`` into (caption, author)."""
    author_match = INSTAGRAM_AUTHOR_PATTERN.match(description)
    author_name = _clean_string(author_match.group(1)) if author_match else None
    caption = description[author_match.end():] if author_match else description

    caption = INSTAGRAM_SUFFIX_PATTERN.sub("", caption.strip())
    caption = LEADING_QUOTES_PATTERN.sub("", caption)
    caption = TRAILING_QUOTES_PATTERN.sub("", caption)
    return _clean_string(caption), author_name


@contextmanager
def _client_scope(client: httpx.Client | None) -> Iterator[httpx.Client]:
    if client is not None:
        yield client
        return
    with httpx.Client(follow_redirects=True, timeout=None) as owned:
        yield owned


def _timeout_seconds(client: httpx.Client) -> float | None:
    return client.timeout.read


def _read_capped_text(response: httpx.Response, limit: int = MAX_TEXT_LENGTH) -> str:
    parts: list[str] = []
    remaining = limit
    for chunk in response.iter_text():
        parts.append(chunk[:remaining])
        remaining -= len(parts[-1])
        if remaining <= 0:
            break
    return "".join(parts)


def _fetch_html(url: str, client: httpx.Client) -> str:
    headers = {"User-Agent": BROWSER_USER_AGENT, **NO_CACHE_HEADERS}
    try:
        with client.stream("GET", url, headers=headers, follow_redirects=True) as response:
            if not response.is_success:
                raise FetchFailedError(
                    f"Failed to fetch page ({response.status_code}).",
                    status_code=response.status_code,
                )
            return _read_capped_text(response)
    except httpx.TimeoutException as error:
        raise NetworkTimeoutError(url, _timeout_seconds(client)) from error
    except httpx.RequestError as error:
        raise FetchFailedError(f"Network error fetching page: {error}") from error


def fetch_instagram(url: str, client: httpx.Client) -> ImportMetadata:
    # Instagram oEmbed needs an app token; only the public HTML metadata is read.
    html = _fetch_html(url, client)

    og_description = extract_meta_property(html, "og:description")
    description = og_description or extract_meta_property(html, "description")
    caption, author_name = normalize_instagram_description(description) if description else (None, None)

    return ImportMetadata(
        title=extract_meta_property(html, "og:title") or read_title_tag(html),
        description=caption or description,
        author_name=author_name,
        thumbnail_url=extract_meta_property(html, "og:image"),
    )


def fetch_tiktok(url: str, client: httpx.Client) -> ImportMetadata:
    headers = dict(NO_CACHE_HEADERS)
    try:
        response = client.get(TIKTOK_OEMBED_URL, params={"url": url}, headers=headers, follow_redirects=True)
    except httpx.TimeoutException as error:
        raise NetworkTimeoutError(url, _timeout_seconds(client)) from error
    except httpx.RequestError as error:
        raise FetchFailedError(f"Network error calling TikTok oEmbed: {error}") from error

    if not response.is_success:
        raise FetchFailedError(
            f"TikTok oEmbed failed ({response.status_code}).",
            status_code=response.status_code,
        )

    try:
        data = response.json()
    except ValueError as error:
        raise FetchFailedError("TikTok oEmbed returned invalid JSON.") from error

    if not isinstance(data, dict):
        raise FetchFailedError("TikTok oEmbed returned an unexpected payload.")

    title = _clean_string(data.get("title"))
    return ImportMetadata(
        title=title,
        description=title,
        author_name=_clean_string(data.get("author_name")),
        thumbnail_url=_clean_string(data.get("thumbnail_url")),
    )


PLATFORM_FETCHERS: dict[SourcePlatform, Callable[[str, httpx.Client], ImportMetadata]] = {
    SourcePlatform.TIKTOK: fetch_tiktok,
    SourcePlatform.INSTAGRAM: fetch_instagram,
}


def fetch_metadata(
    url: str,
    platform: SourcePlatform,
    client: httpx.Client | None = None,
) -> ImportMetadata | None:
    fetcher = PLATFORM_FETCHERS.get(platform)
    if fetcher is None:
        return None

    with _client_scope(client) as http:
        try:
            return fetcher(url, http)
        except (FetchFailedError, NetworkTimeoutError) as error:
            logger.warning("fetch.failed platform=%s url=%s error=%s", platform.value, url, error)
            raise
