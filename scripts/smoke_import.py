import argparse
import logging
import pathlib
import sys

import httpx

ROOT = pathlib.Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from itscooked.services.errors import InvalidRequestError
from itscooked.services.ids import parse_recipe_create
from itscooked.services.ingest import derive_extraction_status, import_recipe_from_url
from itscooked.services.types import ImportRequest


def run_import(url: str, client: httpx.Client) -> None:
    print("\n===", url)
    try:
        payload = parse_recipe_create(url)
    except InvalidRequestError as exc:
        print("rejected:", exc)
        return

    request = ImportRequest(url=payload.url, platform=payload.source_platform)
    result = import_recipe_from_url(request, client=client)
    print("normalized:", payload.url)
    print("platform:", payload.source_platform.value)
    print("status:", derive_extraction_status(result).value)
    print("title:", result.title)
    print("creator:", result.original_creator)
    print("ingredients:", result.ingredients_list)
    print("instructions:", result.instructions_list)
    print("warnings:", result.warnings)


def main() -> None:
    parser = argparse.ArgumentParser(description="Quick import smoke test")
    parser.add_argument("url", nargs="*", default=[
        "https://www.instagram.com/p/C4stLiBL4SS/",
        "https://www.tiktok.com/@scout2015/video/6718335390845095173",
    ])
    parser.add_argument("--timeout", type=float, default=15.0)
    parser.add_argument("--verbose", action="store_true")
    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)
    with httpx.Client(timeout=args.timeout, follow_redirects=True) as client:
        for url in args.url:
            run_import(url, client)


if __name__ == "__main__":
    main()
