"""
Import contact-form submissions from a legacy JSON file.

The file holds a list of {name, email, message, submittedAt} objects. They
are posted in one batch to /api/submissions of a running site, or written
straight into the configured store with --direct.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

import requests

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from welfare_site.config import get_settings
from welfare_site.dependencies import build_store
from welfare_site.errors import ContentValidationError
from welfare_site.submissions import import_submissions

logger = logging.getLogger(__name__)


def post_submissions(base_url: str, api_prefix: str, entries: list, timeout: float) -> str:
    response = requests.post(
        f"{base_url.rstrip('/')}{api_prefix}/submissions",
        json=entries,
        timeout=timeout,
    )
    body = response.json()
    if not response.ok:
        raise RuntimeError(body.get("message") or f"HTTP {response.status_code}")
    return body["message"]


def main() -> int:
    parser = argparse.ArgumentParser(description="Import legacy submissions")
    parser.add_argument("path", type=Path, help="JSON file with a list of submissions")
    parser.add_argument(
        "--base-url",
        default=None,
        help="Site to post to (defaults to PUBLIC_BASE_URL).",
    )
    parser.add_argument(
        "--direct",
        action="store_true",
        help="Write into the configured store instead of calling the API.",
    )
    args = parser.parse_args()
    logging.basicConfig(level=logging.INFO)

    entries = json.loads(args.path.read_text(encoding="utf-8"))
    if not entries:
        logger.info("No submissions in %s", args.path)
        return 0

    settings = get_settings()
    if args.direct:
        store = build_store(settings)
        try:
            count = import_submissions(store, entries)
        except ContentValidationError as e:
            logger.error("Import rejected: %s", e)
            return 1
        finally:
            store.close()
        logger.info("Imported %d submission(s)", count)
        return 0

    try:
        message = post_submissions(
            args.base_url or settings.public_base_url,
            settings.api_prefix,
            entries,
            settings.request_timeout_seconds,
        )
    except (requests.RequestException, RuntimeError) as e:
        logger.error("Import failed: %s", e)
        return 1
    logger.info(message)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
