"""
Write default content documents into the configured store.

Only domains without a stored document are seeded unless --overwrite is
given.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from welfare_site.config import get_settings
from welfare_site.content import seed_defaults
from welfare_site.dependencies import build_store

logger = logging.getLogger(__name__)


def main() -> int:
    parser = argparse.ArgumentParser(description="Seed default site content")
    parser.add_argument(
        "--overwrite",
        action="store_true",
        help="Replace existing documents with the defaults.",
    )
    args = parser.parse_args()
    logging.basicConfig(level=logging.INFO)

    settings = get_settings()
    store = build_store(settings)
    try:
        written = seed_defaults(store, overwrite=args.overwrite)
    finally:
        store.close()
    if written:
        logger.info("Seeded: %s", ", ".join(written))
    else:
        logger.info("Nothing to seed; every domain already has a document.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
