"""
Smoke-check the public pages against a running site.

Builds every page view model through the content API and reports pages that
had to fall back to local content, and members/albums that do not resolve.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from welfare_site.config import get_settings
from welfare_site.pages import PageBuilder


def main() -> int:
    parser = argparse.ArgumentParser(description="Check the public site pages")
    parser.add_argument(
        "--base-url",
        default=None,
        help="Site to check (defaults to PUBLIC_BASE_URL).",
    )
    args = parser.parse_args()

    settings = get_settings()
    if args.base_url:
        settings = settings.model_copy(update={"public_base_url": args.base_url})
    builder = PageBuilder.from_settings(settings)

    problems = []
    pages = {
        "home": builder.build_home_page(),
        "about": builder.build_about_page(),
        "contact": builder.build_contact_page(),
        "members": builder.build_members_page(),
        "gallery": builder.build_gallery_page(),
    }
    for name, page in pages.items():
        if not page["ok"]:
            problems.append(f"{name}: served fallback content")

    home = pages["home"]
    missing = set(home.get("featuredMemberIds") or []) - {
        member.get("id") for member in home["featuredMembers"]
    }
    for member_id in sorted(missing):
        problems.append(f"home: featured member {member_id} not found")

    for member in pages["members"]["members"]:
        if builder.build_member_page(member["slug"]) is None:
            problems.append(f"members: /members/{member['slug']} does not resolve")

    for album in pages["gallery"]["albums"]:
        if builder.build_album_page(album["id"]) is None:
            problems.append(f"gallery: album {album['id']} does not resolve")

    if problems:
        print("Site check failed:")
        for problem in problems:
            print(f"  - {problem}")
        return 1
    print("All pages OK")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
