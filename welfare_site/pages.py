"""
View models for the public pages, built from the content API.
"""

from __future__ import annotations

import fnmatch
import urllib.parse
from typing import Iterable, Optional

from welfare_site.config import Settings
from welfare_site.site_client import ContentClient
from welfare_site.utils import slugify_name


def is_allowed_image_url(url: str, patterns: Iterable[str]) -> bool:
    """
    Local paths are always allowed. Remote images must be https and match
    one of the `https://host/path-glob` patterns.
    """
    if not url:
        return False
    parsed = urllib.parse.urlparse(url)
    if not parsed.scheme and not parsed.netloc:
        return url.startswith("/")
    if parsed.scheme != "https":
        return False
    for pattern in patterns:
        allowed = urllib.parse.urlparse(pattern)
        if allowed.netloc.lower() != parsed.netloc.lower():
            continue
        path_glob = allowed.path or "/**"
        if path_glob.endswith("/**"):
            if parsed.path.startswith(path_glob[:-2]):
                return True
        elif fnmatch.fnmatchcase(parsed.path, path_glob):
            return True
    return False


class PageBuilder:
    """Assembles page data, replacing disallowed images with a placeholder."""

    def __init__(
        self,
        client: ContentClient,
        allowed_image_patterns: Iterable[str] = (),
        placeholder_image: str = "/images/placeholder.jpg",
    ):
        self.client = client
        self.allowed_image_patterns = list(allowed_image_patterns)
        self.placeholder_image = placeholder_image

    @classmethod
    def from_settings(cls, settings: Settings) -> "PageBuilder":
        client = ContentClient(
            base_url=settings.public_base_url,
            api_prefix=settings.api_prefix,
            timeout=settings.request_timeout_seconds,
        )
        return cls(
            client,
            allowed_image_patterns=settings.allowed_image_patterns,
            placeholder_image=settings.placeholder_image,
        )

    def _image(self, url: Optional[str]) -> str:
        if url and is_allowed_image_url(url, self.allowed_image_patterns):
            return url
        return self.placeholder_image

    def _member_view(self, member: dict) -> dict:
        return {
            **member,
            "slug": slugify_name(member.get("name", "")),
            "imageUrl": self._image(member.get("imageUrl")),
        }

    def build_home_page(self) -> dict:
        home = self.client.get_home()
        members = self.client.get_members()
        data = dict(home.data)
        data["hero"] = {
            **data.get("hero", {}),
            "backgroundImage": self._image(data.get("hero", {}).get("backgroundImage")),
        }
        by_id = {
            member.get("id"): member
            for member in members.data.get("members") or []
            if isinstance(member, dict)
        }
        data["featuredMembers"] = [
            self._member_view(by_id[member_id])
            for member_id in data.get("featuredMemberIds") or []
            if member_id in by_id
        ]
        data["ok"] = home.ok and members.ok
        return data

    def build_about_page(self) -> dict:
        about = self.client.get_about()
        return {**about.data, "ok": about.ok}

    def build_contact_page(self) -> dict:
        contact = self.client.get_contact()
        return {**contact.data, "ok": contact.ok}

    def build_members_page(self) -> dict:
        members = self.client.get_members()
        data = dict(members.data)
        data["members"] = [
            self._member_view(member)
            for member in data.get("members") or []
            if isinstance(member, dict)
        ]
        data["ok"] = members.ok
        return data

    def build_member_page(self, slug: str) -> Optional[dict]:
        for member in self.build_members_page()["members"]:
            if member["slug"] == slug.lower():
                return member
        return None

    def build_gallery_page(self) -> dict:
        result = self.client.get_gallery()
        images = result.data.get("images") or []
        albums = []
        for album in result.data.get("albums") or []:
            album_images = [img for img in images if img.get("albumId") == album.get("id")]
            albums.append(
                {
                    **album,
                    "imageCount": len(album_images),
                    "coverImage": (
                        self._image(album_images[0].get("url")) if album_images else None
                    ),
                }
            )
        return {"albums": albums, "ok": result.ok}

    def build_album_page(self, album_id: str) -> Optional[dict]:
        result = self.client.get_gallery()
        album = next(
            (a for a in result.data.get("albums") or [] if a.get("id") == album_id),
            None,
        )
        if album is None:
            return None
        images = [
            {**img, "url": self._image(img.get("url"))}
            for img in result.data.get("images") or []
            if img.get("albumId") == album_id
        ]
        return {"album": album, "images": images}
