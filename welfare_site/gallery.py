"""
Gallery albums and images.

Albums and images are stored as two collections keyed by id; an image
points at its album through `albumId`. Deleting an album removes its images
in the same atomic commit.
"""

from __future__ import annotations

import logging
import uuid
from typing import Any, Optional

from welfare_site.constants import (
    GALLERY_ALBUMS_COLLECTION,
    GALLERY_IMAGES_COLLECTION,
)
from welfare_site.errors import (
    ContentConflictError,
    ContentNotFoundError,
    ContentValidationError,
)
from welfare_site.store import DocumentStore, WriteMode, WriteOp
from welfare_site.utils import today_iso, utc_now_iso

logger = logging.getLogger(__name__)

ALBUM_FIELDS = ("id", "albumName", "description", "date", "createdAt", "updatedAt")
IMAGE_FIELDS = ("id", "url", "albumId", "caption", "date", "createdAt", "updatedAt")


def _pick(data: dict, fields: tuple[str, ...]) -> dict:
    return {key: data[key] for key in fields if key in data}


def _album_id() -> str:
    return f"album-{uuid.uuid4().hex[:8]}"


def get_gallery(store: DocumentStore) -> dict:
    albums = store.list(GALLERY_ALBUMS_COLLECTION)
    images = store.list(GALLERY_IMAGES_COLLECTION)
    return {
        "albums": _sorted_by_created([doc.as_dict() for doc in albums]),
        "images": _sorted_by_created([doc.as_dict() for doc in images]),
    }


def _sorted_by_created(items: list[dict]) -> list[dict]:
    # Entries imported without createdAt keep their store order at the front.
    return sorted(items, key=lambda item: str(item.get("createdAt") or ""))


def get_album(store: DocumentStore, album_id: str) -> dict:
    album = store.get(GALLERY_ALBUMS_COLLECTION, album_id)
    if album is None:
        raise ContentNotFoundError("Album not found")
    images = store.list(GALLERY_IMAGES_COLLECTION, where=("albumId", album_id))
    return {
        "album": {"id": album_id, **album},
        "images": _sorted_by_created([doc.as_dict() for doc in images]),
    }


def _require_album(store: DocumentStore, album_id: str) -> None:
    if store.get(GALLERY_ALBUMS_COLLECTION, album_id) is None:
        raise ContentNotFoundError("Album not found")


def create_album(store: DocumentStore, payload: dict) -> dict:
    name = payload.get("albumName")
    if not isinstance(name, str) or not name.strip():
        raise ContentValidationError("Album name is required")
    album_id = payload.get("id") or _album_id()
    if store.get(GALLERY_ALBUMS_COLLECTION, album_id) is not None:
        raise ContentConflictError(f"Album {album_id} already exists")
    album = {
        "id": album_id,
        "albumName": name.strip(),
        "description": payload.get("description") or "",
        "date": payload.get("date") or today_iso(),
        "createdAt": payload.get("createdAt") or utc_now_iso(),
    }
    store.set(GALLERY_ALBUMS_COLLECTION, album["id"], album, mode=WriteMode.REPLACE)
    logger.info("Created album %s", album["id"])
    return album


def delete_album(store: DocumentStore, album_id: Optional[str]) -> int:
    """Delete an album and all of its images; returns the image count removed."""
    if not album_id:
        raise ContentValidationError("Album ID is required")
    _require_album(store, album_id)
    images = store.list(GALLERY_IMAGES_COLLECTION, where=("albumId", album_id))
    ops = [WriteOp.remove(GALLERY_IMAGES_COLLECTION, image.id) for image in images]
    ops.append(WriteOp.remove(GALLERY_ALBUMS_COLLECTION, album_id))
    store.commit(ops)
    logger.info("Deleted album %s with %d image(s)", album_id, len(images))
    return len(images)


def add_image(store: DocumentStore, payload: dict) -> dict:
    if not payload.get("url") or not payload.get("albumId"):
        raise ContentValidationError("Image URL and albumId are required")
    _require_album(store, payload["albumId"])
    image = _pick(payload, IMAGE_FIELDS)
    image.setdefault("caption", "")
    if not image.get("id"):
        image["id"] = str(uuid.uuid4())
    elif store.get(GALLERY_IMAGES_COLLECTION, image["id"]) is not None:
        raise ContentConflictError(f"Image {image['id']} already exists")
    if not image.get("createdAt"):
        image["createdAt"] = utc_now_iso()
    store.set(GALLERY_IMAGES_COLLECTION, image["id"], image, mode=WriteMode.REPLACE)
    return image


def update_image(store: DocumentStore, payload: dict) -> dict:
    if not payload.get("id") or not payload.get("url") or not payload.get("albumId"):
        raise ContentValidationError("Image ID, URL, and albumId are required")
    existing = store.get(GALLERY_IMAGES_COLLECTION, payload["id"])
    if existing is None:
        raise ContentNotFoundError("Image not found")
    _require_album(store, payload["albumId"])
    image = {**existing, **_pick(payload, IMAGE_FIELDS), "updatedAt": utc_now_iso()}
    store.set(GALLERY_IMAGES_COLLECTION, image["id"], image, mode=WriteMode.REPLACE)
    return image


def delete_image(store: DocumentStore, image_id: Optional[str]) -> None:
    if not image_id:
        raise ContentValidationError("Image ID is required")
    if not store.delete(GALLERY_IMAGES_COLLECTION, image_id):
        raise ContentNotFoundError("Image not found")


def save_gallery(store: DocumentStore, albums: Any, images: Any) -> None:
    """
    Merge-write a batch of albums and images.

    Listed entries are upserted by id and merged over what is stored;
    everything else is left alone. Every image must reference an album that
    already exists or is part of the same batch.
    """
    if not isinstance(albums, list) or not isinstance(images, list):
        raise ContentValidationError("Invalid data format")
    if not all(isinstance(item, dict) and item.get("id") for item in albums + images):
        raise ContentValidationError("Every album and image needs an id")

    batch_album_ids = {album["id"] for album in albums}
    for image in images:
        album_id = image.get("albumId")
        if not album_id:
            raise ContentValidationError("Image albumId is required")
        if album_id not in batch_album_ids:
            _require_album(store, album_id)

    ops = [
        WriteOp.set(GALLERY_ALBUMS_COLLECTION, album["id"], _pick(album, ALBUM_FIELDS))
        for album in albums
    ]
    ops.extend(
        WriteOp.set(GALLERY_IMAGES_COLLECTION, image["id"], _pick(image, IMAGE_FIELDS))
        for image in images
    )
    store.commit(ops)
    logger.info("Saved %d album(s) and %d image(s)", len(albums), len(images))
