"""
HTTP routes for the site content API.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException
from fastapi.responses import JSONResponse

from welfare_site import content, gallery, submissions
from welfare_site.content import ABOUT, CONTACT, HOME, MEMBERS, ContentDomain
from welfare_site.dependencies import get_store
from welfare_site.errors import FeatureDisabledError
from welfare_site.schemas import (
    DeleteAlbumRequest,
    DeleteImageRequest,
    DeleteSubmissionRequest,
    GallerySaveResponse,
    HomeUpdate,
    MembersDocument,
    MessageResponse,
    SubmitResponse,
    SuccessResponse,
)
from welfare_site.store import DocumentStore, StoreError
from welfare_site.utils import slugify_name, utc_now_iso

logger = logging.getLogger(__name__)

router = APIRouter()


def _read_with_fallback(store: DocumentStore, domain: ContentDomain):
    """
    Read a content document; on store failure answer 500 with the default
    document as a best-effort body. Callers treat any non-2xx as failure.
    """
    try:
        return content.read_content(store, domain)
    except StoreError:
        logger.exception("Store GET error (%s)", domain.name)
        return JSONResponse(domain.default_document(), status_code=500)


@router.get("/home")
def get_home(store: DocumentStore = Depends(get_store)):
    return _read_with_fallback(store, HOME)


@router.post("/home", response_model=MessageResponse)
def save_home(payload: HomeUpdate, store: DocumentStore = Depends(get_store)):
    data = payload.model_dump(exclude_unset=True)
    if data.get("featuredMemberIds"):
        content.validate_featured_members(store, data["featuredMemberIds"])
    content.write_content(store, HOME, data)
    return MessageResponse(message="Homepage data updated successfully!")


@router.get("/about")
def get_about(store: DocumentStore = Depends(get_store)):
    return _read_with_fallback(store, ABOUT)


@router.post("/about", response_model=SuccessResponse)
def save_about(payload: dict = Body(...), store: DocumentStore = Depends(get_store)):
    content.write_content(store, ABOUT, payload)
    return SuccessResponse(message="About data saved successfully!")


@router.get("/contact")
def get_contact(store: DocumentStore = Depends(get_store)):
    return _read_with_fallback(store, CONTACT)


@router.post("/contact", response_model=SuccessResponse)
def save_contact(payload: dict = Body(...), store: DocumentStore = Depends(get_store)):
    content.write_content(store, CONTACT, payload)
    return SuccessResponse(message="Contact data saved successfully!")


@router.post("/contact/submit", response_model=SubmitResponse)
def submit_contact_form(
    payload: dict = Body(...), store: DocumentStore = Depends(get_store)
):
    if not content.read_content(store, CONTACT).get("formEnabled", True):
        raise FeatureDisabledError("The contact form is currently disabled.")
    submission_id = submissions.record_submission(store, payload)
    return SubmitResponse(message="Submission received successfully!", id=submission_id)


@router.get("/submissions")
def get_submissions(store: DocumentStore = Depends(get_store)):
    return submissions.list_submissions(store)


@router.post("/submissions", response_model=SuccessResponse)
def add_submissions(payload: Any = Body(...), store: DocumentStore = Depends(get_store)):
    count = submissions.import_submissions(store, payload)
    message = (
        f"{count} submissions added successfully!"
        if count > 1
        else "Submission added successfully!"
    )
    return SuccessResponse(message=message)


@router.delete("/submissions", response_model=MessageResponse)
def delete_submission(
    payload: DeleteSubmissionRequest, store: DocumentStore = Depends(get_store)
):
    submissions.delete_submission(
        store, submission_id=payload.id, submitted_at=payload.submittedAt
    )
    return MessageResponse(message="Submission deleted successfully.")


@router.delete("/submissions/{submission_id}", response_model=MessageResponse)
def delete_submission_by_id(
    submission_id: str, store: DocumentStore = Depends(get_store)
):
    submissions.delete_submission(store, submission_id=submission_id)
    return MessageResponse(message="Submission deleted successfully.")


@router.get("/members")
def get_members(store: DocumentStore = Depends(get_store)):
    return content.read_content(store, MEMBERS)


@router.post("/members", response_model=SuccessResponse)
def save_members(payload: MembersDocument, store: DocumentStore = Depends(get_store)):
    data = payload.model_dump(exclude_unset=True)
    data["updatedAt"] = utc_now_iso()
    content.write_content(store, MEMBERS, data)
    return SuccessResponse(message="Members data saved successfully!")


@router.get("/members/{slug}")
def get_member(slug: str, store: DocumentStore = Depends(get_store)):
    members_doc = content.read_content(store, MEMBERS)
    for member in members_doc.get("members") or []:
        if slugify_name(member.get("name", "")) == slug.lower():
            return member
    raise HTTPException(status_code=404, detail="Member not found")


@router.get("/gallery")
def get_gallery(store: DocumentStore = Depends(get_store)):
    return gallery.get_gallery(store)


@router.post("/gallery", response_model=GallerySaveResponse)
def save_gallery(payload: dict = Body(...), store: DocumentStore = Depends(get_store)):
    gallery.save_gallery(store, payload.get("albums"), payload.get("images"))
    return GallerySaveResponse()


@router.delete("/gallery", response_model=MessageResponse)
def delete_album(payload: DeleteAlbumRequest, store: DocumentStore = Depends(get_store)):
    removed = gallery.delete_album(store, payload.albumId)
    return MessageResponse(
        message=f"Album deleted successfully along with {removed} image(s)."
    )


@router.post("/gallery/album")
def create_album(payload: dict = Body(...), store: DocumentStore = Depends(get_store)):
    return gallery.create_album(store, payload)


@router.get("/gallery/album/{album_id}")
def get_album(album_id: str, store: DocumentStore = Depends(get_store)):
    return gallery.get_album(store, album_id)


@router.post("/gallery/image")
def add_image(payload: dict = Body(...), store: DocumentStore = Depends(get_store)):
    return gallery.add_image(store, payload)


@router.put("/gallery/image")
def update_image(payload: dict = Body(...), store: DocumentStore = Depends(get_store)):
    return gallery.update_image(store, payload)


@router.delete("/gallery/image", response_model=MessageResponse)
def delete_image(payload: DeleteImageRequest, store: DocumentStore = Depends(get_store)):
    gallery.delete_image(store, payload.id)
    return MessageResponse(message="Image deleted successfully")
