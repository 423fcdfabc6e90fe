"""
Pydantic schemas for the site API.
"""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class MessageResponse(BaseModel):
    message: str


class SuccessResponse(BaseModel):
    success: Literal[True] = True
    message: str


class SubmitResponse(BaseModel):
    message: str
    id: str


class GallerySaveResponse(BaseModel):
    success: Literal[True] = True


class _Partial(BaseModel):
    # Unknown keys are kept so older documents round-trip untouched.
    model_config = ConfigDict(extra="allow")


class HeroUpdate(_Partial):
    headline: Optional[str] = None
    description: Optional[str] = None
    button1Text: Optional[str] = None
    button1Link: Optional[str] = None
    button2Text: Optional[str] = None
    button2Link: Optional[str] = None
    backgroundImage: Optional[str] = None


class AboutSummaryUpdate(_Partial):
    title: Optional[str] = None
    description: Optional[str] = None
    buttonText: Optional[str] = None
    buttonLink: Optional[str] = None


class CtaUpdate(_Partial):
    title: Optional[str] = None
    description: Optional[str] = None
    button1Text: Optional[str] = None
    button1Link: Optional[str] = None
    button2Text: Optional[str] = None
    button2Link: Optional[str] = None


class HomeUpdate(_Partial):
    """Partial home document; only the fields sent are written."""

    siteTitle: Optional[str] = None
    hero: Optional[HeroUpdate] = None
    aboutSummary: Optional[AboutSummaryUpdate] = None
    cta: Optional[CtaUpdate] = None
    featuredMemberIds: Optional[list[str]] = Field(default=None, max_length=3)


class Member(_Partial):
    id: str = Field(..., min_length=1)
    name: str
    role: str = ""
    bio: str = ""
    imageUrl: Optional[str] = None


class MembersDocument(_Partial):
    """Complete members document; it replaces whatever is stored."""

    headline: str
    description: Optional[str] = None
    callToAction: Optional[str] = None
    members: list[Member]


class DeleteSubmissionRequest(BaseModel):
    id: Optional[str] = None
    submittedAt: Optional[str] = None


class DeleteAlbumRequest(BaseModel):
    albumId: Optional[str] = None


class DeleteImageRequest(BaseModel):
    id: Optional[str] = None
