"""
Read/merge/default and write resolvers for the single-document content
domains (home, about, contact, members).

Each domain declares how a fetched document is combined with its defaults
(`ReadMerge`) and how submitted data is persisted (`WriteMode`):

| domain  | read merge | write mode |
|---------|------------|------------|
| home    | NESTED     | MERGE      |
| about   | SHALLOW    | MERGE      |
| contact | SHALLOW    | MERGE      |
| members | NONE       | REPLACE    |

Members is replace-write: the submitted document becomes the stored one, so
clients must always send the complete document.
"""

from __future__ import annotations

import copy
import enum
import logging
from dataclasses import dataclass, field
from typing import Callable, Optional

from welfare_site.constants import (
    ABOUT_DOC_ID,
    CONTACT_DOC_ID,
    HOME_DOC_ID,
    MEMBERS_DOC_ID,
    SITE_CONFIG_COLLECTION,
)
from welfare_site.errors import ContentValidationError
from welfare_site.store import DocumentStore, WriteMode
from welfare_site.utils import utc_now_iso

logger = logging.getLogger(__name__)


class ReadMerge(enum.Enum):
    # Top-level overlay, then the listed nested maps merged key-by-key.
    NESTED = "nested"
    # Top-level overlay only; nested maps replace the default wholesale.
    SHALLOW = "shallow"
    # No defaults once the document exists.
    NONE = "none"


DEFAULT_HOME = {
    "siteTitle": "Heart2Heart Welfare",
    "hero": {
        "headline": "Welcome",
        "description": "...",
        "button1Text": "Learn More",
        "button1Link": "/about",
        "button2Text": "Contact",
        "button2Link": "/contact",
        "backgroundImage": "/images/default-hero.jpg",
    },
    "aboutSummary": {
        "title": "About Us",
        "description": "...",
        "buttonText": "Read More",
        "buttonLink": "/about",
    },
    "cta": {
        "title": "Get Involved",
        "description": "...",
        "button1Text": "Volunteer",
        "button1Link": "/volunteer",
        "button2Text": "Donate Now",
        "button2Link": "/donate",
    },
    "featuredMemberIds": [],
}

DEFAULT_ABOUT = {
    "aboutUs": "",
    "mission": "",
    "vision": "",
    "history": "",
    "values": [],
}

DEFAULT_CONTACT = {
    "email": "",
    "phone": "",
    "address": "",
    "mapEmbedUrl": "",
    "mapEnabled": False,
    "formEnabled": True,
    "contactHeadline": "Get In Touch",
    "contactDescription": "Reach out with any questions.",
    "socialLinks": {"facebook": "", "twitter": "", "linkedin": ""},
}

DEFAULT_MEMBERS = {
    "headline": "Our Team",
    "description": "Meet the dedicated members of our team.",
    "callToAction": "Join Us",
    "members": [],
}


def _home_fixups(merged: dict) -> dict:
    if not merged["hero"].get("backgroundImage"):
        merged["hero"]["backgroundImage"] = DEFAULT_HOME["hero"]["backgroundImage"]
    if merged.get("featuredMemberIds") is None:
        merged["featuredMemberIds"] = []
    return merged


def _members_shell(defaults: dict) -> dict:
    return {**defaults, "updatedAt": utc_now_iso()}


@dataclass(frozen=True)
class ContentDomain:
    name: str
    doc_id: str
    defaults: dict
    read_merge: ReadMerge
    write_mode: WriteMode
    nested_keys: tuple[str, ...] = ()
    fixups: Optional[Callable[[dict], dict]] = None
    shell: Optional[Callable[[dict], dict]] = None
    collection: str = field(default=SITE_CONFIG_COLLECTION)

    def default_document(self) -> dict:
        if self.shell is not None:
            return self.shell(copy.deepcopy(self.defaults))
        return copy.deepcopy(self.defaults)


HOME = ContentDomain(
    name="home",
    doc_id=HOME_DOC_ID,
    defaults=DEFAULT_HOME,
    read_merge=ReadMerge.NESTED,
    write_mode=WriteMode.MERGE,
    nested_keys=("hero", "aboutSummary", "cta"),
    fixups=_home_fixups,
)
ABOUT = ContentDomain(
    name="about",
    doc_id=ABOUT_DOC_ID,
    defaults=DEFAULT_ABOUT,
    read_merge=ReadMerge.SHALLOW,
    write_mode=WriteMode.MERGE,
)
CONTACT = ContentDomain(
    name="contact",
    doc_id=CONTACT_DOC_ID,
    defaults=DEFAULT_CONTACT,
    read_merge=ReadMerge.SHALLOW,
    write_mode=WriteMode.MERGE,
)
MEMBERS = ContentDomain(
    name="members",
    doc_id=MEMBERS_DOC_ID,
    defaults=DEFAULT_MEMBERS,
    read_merge=ReadMerge.NONE,
    write_mode=WriteMode.REPLACE,
    shell=_members_shell,
)

DOMAINS = {domain.name: domain for domain in (HOME, ABOUT, CONTACT, MEMBERS)}


def merge_with_defaults(domain: ContentDomain, data: dict) -> dict:
    """Combine a fetched document with the domain defaults."""
    if domain.read_merge is ReadMerge.NONE:
        return data
    defaults = copy.deepcopy(domain.defaults)
    merged = {**defaults, **data}
    if domain.read_merge is ReadMerge.NESTED:
        for key in domain.nested_keys:
            nested = data.get(key)
            if not isinstance(nested, dict):
                nested = {}
            merged[key] = {**defaults.get(key, {}), **nested}
    if domain.fixups is not None:
        merged = domain.fixups(merged)
    return merged


def read_content(store: DocumentStore, domain: ContentDomain) -> dict:
    """
    Fetch a domain document and resolve it against the defaults.

    A missing document yields the domain default (or its empty shell for
    domains that do not merge). StoreError propagates to the caller.
    """
    data = store.get(domain.collection, domain.doc_id)
    if data is None:
        logger.info(
            "Document %s not found in %s, returning default data",
            domain.doc_id,
            domain.collection,
        )
        return domain.default_document()
    return merge_with_defaults(domain, data)


def write_content(store: DocumentStore, domain: ContentDomain, data: dict) -> None:
    """Persist `data` using the domain's write mode."""
    if not isinstance(data, dict):
        raise ContentValidationError("Invalid data format provided.")
    store.set(domain.collection, domain.doc_id, data, mode=domain.write_mode)
    logger.info("Saved %s content (%s)", domain.name, domain.write_mode.value)


def member_ids(store: DocumentStore) -> set[str]:
    members_doc = store.get(MEMBERS.collection, MEMBERS.doc_id) or {}
    return {
        member.get("id")
        for member in members_doc.get("members") or []
        if isinstance(member, dict) and member.get("id")
    }


def validate_featured_members(store: DocumentStore, featured: list[str]) -> None:
    """Featured ids must reference members stored in the members document."""
    known = member_ids(store)
    unknown = [member_id for member_id in featured if member_id not in known]
    if unknown:
        raise ContentValidationError(
            f"Unknown member ids in featuredMemberIds: {', '.join(unknown)}"
        )


def seed_defaults(store: DocumentStore, overwrite: bool = False) -> list[str]:
    """
    Write the default document of every domain that has none yet.

    Returns the names of the domains that were written.
    """
    written = []
    for domain in DOMAINS.values():
        if not overwrite and store.get(domain.collection, domain.doc_id) is not None:
            continue
        store.set(
            domain.collection,
            domain.doc_id,
            domain.default_document(),
            mode=WriteMode.REPLACE,
        )
        written.append(domain.name)
    return written
