"""
Append-only log of contact-form submissions.

Every submission is its own document in the submissions collection and is
addressed by the id the store generates for it.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Optional

from welfare_site.constants import SUBMISSIONS_COLLECTION
from welfare_site.errors import ContentNotFoundError, ContentValidationError
from welfare_site.store import DocumentStore, WriteMode, WriteOp
from welfare_site.utils import get_unique_id, normalize_timestamp, utc_now_iso

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"\S+@\S+\.\S+")
REQUIRED_FIELDS = ("name", "email", "message")


def _clean(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


def validate_contact_form(payload: dict) -> dict:
    """Return the trimmed name/email/message (and subject) of a form post."""
    cleaned = {key: _clean(payload.get(key)) for key in REQUIRED_FIELDS}
    if not all(cleaned.values()):
        raise ContentValidationError("Missing required fields (name, email, message).")
    if not EMAIL_PATTERN.search(cleaned["email"]):
        raise ContentValidationError("Invalid email format.")
    subject = _clean(payload.get("subject"))
    if subject:
        cleaned["subject"] = subject
    return cleaned


def record_submission(store: DocumentStore, payload: dict) -> str:
    """Validate a contact form post and append it to the log."""
    record = validate_contact_form(payload)
    record["submittedAt"] = utc_now_iso()
    submission_id = store.add(SUBMISSIONS_COLLECTION, record)
    logger.info("Stored contact submission %s", submission_id)
    return submission_id


def list_submissions(store: DocumentStore) -> list[dict]:
    """All submissions, most recent first."""
    docs = store.list(SUBMISSIONS_COLLECTION, order_by="submittedAt", descending=True)
    return [doc.as_dict() for doc in docs]


def import_submissions(store: DocumentStore, payload: Any) -> int:
    """
    Batch-insert one submission or a list of them.

    Existing `submittedAt` values are kept (normalised); the rest are
    stamped with the current time. Nothing is written unless every entry
    is valid.
    """
    entries = payload if isinstance(payload, list) else [payload]
    if not entries or not all(isinstance(entry, dict) for entry in entries):
        raise ContentValidationError(
            "Invalid data format. Expecting object or array of objects."
        )

    now = utc_now_iso()
    ops: list[WriteOp] = []
    for entry in entries:
        if not all(_clean(entry.get(key)) for key in REQUIRED_FIELDS):
            raise ContentValidationError(
                f"Incomplete data for submission: {entry.get('name') or entry}"
            )
        record = {key: value for key, value in entry.items() if key != "id"}
        record.update({key: _clean(entry[key]) for key in REQUIRED_FIELDS})
        if record.get("submittedAt"):
            try:
                record["submittedAt"] = normalize_timestamp(record["submittedAt"])
            except ValueError as e:
                raise ContentValidationError(str(e)) from e
        else:
            record["submittedAt"] = now
        ops.append(
            WriteOp.set(
                SUBMISSIONS_COLLECTION, get_unique_id(), record, WriteMode.REPLACE
            )
        )

    store.commit(ops)
    logger.info("Imported %d submission(s)", len(ops))
    return len(ops)


def delete_submission(
    store: DocumentStore,
    submission_id: Optional[str] = None,
    submitted_at: Optional[str] = None,
) -> str:
    """
    Delete one submission and return its id.

    `submission_id` is the primary key. `submitted_at` is accepted for older
    clients and removes only the first record whose timestamp matches
    exactly.
    """
    if submission_id:
        if not store.delete(SUBMISSIONS_COLLECTION, submission_id):
            raise ContentNotFoundError("Submission not found.")
        return submission_id

    if not submitted_at:
        raise ContentValidationError("Submission id or submittedAt is required.")

    matches = store.list(SUBMISSIONS_COLLECTION, where=("submittedAt", submitted_at))
    if not matches or not store.delete(SUBMISSIONS_COLLECTION, matches[0].id):
        raise ContentNotFoundError("Submission not found.")
    return matches[0].id
