"""Profile editing: validate the form, then write name/email to users/<uid>."""

from __future__ import annotations

import logging
import re

from lecturehub.remote import BackendError, CollectionClient
from lecturehub.session import Session

log = logging.getLogger(__name__)

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

MISSING_DETAILS = "Please Enter All Details"
INVALID_EMAIL = "Invalid Email Format"
NOT_SIGNED_IN = "You need to be signed in to update your profile."
UPDATE_FAILED = "Failed to update profile."
UPDATE_OK = "Profile updated successfully. Please Restart Your Application Once"


class ProfileValidationError(ValueError):
    """Raised when the profile form is incomplete or malformed."""


def validate_profile(full_name: str, email: str, password: str) -> None:
    if not (full_name or "").strip() or not (email or "").strip() or not (password or "").strip():
        raise ProfileValidationError(MISSING_DETAILS)
    if not EMAIL_RE.match(email.strip()):
        raise ProfileValidationError(INVALID_EMAIL)


def update_profile(
    client: CollectionClient,
    session: Session,
    full_name: str,
    email: str,
    password: str,
    collection: str = "users",
) -> dict:
    """
    Validate the form and update the user's document.

    The session is left untouched; the new name shows up after the app is
    restarted and the session is reloaded. Returns the written fields.
    """
    validate_profile(full_name, email, password)
    if not session.signed_in:
        raise ProfileValidationError(NOT_SIGNED_IN)

    fields = {"fullName": full_name, "email": email}
    try:
        client.update_document(collection, session.uid, fields)
    except BackendError as e:
        log.error("Error updating profile for %s: %s", session.uid, e)
        raise BackendError(UPDATE_FAILED) from e

    log.info("Updated profile for %s", session.uid)
    return fields
