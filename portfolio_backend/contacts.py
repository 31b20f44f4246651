"""
Contact form submissions: validation, storage and operator notification.
"""

from __future__ import annotations

import logging
import re
import threading
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Optional

from portfolio_backend.errors import NotFoundError, ValidationError
from portfolio_backend.kv_store import KvStore, next_id, utc_now
from portfolio_backend.notifications import EmailNotifier

logger = logging.getLogger(__name__)

CONTACT_PREFIX = "contact:"
MIN_MESSAGE_LENGTH = 10
EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

# Runs fn(*args) without the caller waiting on it.
Dispatcher = Callable[..., None]


@dataclass
class ContactSubmission:
    id: int
    name: str
    email: str
    message: str
    submitted_at: str
    read: bool = False
    read_at: Optional[str] = None

    def as_dict(self) -> dict:
        payload = {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "message": self.message,
            "submittedAt": self.submitted_at,
            "read": self.read,
        }
        if self.read_at is not None:
            payload["readAt"] = self.read_at
        return payload

    @classmethod
    def from_dict(cls, payload: dict) -> "ContactSubmission":
        return cls(
            id=int(payload["id"]),
            name=payload.get("name", ""),
            email=payload.get("email", ""),
            message=payload.get("message", ""),
            submitted_at=payload.get("submittedAt", ""),
            read=bool(payload.get("read", False)),
            read_at=payload.get("readAt"),
        )


def _dispatch_in_thread(fn: Callable[..., None], *args) -> None:
    threading.Thread(target=fn, args=args, daemon=True).start()


def _sort_key(submission: ContactSubmission) -> datetime:
    try:
        moment = datetime.fromisoformat(submission.submitted_at)
    except ValueError:
        return datetime.min.replace(tzinfo=timezone.utc)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment


def validate_submission(name: str, email: str, message: str) -> None:
    if not name or not name.strip() or not email or not email.strip() or not message:
        raise ValidationError("All fields are required")
    if not EMAIL_PATTERN.match(email.strip()):
        raise ValidationError("Invalid email address")
    if len(message.strip()) < MIN_MESSAGE_LENGTH:
        raise ValidationError(
            f"Message must be at least {MIN_MESSAGE_LENGTH} characters"
        )


class ContactService:
    """Stores contact submissions and notifies the site operator."""

    def __init__(self, store: KvStore, notifier: EmailNotifier):
        self.store = store
        self.notifier = notifier

    def submit(
        self,
        name: str,
        email: str,
        message: str,
        dispatch: Optional[Dispatcher] = None,
    ) -> ContactSubmission:
        """
        Validate and persist a submission, then hand the email off to ``dispatch``.

        The notification is never awaited; its failures are logged only.
        """
        validate_submission(name, email, message)
        submission = ContactSubmission(
            id=next_id(self.store.get_by_prefix(CONTACT_PREFIX)),
            name=name.strip(),
            email=email.strip(),
            message=message,
            submitted_at=utc_now(),
        )
        self.store.set(f"{CONTACT_PREFIX}{submission.id}", submission.as_dict())
        logger.info("Stored contact submission %s", submission.id)

        (dispatch or _dispatch_in_thread)(self.notify, submission)
        return submission

    def notify(self, submission: ContactSubmission) -> None:
        """Single delivery attempt; errors are logged and swallowed."""
        try:
            self.notifier.send_contact_notification(submission)
        except Exception:
            logger.exception(
                "Email notification failed for contact %s", submission.id
            )

    def list(self) -> list[ContactSubmission]:
        submissions = [
            ContactSubmission.from_dict(item)
            for item in self.store.get_by_prefix(CONTACT_PREFIX)
        ]
        submissions.sort(key=_sort_key, reverse=True)
        return submissions

    def mark_read(self, contact_id: int) -> ContactSubmission:
        key = f"{CONTACT_PREFIX}{contact_id}"
        stored = self.store.get(key)
        if stored is None:
            raise NotFoundError("Contact not found")
        submission = ContactSubmission.from_dict(stored)
        submission.read = True
        submission.read_at = utc_now()
        self.store.set(key, submission.as_dict())
        return submission

    def delete(self, contact_id: int) -> None:
        # Deleting an unknown id is reported as success.
        self.store.delete(f"{CONTACT_PREFIX}{contact_id}")
