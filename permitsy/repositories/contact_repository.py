"""Contact form repository implementation."""

import re
from typing import Optional

from loguru import logger

from permitsy.constants import Tables
from permitsy.core.exceptions import BackendError, ValidationError
from permitsy.core.result import OperationResult
from permitsy.models.backend import BackendClient
from permitsy.models.entities import ContactMessage

DEFAULT_SUBJECT = "Website Contact Form"

_EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def validate_contact_message(message: ContactMessage) -> None:
    """
    Check a contact message before it is sent anywhere.

    Args:
        message: Submitted message

    Raises:
        ValidationError: If name, email or message is missing or malformed
    """
    if not message.name.strip():
        raise ValidationError("Name is required", field="name")
    if not _EMAIL_PATTERN.match(message.email.strip()):
        raise ValidationError("A valid email address is required", field="email")
    if not message.message.strip():
        raise ValidationError("Message is required", field="message")


class ContactRepository:
    """Stores contact form submissions in the profiles table."""

    def __init__(self, backend: BackendClient):
        self.backend = backend

    async def submit(
        self, message: ContactMessage, subject: Optional[str] = None
    ) -> OperationResult[None]:
        """
        Store a contact form submission.

        Args:
            message: Submitted message
            subject: Overrides message.subject when given

        Returns:
            OperationResult describing the outcome
        """
        try:
            validate_contact_message(message)
        except ValidationError as e:
            logger.warning(f"Rejected contact form submission: {e.message}")
            return OperationResult.fail(e.message)

        row = {
            "full_name": message.name.strip(),
            "email": message.email.strip(),
            "contact_message": message.message,
            "contact_subject": subject or message.subject or DEFAULT_SUBJECT,
            "contact_status": "new",
        }
        try:
            await self.backend.table(Tables.PROFILES).insert(row, returning=False).execute()
        except BackendError as e:
            logger.error(f"Error submitting contact form: {e}")
            return OperationResult.fail(e.message)

        logger.info(f"Contact form submitted (subject: {row['contact_subject']})")
        return OperationResult.ok("Message sent successfully")
