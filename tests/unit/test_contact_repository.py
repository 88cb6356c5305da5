"""Tests for the contact form repository."""

import pytest

from permitsy.constants import Tables
from permitsy.core.exceptions import BackendError, ValidationError
from permitsy.models.entities import ContactMessage
from permitsy.repositories import ContactRepository
from permitsy.repositories.contact_repository import DEFAULT_SUBJECT, validate_contact_message


class TestValidateContactMessage:
    """Tests for validate_contact_message."""

    def test_valid(self):
        validate_contact_message(ContactMessage(name="Ana", email="ana@example.com", message="Hi"))

    @pytest.mark.parametrize(
        "name,email,message,field",
        [
            ("", "ana@example.com", "Hi", "name"),
            ("Ana", "not-an-email", "Hi", "email"),
            ("Ana", "ana@example.com", "  ", "message"),
        ],
    )
    def test_invalid(self, name, email, message, field):
        with pytest.raises(ValidationError) as exc_info:
            validate_contact_message(ContactMessage(name=name, email=email, message=message))
        assert exc_info.value.field == field


class TestContactRepository:
    """Tests for ContactRepository.submit."""

    @pytest.mark.asyncio
    async def test_submit_stores_profile_row(self, backend):
        repo = ContactRepository(backend)

        result = await repo.submit(
            ContactMessage(name=" Ana ", email="ana@example.com", message="Need a visa")
        )

        assert result.success
        assert result.message == "Message sent successfully"
        row = backend.tables[Tables.PROFILES][0]
        assert row["full_name"] == "Ana"
        assert row["contact_message"] == "Need a visa"
        assert row["contact_subject"] == DEFAULT_SUBJECT
        assert row["contact_status"] == "new"

    @pytest.mark.asyncio
    async def test_subject_override(self, backend):
        repo = ContactRepository(backend)

        await repo.submit(
            ContactMessage(name="Ana", email="ana@example.com", message="Hi", subject="Pricing"),
            subject="Urgent",
        )

        assert backend.tables[Tables.PROFILES][0]["contact_subject"] == "Urgent"

    @pytest.mark.asyncio
    async def test_invalid_message_never_reaches_backend(self, backend):
        repo = ContactRepository(backend)

        result = await repo.submit(ContactMessage(name="Ana", email="nope", message="Hi"))

        assert not result.success
        assert backend.queries == []

    @pytest.mark.asyncio
    async def test_backend_error(self, backend):
        backend.fail(Tables.PROFILES, "insert", BackendError("new row violates row-level security"))
        repo = ContactRepository(backend)

        result = await repo.submit(ContactMessage(name="Ana", email="ana@example.com", message="Hi"))

        assert not result.success
        assert "row-level security" in result.message
