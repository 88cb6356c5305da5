"""Tests for application tracking and profile roles."""

import pytest

from permitsy.constants import Tables, UserRoles
from permitsy.core.exceptions import BackendError
from permitsy.models.entities import VisaApplication
from permitsy.repositories import ApplicationRepository, ProfileRepository
from permitsy.repositories.application_repository import APPLICATION_COLUMNS


@pytest.fixture
def application(backend, country):
    """Stored application with embedded relations as the gateway returns them."""
    return backend.seed(
        Tables.VISA_APPLICATIONS,
        {
            "id": "app-1",
            "user_id": "user-1",
            "status": "document_review",
            "next_step": "Upload passport",
            "form_data": None,
            "visa_packages": {"id": "pkg-1", "country_id": country["id"], "name": "Tourist"},
            "countries": {"id": country["id"], "name": "France", "flag": "fr.png"},
            "application_documents": [
                {"id": "doc-1", "document_type": "passport", "file_url": None, "status": None},
            ],
            "application_timeline": [
                {"id": "t1", "event": "Submitted", "date": "2026-01-01T10:00:00+00:00"},
                {"id": "t2", "event": "In review", "date": "2026-01-03T10:00:00+00:00"},
                {"id": "t3", "event": "Paid", "date": "2026-01-02T10:00:00+00:00"},
            ],
        },
    )[0]


class TestGetApplication:
    """Tests for ApplicationRepository.get_application."""

    @pytest.mark.asyncio
    async def test_returns_application_with_relations(self, backend, application):
        repo = ApplicationRepository(backend)

        result = await repo.get_application("app-1")

        assert isinstance(result, VisaApplication)
        assert result.package.name == "Tourist"
        assert result.country.name == "France"
        assert result.documents[0].document_type == "passport"
        assert result.documents[0].status == "pending"
        assert result.form_data == {}

        query = backend.queries_for(Tables.VISA_APPLICATIONS, "select")[0]
        assert query.columns == APPLICATION_COLUMNS
        assert query.single

    @pytest.mark.asyncio
    async def test_timeline_is_newest_first(self, backend, application):
        repo = ApplicationRepository(backend)

        result = await repo.get_application("app-1")

        assert [event.event for event in result.timeline] == ["In review", "Paid", "Submitted"]

    @pytest.mark.asyncio
    async def test_progress_follows_status(self, backend, application):
        repo = ApplicationRepository(backend)

        result = await repo.get_application("app-1")

        assert result.current_step == 2
        assert result.progress_percentage == 50.0

    @pytest.mark.asyncio
    async def test_missing_application_returns_none(self, backend):
        repo = ApplicationRepository(backend)

        assert await repo.get_application("nope") is None

    @pytest.mark.asyncio
    async def test_empty_id_skips_backend(self, backend):
        repo = ApplicationRepository(backend)

        assert await repo.get_application("") is None
        assert backend.queries == []


class TestDocumentUpload:
    """Tests for document status updates and timeline events."""

    @pytest.mark.asyncio
    async def test_update_document_status(self, backend):
        backend.seed(
            Tables.APPLICATION_DOCUMENTS,
            {"id": "d1", "application_id": "app-1", "document_type": "passport", "status": "pending"},
            {"id": "d2", "application_id": "app-1", "document_type": "photo", "status": "pending"},
            {"id": "d3", "application_id": "app-2", "document_type": "passport", "status": "pending"},
        )
        repo = ApplicationRepository(backend)

        updated = await repo.update_document_status("app-1", "passport", "https://files.test/p.pdf")

        assert updated
        rows = {row["id"]: row for row in backend.tables[Tables.APPLICATION_DOCUMENTS]}
        assert rows["d1"]["status"] == "uploaded"
        assert rows["d1"]["file_url"] == "https://files.test/p.pdf"
        assert rows["d1"]["uploaded_at"]
        assert rows["d2"]["status"] == "pending"
        assert rows["d3"]["status"] == "pending"

    @pytest.mark.asyncio
    async def test_add_timeline_event(self, backend):
        repo = ApplicationRepository(backend)

        assert await repo.add_timeline_event("app-1", "Interview booked", date="2026-02-01T09:00:00+00:00")

        row = backend.tables[Tables.APPLICATION_TIMELINE][0]
        assert row["application_id"] == "app-1"
        assert row["event"] == "Interview booked"
        assert row["date"] == "2026-02-01T09:00:00+00:00"
        assert row["description"] is None

    @pytest.mark.asyncio
    async def test_record_document_upload(self, backend):
        backend.seed(
            Tables.APPLICATION_DOCUMENTS,
            {"application_id": "app-1", "document_type": "passport", "status": "pending"},
        )
        repo = ApplicationRepository(backend)

        result = await repo.record_document_upload("app-1", "passport", "https://files.test/p.pdf")

        assert result.success
        assert result.message == "Your document has been successfully uploaded and is pending review."
        event = backend.tables[Tables.APPLICATION_TIMELINE][0]
        assert event["event"] == "Document Uploaded: passport"
        assert event["description"] == (
            "The passport document has been uploaded and is pending review."
        )
        assert event["date"]

    @pytest.mark.asyncio
    async def test_failed_status_update_skips_timeline(self, backend):
        backend.fail(
            Tables.APPLICATION_DOCUMENTS, "update", BackendError("permission denied", code="42501")
        )
        repo = ApplicationRepository(backend)

        result = await repo.record_document_upload("app-1", "passport", "https://files.test/p.pdf")

        assert not result.success
        assert backend.tables[Tables.APPLICATION_TIMELINE] == []

    @pytest.mark.asyncio
    async def test_failed_timeline_insert_still_succeeds(self, backend):
        backend.fail(
            Tables.APPLICATION_TIMELINE, "insert", BackendError("permission denied", code="42501")
        )
        repo = ApplicationRepository(backend)

        result = await repo.record_document_upload("app-1", "passport", "https://files.test/p.pdf")

        assert result.success


class TestProfileRepository:
    """Tests for role changes on profiles."""

    @pytest.mark.asyncio
    async def test_set_user_as_admin(self, backend):
        backend.seed(Tables.PROFILES, {"id": "user-1", "role": UserRoles.USER})
        repo = ProfileRepository(backend)

        assert await repo.set_user_as_admin("user-1")

        assert backend.tables[Tables.PROFILES][0]["role"] == UserRoles.ADMIN
        assert await repo.is_admin("user-1")

    @pytest.mark.asyncio
    async def test_is_admin_false_for_regular_and_missing_users(self, backend):
        backend.seed(Tables.PROFILES, {"id": "user-1", "role": UserRoles.USER})
        repo = ProfileRepository(backend)

        assert not await repo.is_admin("user-1")
        assert not await repo.is_admin("user-2")

    @pytest.mark.asyncio
    async def test_set_role_failure(self, backend):
        backend.fail(Tables.PROFILES, "update", BackendError("permission denied", code="42501"))
        repo = ProfileRepository(backend)

        assert not await repo.set_role("user-1", UserRoles.ADMIN)

    @pytest.mark.asyncio
    async def test_empty_user_id(self, backend):
        repo = ProfileRepository(backend)

        assert not await repo.set_role("", UserRoles.ADMIN)
        assert backend.queries == []
