"""Visa application tracking repository."""

from typing import Optional

from loguru import logger

from permitsy.constants import Tables
from permitsy.core.exceptions import BackendError
from permitsy.core.result import OperationResult
from permitsy.models.backend import BackendClient
from permitsy.models.entities import VisaApplication
from permitsy.repositories.base import utc_now

APPLICATION_COLUMNS = (
    "*, "
    "visa_packages(*), "
    "countries(id,name,flag), "
    "application_documents(id,document_type,file_url,status,feedback,uploaded_at), "
    "application_timeline(id,event,date,description)"
)

UPLOADED = "uploaded"


class ApplicationRepository:
    """Reads visa applications and records document uploads against them."""

    def __init__(self, backend: BackendClient):
        self.backend = backend

    async def get_application(self, application_id: str) -> Optional[VisaApplication]:
        """
        Get an application with its package, country, documents and timeline.

        The timeline is returned newest first.

        Args:
            application_id: Application ID

        Returns:
            VisaApplication or None when absent or on error
        """
        if not application_id:
            return None

        try:
            row = await (
                self.backend.table(Tables.VISA_APPLICATIONS)
                .select(APPLICATION_COLUMNS)
                .eq("id", application_id)
                .single()
                .execute()
            )
            application = VisaApplication.model_validate(row)
        except (BackendError, ValueError) as e:
            logger.error(f"Error fetching application {application_id}: {e}")
            return None

        # ISO timestamps sort chronologically as strings; undated events go last
        application.timeline.sort(key=lambda event: event.date or "", reverse=True)
        return application

    async def update_document_status(
        self,
        application_id: str,
        document_type: str,
        file_url: str,
        status: str = UPLOADED,
    ) -> bool:
        """
        Attach a file to an application document and set its status.

        Args:
            application_id: Application ID
            document_type: Document type within the application
            file_url: Public URL of the stored file
            status: New document status

        Returns:
            True if the update was accepted
        """
        try:
            await (
                self.backend.table(Tables.APPLICATION_DOCUMENTS)
                .update(
                    {"status": status, "file_url": file_url, "uploaded_at": utc_now()},
                    returning=False,
                )
                .eq("application_id", application_id)
                .eq("document_type", document_type)
                .execute()
            )
            return True
        except BackendError as e:
            logger.error(
                f"Error updating {document_type} document of application {application_id}: {e}"
            )
            return False

    async def add_timeline_event(
        self,
        application_id: str,
        event: str,
        description: Optional[str] = None,
        date: Optional[str] = None,
    ) -> bool:
        """
        Append an event to an application's timeline.

        Args:
            application_id: Application ID
            event: Short event title
            description: Longer explanation
            date: ISO timestamp, now when omitted

        Returns:
            True if the event was stored
        """
        row = {
            "application_id": application_id,
            "event": event,
            "description": description,
            "date": date or utc_now(),
        }
        try:
            await self.backend.table(Tables.APPLICATION_TIMELINE).insert(row, returning=False).execute()
            return True
        except BackendError as e:
            logger.error(f"Error adding timeline event to application {application_id}: {e}")
            return False

    async def record_document_upload(
        self, application_id: str, document_type: str, file_url: str
    ) -> OperationResult[None]:
        """
        Mark a document as uploaded and note it on the timeline.

        A failed timeline insert does not undo the upload; it is only logged.

        Args:
            application_id: Application ID
            document_type: Document type within the application
            file_url: Public URL of the stored file

        Returns:
            OperationResult describing the outcome
        """
        if not await self.update_document_status(application_id, document_type, file_url):
            return OperationResult.fail("Failed to update document status")

        noted = await self.add_timeline_event(
            application_id,
            f"Document Uploaded: {document_type}",
            f"The {document_type} document has been uploaded and is pending review.",
        )
        if not noted:
            logger.warning(f"Upload of {document_type} not recorded on timeline of {application_id}")

        logger.info(f"Document {document_type} uploaded for application {application_id}")
        return OperationResult.ok(
            "Your document has been successfully uploaded and is pending review."
        )
