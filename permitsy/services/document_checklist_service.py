"""Document checklist fixes and combined country saves."""

from typing import Any, Dict, List, Optional, Sequence

from loguru import logger

from permitsy.constants import Rpc
from permitsy.core.exceptions import BackendError
from permitsy.core.result import OperationResult
from permitsy.models.backend import BackendClient
from permitsy.repositories.document_checklist_repository import (
    DocumentChecklistRepository,
    DocumentInput,
)
from permitsy.services.query_cache import QueryCache
from permitsy.services.visa_package_service import PackagePayload, VisaPackageService

DEFAULT_DOCUMENTS: List[Dict[str, Any]] = [
    {
        "document_name": "Valid Passport",
        "document_description": "A valid passport with at least 6 months validity remaining",
        "required": True,
    },
    {
        "document_name": "Passport Photos",
        "document_description": "Two recent passport-size color photographs with white background",
        "required": True,
    },
    {
        "document_name": "Visa Application Form",
        "document_description": "Completed and signed visa application form",
        "required": True,
    },
]


class DocumentChecklistService:
    """Keeps country checklists usable and saves package and documents together."""

    def __init__(
        self,
        backend: BackendClient,
        packages: Optional[VisaPackageService] = None,
        cache: Optional[QueryCache] = None,
    ):
        self.backend = backend
        self.documents = DocumentChecklistRepository(backend)
        self.packages = packages if packages is not None else VisaPackageService(backend)
        self.cache = cache if cache is not None else QueryCache()

    async def fix_document_issues(self, country_id: str) -> OperationResult[Dict[str, int]]:
        """
        Seed the default checklist for a country that has none.

        Args:
            country_id: Country ID

        Returns:
            OperationResult; data holds the save counts when defaults were added
        """
        existing = await self.documents.get_by_country(country_id)
        if existing:
            logger.debug(f"Documents already exist for {country_id}, no fix needed")
            return OperationResult.ok("No fix required - documents already exist")

        logger.info(f"No documents found for {country_id}, creating default documents")
        defaults = [{**doc, "country_id": country_id} for doc in DEFAULT_DOCUMENTS]
        result = await self.documents.save(country_id, defaults)
        if not result.success:
            return OperationResult.fail(f"Failed to create default documents: {result.message}")
        return OperationResult.ok("Created default documents successfully", result.data)

    async def refresh_document_schema(self) -> OperationResult[Any]:
        """
        Refresh the document_checklist schema through the backend procedures.

        Tries ``refresh_document_checklist_schema`` first and falls back to
        ``fix_document_checklist``.

        Returns:
            OperationResult describing the outcome
        """
        try:
            data = await self.backend.rpc(Rpc.REFRESH_DOCUMENT_CHECKLIST_SCHEMA)
        except BackendError as e:
            logger.warning(f"Error refreshing document checklist schema via RPC: {e}")
            return await self._fix_document_checklist_table()

        if data:
            return OperationResult.ok("Document checklist schema refreshed successfully", data)
        return OperationResult.fail("Document checklist schema refresh returned no data")

    async def _fix_document_checklist_table(self) -> OperationResult[Any]:
        try:
            await self.backend.rpc(Rpc.FIX_DOCUMENT_CHECKLIST)
        except BackendError as e:
            logger.error(f"Error fixing document checklist table: {e}")
            return OperationResult.fail(
                f"Failed to fix document checklist table. {e.message}"
            )
        return OperationResult.ok("Document checklist table fixed successfully")

    async def save_country_data(
        self,
        country_id: str,
        package: PackagePayload,
        documents: Optional[Sequence[DocumentInput]] = None,
    ) -> OperationResult[Dict[str, Any]]:
        """
        Save the visa package and the checklist of a country.

        Args:
            country_id: Country ID
            package: Package fields
            documents: Edited checklist; skipped when empty

        Returns:
            OperationResult; data holds both partial results on success
        """
        package_data = package.model_dump() if hasattr(package, "model_dump") else dict(package)
        package_data.setdefault("country_id", country_id)
        package_result = await self.packages.save_visa_package(package_data)

        document_result: OperationResult[Any] = OperationResult.ok("No documents to save")
        if documents:
            document_result = await self.documents.save(country_id, documents)

        if not (package_result.success and document_result.success):
            message = "; ".join(
                result.message
                for result in (package_result, document_result)
                if not result.success and result.message
            )
            logger.error(f"Failed to save country data for {country_id}: {message}")
            return OperationResult.fail(message or "Failed to save some country data")

        self.cache.invalidate_country(country_id)
        return OperationResult.ok(
            "Country data saved successfully",
            {"package": package_result, "documents": document_result},
        )

    async def toggle_package_and_ensure_documents(
        self, country_id: str, is_active: bool
    ) -> OperationResult[Any]:
        """
        Toggle the package status and, when activating, make sure the
        country has a checklist.

        Args:
            country_id: Country ID
            is_active: Requested status

        Returns:
            The toggle result
        """
        result = await self.packages.toggle_visa_package_status(country_id, is_active)
        if not result.success:
            return result

        if is_active:
            await self.fix_document_issues(country_id)

        self.cache.invalidate_country(country_id)
        return result
