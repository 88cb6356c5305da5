"""Document checklist repository implementation."""

import uuid
from typing import Any, Dict, List, Optional, Sequence, Union

from loguru import logger

from permitsy.constants import Tables
from permitsy.core.exceptions import BackendError
from permitsy.core.result import OperationResult
from permitsy.models.entities import DocumentChecklistItem
from permitsy.repositories.base import BaseRepository, validate_rows

# Ids handed out to unsaved rows by the admin editor
TEMPORARY_ID_PREFIXES = ("new-", "temp-")

DocumentInput = Union[DocumentChecklistItem, Dict[str, Any]]


class DocumentChecklistRepository(BaseRepository[DocumentChecklistItem]):
    """Repository for per-country required documents."""

    table = Tables.DOCUMENT_CHECKLIST

    async def get_by_country(self, country_id: str) -> List[DocumentChecklistItem]:
        """
        Get the checklist of a country, oldest first.

        Args:
            country_id: Country ID

        Returns:
            Checklist items (required defaults to true), empty on error
        """
        try:
            rows = await (
                self._query()
                .select("*")
                .eq("country_id", country_id)
                .order("created_at")
                .execute()
            )
        except BackendError as e:
            logger.error(f"Error fetching document checklist for {country_id}: {e}")
            return []
        return validate_rows(DocumentChecklistItem, rows, self.table)

    async def save(
        self, country_id: str, documents: Sequence[DocumentInput]
    ) -> OperationResult[Dict[str, int]]:
        """
        Reconcile the stored checklist of a country with an edited list.

        Rows missing from ``documents`` are deleted, known rows are updated
        and everything else is inserted. Items with a blank name are skipped.

        Args:
            country_id: Country ID
            documents: Edited checklist

        Returns:
            OperationResult with deleted/inserted/updated counts
        """
        try:
            existing = await self._query().select("id").eq("country_id", country_id).execute()
        except BackendError as e:
            logger.error(f"Error fetching existing documents for {country_id}: {e}")
            return OperationResult.fail(f"Failed to fetch existing documents: {e.message}")

        existing_ids = {row["id"] for row in existing or []}
        processed_ids = set()
        inserts: List[Dict[str, Any]] = []
        updates: List[Dict[str, Any]] = []

        for raw in documents:
            doc = DocumentChecklistItem.model_validate(raw)
            if not doc.document_name.strip():
                continue

            doc_id = doc.id or f"new-{uuid.uuid4().hex[:12]}"
            processed_ids.add(doc_id)
            row: Dict[str, Any] = {
                "id": doc_id,
                "country_id": country_id,
                "document_name": doc.document_name,
                "document_description": doc.document_description,
                "required": bool(doc.required),
            }

            if doc_id in existing_ids and not doc.is_new:
                updates.append(row)
            else:
                if doc_id.startswith(TEMPORARY_ID_PREFIXES):
                    del row["id"]
                inserts.append(row)

        delete_ids = [doc_id for doc_id in existing_ids if doc_id not in processed_ids]
        last_error: Optional[BackendError] = None

        if delete_ids:
            logger.debug(f"Deleting {len(delete_ids)} documents for {country_id}")
            try:
                await self._query().delete().in_("id", delete_ids).execute()
            except BackendError as e:
                logger.error(f"Error deleting documents: {e}")
                last_error = e

        if inserts:
            logger.debug(f"Inserting {len(inserts)} documents for {country_id}")
            try:
                await self._query().insert(inserts, returning=False).execute()
            except BackendError as e:
                logger.error(f"Error inserting documents: {e}")
                last_error = e

        for row in updates:
            try:
                await (
                    self._query()
                    .update(
                        {
                            "document_name": row["document_name"],
                            "document_description": row["document_description"],
                            "required": row["required"],
                        },
                        returning=False,
                    )
                    .eq("id", row["id"])
                    .execute()
                )
            except BackendError as e:
                logger.error(f"Error updating document {row['id']}: {e}")
                last_error = e

        if last_error is not None:
            return OperationResult.fail(last_error.message or "Failed to save documents")

        counts = {"deleted": len(delete_ids), "inserted": len(inserts), "updated": len(updates)}
        logger.info(f"Documents saved for {country_id}: {counts}")
        return OperationResult.ok("Documents saved successfully", counts)

    async def get_by_id(self, id: str) -> Optional[DocumentChecklistItem]:
        try:
            row = await self._query().select("*").eq("id", id).single().execute()
            return DocumentChecklistItem.model_validate(row)
        except (BackendError, ValueError) as e:
            logger.error(f"Error fetching document {id}: {e}")
            return None

    async def get_all(self) -> List[DocumentChecklistItem]:
        try:
            rows = await self._query().select("*").order("created_at").execute()
        except BackendError as e:
            logger.error(f"Error fetching documents: {e}")
            return []
        return validate_rows(DocumentChecklistItem, rows, self.table)

    async def create(self, data: Dict[str, Any]) -> Optional[DocumentChecklistItem]:
        try:
            row = await self._query().insert(data).single().execute()
            return DocumentChecklistItem.model_validate(row)
        except (BackendError, ValueError) as e:
            logger.error(f"Error creating document: {e}")
            return None

    async def create_many(self, rows: List[Dict[str, Any]]) -> bool:
        """
        Insert several checklist rows in one request.

        Args:
            rows: Rows to insert

        Returns:
            True if inserted
        """
        try:
            await self._query().insert(rows, returning=False).execute()
            return True
        except BackendError as e:
            logger.error(f"Error inserting documents: {e}")
            return False

    async def update(self, id: str, data: Dict[str, Any]) -> Optional[DocumentChecklistItem]:
        try:
            row = await self._query().update(data).eq("id", id).single().execute()
            return DocumentChecklistItem.model_validate(row)
        except (BackendError, ValueError) as e:
            logger.error(f"Error updating document {id}: {e}")
            return None

    async def delete(self, id: str) -> bool:
        try:
            await self._query().delete().eq("id", id).execute()
            return True
        except BackendError as e:
            logger.error(f"Error deleting document {id}: {e}")
            return False
