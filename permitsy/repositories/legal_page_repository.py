"""Legal page repository implementation."""

from typing import Any, Dict, List, Optional

from loguru import logger

from permitsy.constants import Rpc, Tables
from permitsy.core.exceptions import BackendError
from permitsy.models.entities import LegalPage
from permitsy.repositories.base import BaseRepository, utc_now, validate_rows


class LegalPageRepository(BaseRepository[LegalPage]):
    """Repository for legal pages (terms, privacy, cookies, refunds)."""

    table = Tables.LEGAL_PAGES

    async def get_all(self) -> List[LegalPage]:
        """
        Get all legal pages ordered by title.

        Returns:
            List of legal pages, empty on error
        """
        try:
            rows = await self._query().select("*").order("title").execute()
        except BackendError as e:
            logger.error(f"Error fetching legal pages: {e}")
            return []
        return validate_rows(LegalPage, rows, self.table)

    async def get_by_slug(self, slug: str) -> Optional[LegalPage]:
        """
        Get a legal page by its slug.

        Args:
            slug: Page slug (e.g. privacy-policy)

        Returns:
            LegalPage or None when absent or on error
        """
        try:
            row = await self._query().select("*").eq("slug", slug).single().execute()
            return LegalPage.model_validate(row)
        except (BackendError, ValueError) as e:
            logger.error(f"Error fetching legal page with slug {slug}: {e}")
            return None

    async def get_by_id(self, id: str) -> Optional[LegalPage]:
        """
        Get a legal page by ID.

        Args:
            id: Page ID

        Returns:
            LegalPage or None when absent or on error
        """
        try:
            row = await self._query().select("*").eq("id", id).single().execute()
            return LegalPage.model_validate(row)
        except (BackendError, ValueError) as e:
            logger.error(f"Error fetching legal page with id {id}: {e}")
            return None

    async def create(self, data: Dict[str, Any]) -> Optional[LegalPage]:
        """
        Create a legal page, stamping last_updated.

        Args:
            data: Page fields (title, slug, content)

        Returns:
            Created LegalPage or None on error
        """
        payload = {**data, "last_updated": utc_now()}
        try:
            row = await self._query().insert(payload).single().execute()
            logger.info(f"Legal page '{payload.get('slug')}' created")
            return LegalPage.model_validate(row)
        except (BackendError, ValueError) as e:
            logger.error(f"Error creating legal page: {e}")
            return None

    async def update(self, id: str, data: Dict[str, Any]) -> Optional[LegalPage]:
        """
        Update a legal page, stamping last_updated.

        Args:
            id: Page ID
            data: Fields to merge

        Returns:
            Updated LegalPage or None on error
        """
        payload = {**data, "last_updated": utc_now()}
        try:
            row = await self._query().update(payload).eq("id", id).single().execute()
            return LegalPage.model_validate(row)
        except (BackendError, ValueError) as e:
            logger.error(f"Error updating legal page with id {id}: {e}")
            return None

    async def delete(self, id: str) -> bool:
        """
        Delete a legal page.

        Args:
            id: Page ID

        Returns:
            True if the request succeeded
        """
        try:
            await self._query().delete().eq("id", id).execute()
            return True
        except BackendError as e:
            logger.error(f"Error deleting legal page with id {id}: {e}")
            return False

    async def create_table(self) -> bool:
        """
        Ask the backend to create the legal_pages table if it does not exist.

        Returns:
            True if the procedure ran without error
        """
        try:
            await self.backend.rpc(Rpc.CREATE_LEGAL_PAGES_TABLE)
            return True
        except BackendError as e:
            logger.error(f"Error creating legal_pages table: {e}")
            return False
