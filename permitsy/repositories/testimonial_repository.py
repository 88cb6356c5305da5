"""Testimonial and approved visa repository implementation."""

from typing import Any, Dict, List, Optional

from loguru import logger

from permitsy.constants import Tables
from permitsy.core.exceptions import BackendError
from permitsy.models.entities import ApprovedVisa, Testimonial
from permitsy.repositories.base import BaseRepository, validate_rows


class TestimonialRepository(BaseRepository[Testimonial]):
    """Repository for client testimonials and the approved visa gallery."""

    table = Tables.TESTIMONIALS

    async def get_testimonials(self, only_approved: bool = True) -> List[Testimonial]:
        """
        Get testimonials, newest first.

        Args:
            only_approved: Return only rows with approved=true

        Returns:
            List of testimonials, empty on error
        """
        try:
            query = self._query().select("*").order("created_at", ascending=False)
            if only_approved:
                query = query.eq("approved", True)
            rows = await query.execute()
        except BackendError as e:
            logger.error(f"Error fetching testimonials: {e}")
            return []
        return validate_rows(Testimonial, rows, self.table)

    async def get_all(self) -> List[Testimonial]:
        """Get every testimonial regardless of approval."""
        return await self.get_testimonials(only_approved=False)

    async def get_by_id(self, id: str) -> Optional[Testimonial]:
        """
        Get testimonial by ID.

        Args:
            id: Testimonial ID

        Returns:
            Testimonial or None if not found
        """
        try:
            row = await self._query().select("*").eq("id", id).single().execute()
            return Testimonial.model_validate(row)
        except (BackendError, ValueError) as e:
            logger.error(f"Error fetching testimonial (ID: {id}): {e}")
            return None

    async def add_testimonial(self, data: Dict[str, Any]) -> Optional[Testimonial]:
        """
        Add a testimonial.

        Args:
            data: Testimonial fields without id/timestamps

        Returns:
            Created testimonial or None on error
        """
        try:
            row = await self._query().insert(data).single().execute()
            return Testimonial.model_validate(row)
        except (BackendError, ValueError) as e:
            logger.error(f"Error adding testimonial: {e}")
            return None

    async def create(self, data: Dict[str, Any]) -> Optional[Testimonial]:
        return await self.add_testimonial(data)

    async def update(self, id: str, data: Dict[str, Any]) -> Optional[Testimonial]:
        """
        Update testimonial fields.

        Args:
            id: Testimonial ID
            data: Fields to update

        Returns:
            Updated testimonial or None on error
        """
        try:
            row = await self._query().update(data).eq("id", id).single().execute()
            return Testimonial.model_validate(row)
        except (BackendError, ValueError) as e:
            logger.error(f"Error updating testimonial (ID: {id}): {e}")
            return None

    async def update_testimonial_status(self, id: str, approved: bool) -> Optional[Testimonial]:
        """
        Approve or reject a testimonial.

        Args:
            id: Testimonial ID
            approved: New approval flag

        Returns:
            Updated testimonial or None on error
        """
        return await self.update(id, {"approved": approved})

    async def delete(self, id: str) -> bool:
        """
        Delete a testimonial.

        Args:
            id: Testimonial ID

        Returns:
            True if deleted
        """
        try:
            await self._query().delete().eq("id", id).execute()
            return True
        except BackendError as e:
            logger.error(f"Error deleting testimonial (ID: {id}): {e}")
            return False

    async def delete_testimonial(self, id: str) -> bool:
        return await self.delete(id)

    # Approved visa gallery

    async def get_approved_visas(self) -> List[ApprovedVisa]:
        """
        Get approved visas, most recent approval first.

        Returns:
            List of approved visas, empty on error
        """
        try:
            rows = await (
                self._query(Tables.APPROVED_VISAS)
                .select("*")
                .order("approval_date", ascending=False)
                .execute()
            )
        except BackendError as e:
            logger.error(f"Error fetching approved visas: {e}")
            return []
        return validate_rows(ApprovedVisa, rows, Tables.APPROVED_VISAS)

    async def add_approved_visa(self, data: Dict[str, Any]) -> Optional[ApprovedVisa]:
        """
        Add an approved visa to the gallery.

        Args:
            data: Approved visa fields

        Returns:
            Created entry or None on error
        """
        try:
            row = await self._query(Tables.APPROVED_VISAS).insert(data).single().execute()
            return ApprovedVisa.model_validate(row)
        except (BackendError, ValueError) as e:
            logger.error(f"Error adding approved visa: {e}")
            return None

    async def delete_approved_visa(self, id: str) -> bool:
        """
        Remove an approved visa from the gallery.

        Args:
            id: Approved visa ID

        Returns:
            True if deleted
        """
        try:
            await self._query(Tables.APPROVED_VISAS).delete().eq("id", id).execute()
            return True
        except BackendError as e:
            logger.error(f"Error deleting approved visa (ID: {id}): {e}")
            return False
