"""Add-on service repository implementation."""

from typing import Any, Dict, List, Optional

from loguru import logger

from permitsy.constants import Tables
from permitsy.core.exceptions import BackendError
from permitsy.models.entities import AddonService
from permitsy.repositories.base import BaseRepository, utc_now, validate_rows


def discounted_price(service: AddonService) -> float:
    """
    Price after the service's percentage discount, rounded to cents.

    Args:
        service: Add-on service

    Returns:
        Discounted price (the list price when no discount applies)
    """
    discount = service.discount_percentage or 0
    if discount <= 0:
        return service.price
    discount = min(discount, 100)
    return round(service.price * (100 - discount) / 100, 2)


class AddonServiceRepository(BaseRepository[AddonService]):
    """Repository for the add-on service catalog."""

    table = Tables.ADDON_SERVICES

    async def get_all(self) -> List[AddonService]:
        """
        Get all add-on services ordered by name.

        Returns:
            List of services, empty on error
        """
        try:
            rows = await self._query().select("*").order("name").execute()
        except BackendError as e:
            logger.error(f"Error fetching addon services: {e}")
            return []
        return validate_rows(AddonService, rows, self.table)

    async def get_by_id(self, id: str) -> Optional[AddonService]:
        try:
            row = await self._query().select("*").eq("id", id).single().execute()
            return AddonService.model_validate(row)
        except (BackendError, ValueError) as e:
            logger.error(f"Error fetching addon service {id}: {e}")
            return None

    async def create(self, data: Dict[str, Any]) -> Optional[AddonService]:
        try:
            row = await self._query().insert(data).single().execute()
            service = AddonService.model_validate(row)
            logger.info(f"Addon service '{service.name}' created")
            return service
        except (BackendError, ValueError) as e:
            logger.error(f"Error creating addon service: {e}")
            return None

    async def update(self, id: str, data: Dict[str, Any]) -> Optional[AddonService]:
        payload = {**data, "updated_at": utc_now()}
        try:
            row = await self._query().update(payload).eq("id", id).single().execute()
            return AddonService.model_validate(row)
        except (BackendError, ValueError) as e:
            logger.error(f"Error updating addon service {id}: {e}")
            return None

    async def delete(self, id: str) -> bool:
        try:
            await self._query().delete().eq("id", id).execute()
            return True
        except BackendError as e:
            logger.error(f"Error deleting addon service {id}: {e}")
            return False
