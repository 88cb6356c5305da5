"""Visa package repository implementation."""

from typing import Any, Dict, List, Optional

from permitsy.constants import Tables
from permitsy.models.entities import VisaPackageRecord
from permitsy.repositories.base import BaseRepository


class VisaPackageRepository(BaseRepository[VisaPackageRecord]):
    """
    Persisted-shape access to visa_packages.

    ``BackendError`` propagates; ``VisaPackageService`` turns it into a result.
    """

    table = Tables.VISA_PACKAGES

    async def list_by_country(self, country_id: str, columns: str = "*") -> List[Dict[str, Any]]:
        """
        Raw rows for a country.

        Args:
            country_id: Country ID
            columns: Column list to select

        Returns:
            List of row dicts
        """
        rows = await self._query().select(columns).eq("country_id", country_id).execute()
        return rows or []

    async def latest_for_country(self, country_id: str) -> Optional[VisaPackageRecord]:
        """
        Newest package for a country.

        Args:
            country_id: Country ID

        Returns:
            VisaPackageRecord or None when the country has no package
        """
        rows = await (
            self._query()
            .select("*")
            .eq("country_id", country_id)
            .order("created_at", ascending=False)
            .limit(1)
            .execute()
        )
        if not rows:
            return None
        return VisaPackageRecord.model_validate(rows[0])

    async def get_by_id(self, id: str) -> Optional[VisaPackageRecord]:
        rows = await self._query().select("*").eq("id", id).limit(1).execute()
        if not rows:
            return None
        return VisaPackageRecord.model_validate(rows[0])

    async def get_all(self) -> List[VisaPackageRecord]:
        rows = await self._query().select("*").order("created_at", ascending=False).execute()
        return [VisaPackageRecord.model_validate(row) for row in rows or []]

    async def insert(self, row: Dict[str, Any]) -> VisaPackageRecord:
        """
        Insert a package row.

        Args:
            row: Persisted columns

        Returns:
            Stored record
        """
        stored = await self._query().insert(row).single().execute()
        return VisaPackageRecord.model_validate(stored)

    async def update_by_id(self, id: str, row: Dict[str, Any]) -> VisaPackageRecord:
        """
        Update the package with the given ID.

        Args:
            id: Package ID
            row: Persisted columns

        Returns:
            Stored record
        """
        stored = await self._query().update(row).eq("id", id).single().execute()
        return VisaPackageRecord.model_validate(stored)

    async def update_by_country(self, country_id: str, row: Dict[str, Any]) -> VisaPackageRecord:
        """
        Update the package belonging to a country.

        Args:
            country_id: Country ID
            row: Persisted columns

        Returns:
            Stored record
        """
        stored = await self._query().update(row).eq("country_id", country_id).single().execute()
        return VisaPackageRecord.model_validate(stored)

    async def create(self, data: Dict[str, Any]) -> Optional[VisaPackageRecord]:
        return await self.insert(data)

    async def update(self, id: str, data: Dict[str, Any]) -> Optional[VisaPackageRecord]:
        return await self.update_by_id(id, data)

    async def delete(self, id: str) -> bool:
        await self._query().delete().eq("id", id).execute()
        return True
