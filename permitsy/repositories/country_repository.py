"""Country repository implementation."""

from typing import Any, Dict, List, Optional

from loguru import logger

from permitsy.constants import CountryDefaults, Tables
from permitsy.core.exceptions import BackendError
from permitsy.models.entities import (
    Country,
    CountryDetail,
    DocumentChecklistItem,
    PricingTier,
)
from permitsy.repositories.base import BaseRepository, validate_rows

POPULAR_COLUMNS = "id,name,flag,popularity"


class CountryRepository(BaseRepository[Country]):
    """Repository for destination countries and their detail pages."""

    table = Tables.COUNTRIES

    async def get_all(self) -> List[Country]:
        """
        Get all countries ordered by name.

        Returns:
            List of countries, empty on error
        """
        try:
            rows = await self._query().select("*").order("name").execute()
        except BackendError as e:
            logger.error(f"Error fetching countries: {e}")
            return []
        return validate_rows(Country, rows, self.table)

    async def get_popular(self, limit: int = CountryDefaults.POPULAR_LIMIT) -> List[Country]:
        """
        Get the most popular countries for the home page grid.

        The countries table carries no price column, so every entry gets the
        default starting price unless the row already has one.

        Args:
            limit: Maximum number of countries

        Returns:
            Countries ordered by popularity, empty on error
        """
        try:
            rows = await (
                self._query()
                .select(POPULAR_COLUMNS)
                .order("popularity", ascending=False)
                .limit(limit)
                .execute()
            )
        except BackendError as e:
            logger.error(f"Error fetching popular countries: {e}")
            return []

        countries = validate_rows(Country, rows, self.table)
        for country in countries:
            if country.min_price is None:
                country.min_price = CountryDefaults.MIN_PRICE
        return countries

    async def get_by_id(self, id: str) -> Optional[Country]:
        """
        Get country by ID.

        Args:
            id: Country ID

        Returns:
            Country or None if not found
        """
        try:
            row = await self._query().select("*").eq("id", id).single().execute()
            return Country.model_validate(row)
        except (BackendError, ValueError) as e:
            logger.error(f"Error fetching country {id}: {e}")
            return None

    async def get_detail(self, id: Optional[str]) -> Optional[CountryDetail]:
        """
        Assemble a country page: the country row, its document checklist and
        its pricing tiers.

        JSON columns are normalised on the way in: non-list steps and FAQ
        become empty lists, non-object embassy details become a blank block
        and null lists become empty lists.

        Args:
            id: Country ID

        Returns:
            CountryDetail or None when the id is empty, unknown or on error
        """
        if not id:
            return None

        try:
            country = await self._query().select("*").eq("id", id).single().execute()
            documents = await (
                self._query(Tables.DOCUMENT_CHECKLIST).select("*").eq("country_id", id).execute()
            )
            tiers = await (
                self._query(Tables.VISA_PRICING_TIERS).select("*").eq("country_id", id).execute()
            )
        except BackendError as e:
            logger.error(f"Error fetching country data for {id}: {e}")
            return None

        if not country:
            return None

        try:
            return CountryDetail.model_validate(
                {
                    **country,
                    "documents": validate_rows(
                        DocumentChecklistItem, documents, Tables.DOCUMENT_CHECKLIST
                    ),
                    "pricing_tiers": validate_rows(PricingTier, tiers, Tables.VISA_PRICING_TIERS),
                }
            )
        except ValueError as e:
            logger.error(f"Malformed country data for {id}: {e}")
            return None

    async def create(self, data: Dict[str, Any]) -> Optional[Country]:
        try:
            row = await self._query().insert(data).single().execute()
            country = Country.model_validate(row)
            logger.info(f"Country '{country.name}' created")
            return country
        except (BackendError, ValueError) as e:
            logger.error(f"Error creating country: {e}")
            return None

    async def update(self, id: str, data: Dict[str, Any]) -> Optional[Country]:
        try:
            row = await self._query().update(data).eq("id", id).single().execute()
            return Country.model_validate(row)
        except (BackendError, ValueError) as e:
            logger.error(f"Error updating country {id}: {e}")
            return None

    async def delete(self, id: str) -> bool:
        try:
            await self._query().delete().eq("id", id).execute()
            logger.info(f"Country {id} deleted")
            return True
        except BackendError as e:
            logger.error(f"Error deleting country {id}: {e}")
            return False
