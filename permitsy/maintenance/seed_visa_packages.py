"""Seed one randomised visa package per country."""

import random
from typing import Any, Dict, List, Optional

from loguru import logger

from permitsy.constants import Tables
from permitsy.core.exceptions import BackendError
from permitsy.models.backend import BackendClient
from permitsy.repositories.base import utc_now


def build_seed_package(country: Dict[str, Any], rng: random.Random) -> Dict[str, Any]:
    """
    Random but realistic package for a country.

    Args:
        country: Row with id and name
        rng: Random source

    Returns:
        visa_packages row
    """
    government_fee = round(rng.random() * 100 + 50, 2)
    service_fee = round(rng.random() * 70 + 30, 2)
    processing_days = int(rng.random() * 20 + 5)
    now = utc_now()
    return {
        "country_id": country["id"],
        "name": f"{country['name']} Tourist Visa",
        "government_fee": government_fee,
        "service_fee": service_fee,
        "processing_days": processing_days,
        "processing_time": f"{processing_days} days",
        "total_price": round(government_fee + service_fee, 2),
        "created_at": now,
        "updated_at": now,
    }


async def seed_visa_packages(
    backend: BackendClient, rng: Optional[random.Random] = None
) -> List[Dict[str, Any]]:
    """
    Upsert a package for every country, keyed on country_id.

    Args:
        backend: Connected backend client
        rng: Random source (seed it for reproducible runs)

    Returns:
        Stored package rows, empty when nothing was written
    """
    rng = rng or random.Random()
    logger.info("Fetching countries...")
    try:
        countries = await backend.table(Tables.COUNTRIES).select("id,name").execute()
    except BackendError as e:
        logger.error(f"Error fetching countries: {e}")
        return []

    if not countries:
        logger.warning("No countries found in the database")
        return []

    logger.info(f"Found {len(countries)} countries, creating visa packages...")
    packages = [build_seed_package(country, rng) for country in countries]

    try:
        stored = await (
            backend.table(Tables.VISA_PACKAGES).upsert(packages, on_conflict="country_id").execute()
        )
    except BackendError as e:
        logger.error(f"Error creating visa packages: {e}")
        return []

    stored = stored or []
    logger.info(f"Successfully created {len(stored)} visa packages")
    for package in stored[:3]:
        logger.info(
            f"- {package.get('name')}: ${package.get('total_price')} "
            f"(Processing: {package.get('processing_days')} days)"
        )
    return stored
